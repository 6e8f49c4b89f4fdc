"""
Sales Report Decoder - gzip + tab-separated parsing of SUMMARY reports.

Apple delivers reports as gzip-compressed tab-separated text. Fields are
not RFC 4180 quoted, so quote characters are read literally, and only LF
ends a line. Malformed lines are dropped and counted; only stream-level
failures raise.
"""

import csv
import gzip
import io
import zlib
from collections.abc import Iterable, Iterator
from decimal import Decimal, InvalidOperation
from types import TracebackType

from structlog import get_logger

from appstore_reports.exceptions import DecodeError
from appstore_reports.models.sales import SUMMARY_REPORT_MIN_COLUMNS, SalesReportRow

logger = get_logger(__name__)

# Errors raised by gzip/zlib on corrupt or truncated input
_STREAM_ERRORS = (OSError, EOFError, zlib.error)


class _ChunkStream(io.RawIOBase):
    """Read-only file object over an iterator of byte chunks."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: memoryview) -> int:  # type: ignore[override]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


def _report_lines(text: Iterable[str]) -> Iterator[str]:
    """Strip line endings; a CR inside a line becomes a space."""
    for line in text:
        yield line.rstrip("\r\n").replace("\r", " ")


def parse_units(value: str) -> int:
    """Parse the units column, defaulting to 0."""
    try:
        return int(value)
    except ValueError:
        return 0


def parse_proceeds(value: str) -> Decimal:
    """Parse the developer proceeds column, defaulting to 0."""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def parse_record(record: list[str]) -> SalesReportRow | None:
    """
    Map a report line onto a SalesReportRow.

    Returns None when the line is too short to be mapped without shifting
    column meaning. Columns 1, 3, 5 and 10 are not read.
    """
    if len(record) < SUMMARY_REPORT_MIN_COLUMNS:
        return None

    return SalesReportRow(
        provider_code=record[0],
        sku=record[2],
        title=record[4],
        product_type=record[6],
        units=parse_units(record[7]),
        proceeds=parse_proceeds(record[8]),
        begin_date=record[9],
        customer_currency=record[11],
        country_code=record[12],
    )


class SalesReportDecoder:
    """
    Lazy iterator of SalesReportRow over a gzip-compressed byte stream.

    The header line is consumed on construction, so a stream that is not
    gzip at all fails before any row is produced. The sequence is not
    restartable.

    Usage:
        decoder = SalesReportDecoder(response.iter_bytes())
        rows = list(decoder)
        logger.info("decoded", skipped=decoder.skipped_rows)
    """

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self.skipped_rows = 0
        self.header: list[str] = []

        self._gzip = gzip.GzipFile(fileobj=io.BufferedReader(_ChunkStream(chunks)), mode="rb")
        text = io.TextIOWrapper(self._gzip, encoding="utf-8", errors="replace", newline="\n")
        self._reader = csv.reader(_report_lines(text), delimiter="\t", quoting=csv.QUOTE_NONE)

        try:
            self.header = next(self._reader)
        except StopIteration:
            self.close()
            raise DecodeError("report is empty") from None
        except csv.Error as exc:
            # Header is discarded either way
            logger.warning("sales_report_header_unreadable", error=str(exc))
        except _STREAM_ERRORS as exc:
            self.close()
            raise DecodeError(f"failed to read gzip: {exc}") from exc

    def __iter__(self) -> Iterator[SalesReportRow]:
        return self

    def __next__(self) -> SalesReportRow:
        if self._gzip.closed:
            raise StopIteration
        while True:
            try:
                record = next(self._reader)
            except StopIteration:
                self.close()
                raise
            except csv.Error as exc:
                self.skipped_rows += 1
                logger.debug("sales_report_line_unreadable", error=str(exc))
                continue
            except _STREAM_ERRORS as exc:
                self.close()
                raise DecodeError(f"corrupt report stream: {exc}") from exc

            if not record:
                continue

            row = parse_record(record)
            if row is None:
                self.skipped_rows += 1
                logger.debug("sales_report_line_too_short", columns=len(record))
                continue
            return row

    def close(self) -> None:
        """Release the decompressor."""
        self._gzip.close()

    def __enter__(self) -> "SalesReportDecoder":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class EmptySalesReport:
    """Row iterator for a report that has not been published yet."""

    skipped_rows = 0

    def __iter__(self) -> Iterator[SalesReportRow]:
        return self

    def __next__(self) -> SalesReportRow:
        raise StopIteration
