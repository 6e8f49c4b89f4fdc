"""
App Store Connect Client - Vendor lookup, app listing and sales reports.

Uses App Store Connect API v1.
https://developer.apple.com/documentation/appstoreconnectapi/download-sales-and-trends-reports
"""

from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

import httpx
from pydantic import ValidationError
from structlog import get_logger

from appstore_reports.exceptions import (
    APIError,
    DecodeError,
    NotFoundError,
    TransportError,
)
from appstore_reports.models.api import AppsResponse, VendorsResponse
from appstore_reports.models.credentials import DEFAULT_BASE_URL, ClientCredentials
from appstore_reports.models.sales import SalesReportRow
from appstore_reports.observability.logging import log_context
from appstore_reports.services.report_decoder import EmptySalesReport, SalesReportDecoder
from appstore_reports.services.token_issuer import TokenIssuer
from appstore_reports.services.transport import AuthenticatedTransport

logger = get_logger(__name__)

GZIP_ACCEPT = "application/a-gzip"


def _iter_body(response: httpx.Response) -> Iterator[bytes]:
    """Yield body chunks, mapping network failures to TransportError."""
    try:
        yield from response.iter_bytes()
    except httpx.TransportError as exc:
        logger.error("sales_report_body_read_failed", error=str(exc))
        raise TransportError(f"{type(exc).__name__}: {exc}") from exc


def _sales_report_params(vendor_number: str, report_date: str) -> dict[str, str]:
    """Filter query for a daily SALES/SUMMARY report."""
    return {
        "filter[frequency]": "DAILY",
        "filter[reportDate]": report_date,
        "filter[reportSubType]": "SUMMARY",
        "filter[reportType]": "SALES",
        "filter[vendorNumber]": vendor_number,
    }


class AppStoreConnectClient:
    """
    App Store Connect API client.

    Every call is signed with a freshly issued token. The base URL is fixed
    at construction; pass base_url to target a mock server.

    Usage:
        with AppStoreConnectClient(credentials) as client:
            vendor = client.get_first_vendor_number()
            rows = client.download_sales_report(vendor, "2026-02-01")
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.transport = AuthenticatedTransport(
            TokenIssuer(credentials),
            base_url,
            http_client=http_client,
        )

        logger.info(
            "appstore_connect_client_initialized",
            key_id=credentials.key_id,
            base_url=self.transport.base_url,
        )

    @property
    def base_url(self) -> str:
        """Base URL all endpoint paths are relative to."""
        return self.transport.base_url

    def list_apps(self, limit: int = 20, sort: str = "name") -> AppsResponse:
        """
        List apps associated with the account (first page only).

        Raises:
            APIError: If the API returns a non-200 status
            DecodeError: If the body is not a valid apps document
        """
        request = self.transport.build_request(
            "GET", "/apps", params={"limit": str(limit), "sort": sort}
        )
        response = self.transport.send(request)

        if response.status_code != 200:
            logger.error("list_apps_failed", status=response.status_code, error=response.text)
            raise APIError(response.status_code, response.text)

        try:
            result = AppsResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(f"invalid apps response: {exc}") from exc

        logger.info("apps_listed", count=len(result.data))
        return result

    def get_first_vendor_number(self) -> str:
        """
        Get the vendor number of the first vendor on the account.

        Returns:
            Vendor number used to scope report requests

        Raises:
            APIError: If the API returns a non-200 status
            NotFoundError: If the account has no vendors
            DecodeError: If the body is not a valid vendors document
        """
        request = self.transport.build_request("GET", "/vendors")
        response = self.transport.send(request)

        if response.status_code != 200:
            logger.error("vendor_lookup_failed", status=response.status_code, error=response.text)
            raise APIError(response.status_code, response.text)

        try:
            result = VendorsResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(f"invalid vendors response: {exc}") from exc

        if not result.data:
            raise NotFoundError("no vendors found for this account")

        vendor_number = result.data[0].attributes.vendor_number
        logger.info("vendor_lookup_completed", vendor_count=len(result.data))
        return vendor_number

    @contextmanager
    def stream_sales_report(
        self,
        vendor_number: str,
        report_date: str,
    ) -> Iterator[SalesReportDecoder | EmptySalesReport]:
        """
        Open the daily sales summary report for lazy consumption.

        Yields a SalesReportDecoder while the response stays open, or an
        EmptySalesReport when the report is not published yet (404). Both
        expose skipped_rows. The date is passed through verbatim (YYYY-MM-DD).

        Raises:
            APIError: If the API returns any other non-200 status
            DecodeError: If the body is not a gzip report
        """
        request = self.transport.build_request(
            "GET",
            "/salesReports",
            params=_sales_report_params(vendor_number, report_date),
            headers={"Accept": GZIP_ACCEPT},
        )

        with log_context(vendor_number=vendor_number, report_date=report_date):
            response = self.transport.send(request, stream=True)
            try:
                if response.status_code == 404:
                    # Reports are published asynchronously
                    logger.info("sales_report_not_ready")
                    yield EmptySalesReport()
                    return

                if response.status_code != 200:
                    body = response.read().decode("utf-8", errors="replace")
                    logger.error(
                        "sales_report_download_failed",
                        status=response.status_code,
                        error=body,
                    )
                    raise APIError(response.status_code, body)

                with SalesReportDecoder(_iter_body(response)) as decoder:
                    yield decoder

                logger.info("sales_report_streamed", skipped_rows=decoder.skipped_rows)
            finally:
                response.close()

    def download_sales_report(self, vendor_number: str, report_date: str) -> list[SalesReportRow]:
        """
        Download and decode the daily sales summary report.

        Args:
            vendor_number: Vendor number from get_first_vendor_number()
            report_date: Report date as YYYY-MM-DD

        Returns:
            Well-formed rows; empty when the report is not published yet
        """
        with self.stream_sales_report(vendor_number, report_date) as rows:
            result = list(rows)

        logger.info(
            "sales_report_downloaded",
            vendor_number=vendor_number,
            report_date=report_date,
            row_count=len(result),
        )
        return result

    def close(self) -> None:
        """Close the underlying HTTP client if it was created here."""
        self.transport.close()

    def __enter__(self) -> "AppStoreConnectClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
