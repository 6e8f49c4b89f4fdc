"""
Sales report domain models - Immutable rows decoded from the SUMMARY report.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal

# Apple publishes the daily SUMMARY report with at least this many columns.
SUMMARY_REPORT_MIN_COLUMNS = 13


@dataclass(frozen=True)
class SalesReportRow:
    """Single line of a daily sales summary report.

    provider_country, developer, version and end_date are part of the
    report layout but are not read from the wire yet; they stay empty.
    """

    provider_code: str = ""
    provider_country: str = ""
    sku: str = ""
    developer: str = ""
    title: str = ""
    version: str = ""
    product_type: str = ""  # "1" = Free, "F1" = Paid, "IA1" = In-App, etc.
    units: int = 0
    proceeds: Decimal = Decimal("0")  # Developer proceeds per unit
    begin_date: str = ""  # YYYY-MM-DD
    end_date: str = ""  # YYYY-MM-DD
    customer_currency: str = ""
    country_code: str = ""

    def to_json_dict(self) -> dict[str, object]:
        """Serialize to JSON-compatible values (Decimal rendered as string)."""
        data = asdict(self)
        data["proceeds"] = str(self.proceeds)
        return data
