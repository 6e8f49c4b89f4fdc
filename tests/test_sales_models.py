"""
Tests for sales report and API response models.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from appstore_reports.models.api import AppsResponse, VendorsResponse
from appstore_reports.models.sales import SalesReportRow


class TestSalesReportRow:
    """Tests for SalesReportRow."""

    def test_defaults(self):
        """Unset fields are empty strings and zero amounts."""
        row = SalesReportRow()

        assert row.sku == ""
        assert row.units == 0
        assert row.proceeds == Decimal("0")

    def test_to_json_dict_renders_decimal_as_string(self):
        """Proceeds keep their exact representation in JSON output."""
        row = SalesReportRow(sku="SKU-1", units=3, proceeds=Decimal("0.70"))

        data = row.to_json_dict()

        assert data["proceeds"] == "0.70"
        assert data["units"] == 3
        assert data["sku"] == "SKU-1"
        assert set(data) >= {"provider_country", "developer", "version", "end_date"}

    def test_immutable(self):
        """SalesReportRow is immutable."""
        row = SalesReportRow(sku="SKU-1")

        with pytest.raises(AttributeError):
            row.sku = "SKU-2"  # type: ignore[misc]


class TestVendorsResponse:
    """Tests for the vendor listing shape."""

    def test_parses_vendor_number(self):
        """vendorNumber is read from attributes."""
        result = VendorsResponse.model_validate(
            {"data": [{"id": "v1", "type": "vendors", "attributes": {"vendorNumber": "888888"}}]}
        )

        assert result.data[0].attributes.vendor_number == "888888"

    def test_missing_data_is_empty(self):
        """A body without data has no vendors."""
        assert VendorsResponse.model_validate({}).data == []

    def test_missing_vendor_number_rejected(self):
        """Entries without a vendor number are invalid."""
        with pytest.raises(ValidationError):
            VendorsResponse.model_validate({"data": [{"id": "v1", "attributes": {}}]})


class TestAppsResponse:
    """Tests for the app listing shape."""

    def test_links_and_paging(self):
        """Links and paging metadata are decoded."""
        result = AppsResponse.model_validate(
            {
                "data": [],
                "links": {"self": "https://api/v1/apps", "next": "https://api/v1/apps?cursor=x"},
                "meta": {"paging": {"total": 42, "limit": 20}},
            }
        )

        assert result.links.self_link == "https://api/v1/apps"
        assert result.links.next == "https://api/v1/apps?cursor=x"
        assert result.meta.paging.total == 42
