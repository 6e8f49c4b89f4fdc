"""
API Models - Pydantic models for App Store Connect JSON responses.

Only the attributes the client reads are declared; unknown fields are ignored.
"""

from typing import Any

from pydantic import BaseModel, Field

# ============================================================================
# Vendor Models
# ============================================================================


class _VendorAttributes(BaseModel):
    """Attributes of a vendor entry."""

    vendor_number: str = Field(..., alias="vendorNumber")


class _Vendor(BaseModel):
    """Entry of GET /vendors."""

    id: str = ""
    attributes: _VendorAttributes


class VendorsResponse(BaseModel):
    """GET /vendors response body."""

    data: list[_Vendor] = Field(default_factory=list)


# ============================================================================
# App Models
# ============================================================================


class AppAttributes(BaseModel):
    """Attributes of an app resource."""

    name: str = ""
    bundle_id: str = Field("", alias="bundleId")
    sku: str = ""
    primary_locale: str = Field("", alias="primaryLocale")
    is_orphaned: bool = Field(False, alias="isOrphaned")
    content_rights: str | None = Field(None, alias="contentRights")
    asset_delivery_state: dict[str, Any] | None = Field(None, alias="assetDeliveryState")


class App(BaseModel):
    """App resource."""

    type: str = "apps"
    id: str
    attributes: AppAttributes = Field(default_factory=AppAttributes)


class Links(BaseModel):
    """Resource links."""

    self_link: str = Field("", alias="self")
    next: str | None = None


class Paging(BaseModel):
    """Paging information."""

    total: int = 0
    limit: int = 0


class Meta(BaseModel):
    """Response metadata."""

    paging: Paging = Field(default_factory=Paging)


class AppsResponse(BaseModel):
    """GET /apps response body."""

    data: list[App] = Field(default_factory=list)
    links: Links = Field(default_factory=Links)
    meta: Meta = Field(default_factory=Meta)
