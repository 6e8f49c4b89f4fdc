"""
Credential models - Immutable identity used to sign API tokens.
"""

from dataclasses import dataclass

from appstore_reports.exceptions import ConfigError

DEFAULT_BASE_URL = "https://api.appstoreconnect.apple.com/v1"
TOKEN_AUDIENCE = "appstoreconnect-v1"


@dataclass(frozen=True)
class ClientCredentials:
    """App Store Connect API key identity.

    The private key is the PEM content of the .p8 file downloaded from
    App Store Connect.
    """

    key_id: str  # Key ID from App Store Connect
    issuer_id: str  # Issuer ID from App Store Connect
    private_key: bytes  # .p8 contents (PEM, PKCS8)

    def __post_init__(self) -> None:
        """Validate credential fields."""
        if isinstance(self.private_key, str):
            object.__setattr__(self, "private_key", self.private_key.encode("utf-8"))
        if not self.key_id:
            raise ConfigError("key_id is required")
        if not self.issuer_id:
            raise ConfigError("issuer_id is required")
        if not self.private_key:
            raise ConfigError("private_key is required")

    def __repr__(self) -> str:
        return f"ClientCredentials(key_id={self.key_id!r}, issuer_id={self.issuer_id!r})"
