"""
Application Configuration - Pydantic Settings for type-safe config.

FAIL FAST - Missing credentials are reported together before any request.
"""

import base64
import binascii
import sys
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from appstore_reports.exceptions import ConfigError
from appstore_reports.models.credentials import DEFAULT_BASE_URL, ClientCredentials


class Settings(BaseSettings):
    """Settings loaded from APPSTORE_* environment variables or .env."""

    # API key from App Store Connect > Users and Access > Integrations
    key_id: str = ""
    issuer_id: str = ""
    private_key: str = ""  # .p8 contents, raw PEM or base64 of the PEM
    private_key_path: Path | None = None  # Alternative to private_key

    base_url: str = DEFAULT_BASE_URL

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console
    service_name: str = "appstore-reports"

    model_config = SettingsConfigDict(
        env_prefix="APPSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate credential configuration.

        Every problem is listed at once instead of failing on the first.
        """
        errors: list[str] = []

        if not self.key_id:
            errors.append("APPSTORE_KEY_ID is required but empty or missing")
        if not self.issuer_id:
            errors.append("APPSTORE_ISSUER_ID is required but empty or missing")
        if not self.private_key and self.private_key_path is None:
            errors.append("APPSTORE_PRIVATE_KEY or APPSTORE_PRIVATE_KEY_PATH is required")
        if self.private_key_path is not None and not self.private_key_path.is_file():
            errors.append(f"APPSTORE_PRIVATE_KEY_PATH does not exist: {self.private_key_path}")
        if self.log_format not in ("json", "console"):
            errors.append(f"APPSTORE_LOG_FORMAT must be 'json' or 'console', got: {self.log_format}")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CONFIGURATION ERROR",
                    "=" * 60,
                    *[f"  - {e}" for e in errors],
                    "=" * 60,
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigError(error_msg)

        return self

    def private_key_pem(self) -> bytes:
        """Resolve the PEM key from the file path or the inline value."""
        if self.private_key_path is not None:
            return self.private_key_path.read_bytes()

        value = self.private_key.strip()
        if value.startswith("-----BEGIN"):
            # Env files often carry the key on one line with literal \n
            return value.replace("\\n", "\n").encode("utf-8")

        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise ConfigError("APPSTORE_PRIVATE_KEY is neither PEM nor base64") from exc

    def credentials(self) -> ClientCredentials:
        """Build immutable client credentials from settings."""
        return ClientCredentials(
            key_id=self.key_id,
            issuer_id=self.issuer_id,
            private_key=self.private_key_pem(),
        )


@lru_cache
def get_settings() -> Settings:
    """Get application settings instance (loaded once)."""
    return Settings()
