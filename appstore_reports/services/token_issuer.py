"""
Token Issuer - ES256 bearer tokens for the App Store Connect API.

Tokens are never cached: every call parses the key and signs a new JWT
valid for 20 minutes from issuance.
https://developer.apple.com/documentation/appstoreconnectapi/generating-tokens-for-api-requests
"""

import re
import time
from collections.abc import Callable

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from structlog import get_logger

from appstore_reports.exceptions import ConfigError, SigningError
from appstore_reports.models.credentials import TOKEN_AUDIENCE, ClientCredentials

logger = get_logger(__name__)

TOKEN_LIFETIME_SECONDS = 1200  # 20 minutes, Apple's maximum
SIGNING_ALGORITHM = "ES256"

_PEM_HEADER = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----")

# PKCS8 blocks carry the generic label; SEC1 uses "EC PRIVATE KEY"
_PKCS8_LABEL = b"PRIVATE KEY"


def load_signing_key(pem: bytes) -> ec.EllipticCurvePrivateKey:
    """
    Decode a PEM-wrapped PKCS8 P-256 private key.

    Raises:
        ConfigError: If no PEM block is found, or its content is not a
            PKCS8 EC private key on P-256
    """
    match = _PEM_HEADER.search(pem)
    if match is None:
        raise ConfigError("failed to parse PEM block from private key")

    label = match.group(1)
    if label != _PKCS8_LABEL:
        raise ConfigError(f"invalid private key: expected PKCS8, got {label.decode()!r}")

    try:
        key = serialization.load_pem_private_key(pem[match.start() :], password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise ConfigError(f"invalid private key: {exc}") from exc

    if not isinstance(key, ec.EllipticCurvePrivateKey) or not isinstance(
        key.curve, ec.SECP256R1
    ):
        raise ConfigError("invalid private key: ES256 requires a P-256 EC key")

    return key


class TokenIssuer:
    """
    Issues signed bearer tokens for one set of API credentials.

    Holds only immutable state, so a single instance can be shared across
    threads.
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.credentials = credentials
        self._clock = clock

    def issue_token(self) -> str:
        """
        Generate a JWT for App Store Connect API authentication.

        Returns:
            Compact JWS string

        Raises:
            ConfigError: If the private key cannot be decoded
            SigningError: If signing fails
        """
        key = load_signing_key(self.credentials.private_key)

        issued_at = int(self._clock())
        payload = {
            "iss": self.credentials.issuer_id,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME_SECONDS,
            "aud": TOKEN_AUDIENCE,
        }

        try:
            token = jwt.encode(
                payload,
                key,
                algorithm=SIGNING_ALGORITHM,
                headers={"kid": self.credentials.key_id},
            )
        except Exception as exc:
            logger.exception("token_signing_failed", key_id=self.credentials.key_id)
            raise SigningError(str(exc)) from exc

        logger.debug(
            "token_issued",
            key_id=self.credentials.key_id,
            expires_at=payload["exp"],
        )

        return token
