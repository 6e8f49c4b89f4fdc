"""
Pytest Configuration and Centralized Fixtures.

Provides reusable fixtures for testing:
- Freshly generated P-256 signing keys (PKCS8 PEM)
- Client credentials
- Clients wired to an httpx.MockTransport
- gzip report payload builders
"""

import gzip
from collections.abc import Callable

import httpx
import pytest
import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from appstore_reports.models.credentials import ClientCredentials
from appstore_reports.services.sales_reports import AppStoreConnectClient

TEST_BASE_URL = "https://api.test.local/v1"

REPORT_HEADER = (
    "Provider\tProvider Country\tSKU\tDeveloper\tTitle\tVersion\tProduct Type Identifier\t"
    "Units\tDeveloper Proceeds\tBegin Date\tEnd Date\tCustomer Currency\tCountry Code\n"
)
REPORT_LINE = "123456\tUS\tSKU-123\tKaiju\tApp\t1.0\tF1\t10\t7.00\t2026-02-01\t2026-02-01\tUSD\tUS\n"


@pytest.fixture(autouse=True, scope="session")
def configure_test_logging():
    """Route structlog through stdlib logging so stdout stays clean."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


# ============================================================================
# Key and Credential Fixtures
# ============================================================================


@pytest.fixture
def signing_key() -> ec.EllipticCurvePrivateKey:
    """Temporary ES256 private key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def private_key_pem(signing_key: ec.EllipticCurvePrivateKey) -> bytes:
    """PKCS8 PEM encoding of the signing key (.p8 file contents)."""
    return signing_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def credentials(private_key_pem: bytes) -> ClientCredentials:
    """Standard test credentials."""
    return ClientCredentials(
        key_id="TEST_KEY_ID",
        issuer_id="TEST_ISSUER_ID",
        private_key=private_key_pem,
    )


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def make_client(credentials: ClientCredentials):
    """Factory for clients whose requests are answered by a handler."""
    clients: list[AppStoreConnectClient] = []

    def _create(
        handler: Callable[[httpx.Request], httpx.Response],
        creds: ClientCredentials | None = None,
    ) -> AppStoreConnectClient:
        client = AppStoreConnectClient(
            creds or credentials,
            base_url=TEST_BASE_URL,
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        clients.append(client)
        return client

    yield _create

    for client in clients:
        client.transport._http_client.close()


def gzip_report(*lines: str, header: str = REPORT_HEADER) -> bytes:
    """Build a gzip-compressed report from a header and data lines."""
    return gzip.compress((header + "".join(lines)).encode("utf-8"))
