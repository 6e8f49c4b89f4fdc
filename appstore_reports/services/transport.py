"""
Authenticated Transport - Attaches a fresh bearer token to every request.
"""

import httpx
from structlog import get_logger

from appstore_reports.exceptions import AuthError, ConfigError, SigningError, TransportError
from appstore_reports.services.token_issuer import TokenIssuer

logger = get_logger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0


class AuthenticatedTransport:
    """
    Wraps an httpx.Client, signing each outbound request.

    Status codes are not inspected here; callers interpret the response.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        base_url: str,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.issuer = issuer
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http_client = (
            httpx.Client(timeout=REQUEST_TIMEOUT_SECONDS) if http_client is None else http_client
        )

    @property
    def base_url(self) -> str:
        """Base URL requests are resolved against."""
        return self._base_url

    def build_request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a request for a path relative to the base URL."""
        return self._http_client.build_request(
            method,
            f"{self._base_url}/{path.lstrip('/')}",
            params=params,
            headers=headers,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        """
        Perform an authenticated request.

        Args:
            request: Request to send; method, URL, query and body are kept
            stream: Leave the body unread so it can be consumed incrementally

        Returns:
            The raw response, whatever its status

        Raises:
            AuthError: If no token could be issued (nothing is sent)
            TransportError: On network failure or timeout
        """
        try:
            token = self.issuer.issue_token()
        except (ConfigError, SigningError) as exc:
            logger.error("request_auth_failed", url=str(request.url), error=str(exc))
            raise AuthError(exc) from exc

        request.headers["Authorization"] = f"Bearer {token}"
        request.headers["Content-Type"] = "application/json"
        request.extensions["timeout"] = httpx.Timeout(REQUEST_TIMEOUT_SECONDS).as_dict()

        try:
            response = self._http_client.send(request, stream=stream)
        except httpx.TransportError as exc:
            logger.error(
                "request_transport_failed",
                method=request.method,
                url=str(request.url),
                error=str(exc),
            )
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        logger.debug(
            "request_completed",
            method=request.method,
            url=str(request.url),
            status=response.status_code,
        )
        return response

    def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            self._http_client.close()
