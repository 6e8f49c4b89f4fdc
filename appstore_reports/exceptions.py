"""
Exception Classes - Strongly typed exception hierarchy.

Every failure surfaced by the client derives from AppStoreConnectError and
carries typed attributes alongside its message.
"""


class AppStoreConnectError(Exception):
    """Base exception for all App Store Connect client errors."""

    pass


class ConfigError(AppStoreConnectError):
    """Raised when configuration or private key material is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Configuration error: {message}")


class SigningError(AppStoreConnectError):
    """Raised when the ES256 signing operation itself fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Signing failed: {message}")


class AuthError(AppStoreConnectError):
    """Raised when a bearer token could not be produced for a request."""

    def __init__(self, cause: AppStoreConnectError) -> None:
        self.cause = cause
        super().__init__(f"Authentication failed: {cause}")


class TransportError(AppStoreConnectError):
    """Raised on network-level failures (connect, read, timeout)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Transport error: {message}")


class APIError(AppStoreConnectError):
    """Raised when the API answers with an unexpected status code."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API error ({status_code}): {body}")


class NotFoundError(AppStoreConnectError):
    """Raised when a lookup succeeds but yields no usable result."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Not found: {message}")


class DecodeError(AppStoreConnectError):
    """Raised when a response stream cannot be decoded at all."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Decode error: {message}")
