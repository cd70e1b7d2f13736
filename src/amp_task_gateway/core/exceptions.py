"""Gateway Exceptions - Error taxonomy and HTTP status mapping.

Every failure the gateway can surface to a local client is one of the
classes below. The API layer never inspects error kinds ad hoc; it looks
the exception up in ``ERROR_STATUS_CODES`` via ``status_code_for()``.
"""

from __future__ import annotations

from pathlib import Path

# =============================================================================
# Base Exception
# =============================================================================


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message


# =============================================================================
# Credential Errors
# =============================================================================


class NoCredentialError(GatewayError):
    """Raised when no bearer token can be resolved from any source."""

    def __init__(self, secrets_path: Path, env_var: str):
        self.secrets_path = secrets_path
        self.env_var = env_var
        super().__init__(
            f"No API key found. Please ensure {secrets_path} exists",
            f"Alternatively set the {env_var} environment variable.",
        )


# =============================================================================
# Local Request Errors
# =============================================================================


class InvalidRequestBodyError(GatewayError):
    """Raised when a local request body is not a JSON object."""

    def __init__(self, details: str | None = None):
        super().__init__("Invalid JSON in request body", details)


# =============================================================================
# Remote Errors
# =============================================================================


class InvalidResponseError(GatewayError):
    """Raised when the remote API returns a body that is not a JSON object."""

    def __init__(self, details: str | None = None):
        super().__init__("Invalid JSON response from API", details)


class RemoteError(GatewayError):
    """Raised when the remote envelope reports ``ok: false``."""

    DEFAULT_MESSAGE = "API request failed"

    def __init__(self, message: str | None = None, method: str | None = None):
        self.method = method
        super().__init__(message or self.DEFAULT_MESSAGE)


class TransportError(GatewayError):
    """Raised when the remote API cannot be reached."""

    def __init__(self, url: str, original_error: Exception, message: str | None = None):
        self.url = url
        self.original_error = original_error
        super().__init__(
            message or f"Failed to connect to {url}",
            f"Network error: {original_error}",
        )


class RemoteTimeoutError(TransportError):
    """Raised when the remote API does not answer within the configured timeout."""

    def __init__(self, url: str, timeout: float, original_error: Exception):
        self.timeout = timeout
        super().__init__(
            url,
            original_error,
            f"Timed out after {timeout} seconds waiting for {url}",
        )


# =============================================================================
# Static File Errors
# =============================================================================


class StaticFileNotFoundError(GatewayError):
    """Raised when a requested static asset does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("Not Found", f"No static file at {path}")


# =============================================================================
# Status Mapping
# =============================================================================

ERROR_STATUS_CODES: dict[type[GatewayError], int] = {
    NoCredentialError: 500,
    InvalidRequestBodyError: 400,
    InvalidResponseError: 502,
    RemoteError: 502,
    TransportError: 502,
    RemoteTimeoutError: 504,
    StaticFileNotFoundError: 404,
}

DEFAULT_ERROR_STATUS = 500


def status_code_for(error: BaseException) -> int:
    """Return the local HTTP status for an error.

    The lookup walks the class hierarchy, so an unlisted subclass maps to
    its nearest listed ancestor. Anything else is a 500.
    """
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return DEFAULT_ERROR_STATUS
