"""Error taxonomy for Postman API access.

Summary-tier failures propagate to the caller unchanged; detail-tier failures
are caught by the orchestrator and logged. The CLI turns any of these into a
friendly message with :func:`describe_error`.
"""

from __future__ import annotations

from typing import Optional


class PostmanAPIError(Exception):
    """Base exception for Postman API errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(PostmanAPIError):
    """Raised when no API key is configured on the client."""

    def __init__(self, message: str = "API Key not set"):
        super().__init__(message)


class HttpError(PostmanAPIError):
    """Raised for a non-success HTTP response."""

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        *,
        error_name: Optional[str] = None,
    ) -> None:
        """Initialize HTTP error.

        Args:
            status_code: Upstream HTTP status code
            message: Message from the response body, if any
            error_name: Upstream error name (e.g. "AuthenticationError")
        """
        super().__init__(message or f"HTTP Error: {status_code}")
        self.status_code = status_code
        self.error_name = error_name


class NetworkError(PostmanAPIError):
    """Raised on transport failure (DNS, connection refused, timeout)."""
    pass


def describe_error(exc: Exception) -> str:
    """Map an error to a user-facing message."""
    message = getattr(exc, "message", None) or str(exc)
    if not message:
        return "An unexpected error occurred"

    if isinstance(exc, AuthError):
        return "Please set your Postman API Key first (pmgraph config set-key <key>)."
    if isinstance(exc, NetworkError) or "Network" in message:
        return "Network error. Please check your connection."

    status_code = getattr(exc, "status_code", None)
    if status_code == 401 or "Invalid API Key" in message:
        return "Invalid API Key. Please check your key and try again."
    if status_code == 429 or "rate limit" in message.lower():
        return "Rate limit exceeded. Please wait and try again."

    return message
