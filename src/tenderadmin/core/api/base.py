"""
API error taxonomy.

Every failed request is normalized to an ApiError carrying the
human-readable message, the HTTP status (None for transport failures)
and the decoded response body.
"""

from __future__ import annotations

from typing import Any

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


class ApiError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        data: Any = None,
        url: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
        self.url = url
        self.cause = cause
        # Set once the error has been shown to the user
        self.reported = False

    def to_dict(self) -> dict[str, Any]:
        """Return the {message, status, data} shape callers display."""
        return {"message": self.message, "status": self.status, "data": self.data}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status!r})"


class ValidationError(ApiError):
    """Request rejected as invalid (400)."""
    pass


class AuthenticationError(ApiError):
    """Session missing or expired (401)."""
    pass


class PermissionDeniedError(ApiError):
    """Authenticated but not allowed (403)."""
    pass


class NotFoundError(ApiError):
    """Resource does not exist (404)."""
    pass


class ConflictError(ApiError):
    """Conflicting or semantically invalid data (409, 422)."""
    pass


class ServerError(ApiError):
    """Server-side failure (5xx)."""
    pass


class ResponseFormatError(ApiError):
    """A 2xx body whose records do not have the expected shape."""
    pass


class NetworkError(ApiError):
    """No response was received."""
    pass


class RequestTimeoutError(NetworkError):
    """The per-request timeout elapsed."""
    pass


_STATUS_CLASSES: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: ConflictError,
    422: ConflictError,
}


def error_class_for_status(status: int) -> type[ApiError]:
    """Pick the ApiError subclass for an HTTP status code."""
    if status in _STATUS_CLASSES:
        return _STATUS_CLASSES[status]
    if status >= 500:
        return ServerError
    return ApiError


def extract_message(data: Any, fallback: str | None = None) -> str:
    """Find the server's message in a response body."""
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return fallback or DEFAULT_ERROR_MESSAGE


def error_from_response(status: int, data: Any, url: str | None = None) -> ApiError:
    """Build the typed error for a non-2xx response."""
    cls = error_class_for_status(status)
    message = extract_message(data, fallback=f"Request failed with status code {status}")
    return cls(message, status=status, data=data, url=url)


def is_timeout(error: BaseException) -> bool:
    """Whether an error represents a request timeout."""
    if isinstance(error, RequestTimeoutError):
        return True
    return "timeout" in str(error).lower()
