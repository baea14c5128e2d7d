"""HTTP access to the tender-listing API."""

from .base import (
    DEFAULT_ERROR_MESSAGE,
    ApiError,
    ValidationError,
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    ConflictError,
    ServerError,
    ResponseFormatError,
    NetworkError,
    RequestTimeoutError,
    error_from_response,
    is_timeout,
)
from .client import ApiClient, AuthProvider, is_auth_path, is_login_path
from .envelope import Page, estimate_page, parse_record, parse_records, unwrap_entity, unwrap_list, unwrap_page
from .mock import MockApi

__all__ = [
    # Errors
    "DEFAULT_ERROR_MESSAGE",
    "ApiError",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    "ResponseFormatError",
    "NetworkError",
    "RequestTimeoutError",
    "error_from_response",
    "is_timeout",
    # Client
    "ApiClient",
    "AuthProvider",
    "is_auth_path",
    "is_login_path",
    "MockApi",
    # Envelope
    "Page",
    "unwrap_entity",
    "unwrap_list",
    "unwrap_page",
    "estimate_page",
    "parse_record",
    "parse_records",
]
