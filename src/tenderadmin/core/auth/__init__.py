"""Session state, the unauthorized policy and login/logout."""

from .store import TOKEN_KEY, USER_KEY, CredentialStore, MemoryStore
from .session import (
    LOGIN_ROUTE,
    AuthContext,
    Navigator,
    decode_session_token,
    display_name,
    encode_session_token,
)
from .service import LOGIN_PATH, AuthService, LoginError

__all__ = [
    # Store
    "TOKEN_KEY",
    "USER_KEY",
    "CredentialStore",
    "MemoryStore",
    # Session
    "LOGIN_ROUTE",
    "AuthContext",
    "Navigator",
    "decode_session_token",
    "display_name",
    "encode_session_token",
    # Service
    "LOGIN_PATH",
    "AuthService",
    "LoginError",
]
