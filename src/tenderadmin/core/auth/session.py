"""
Auth context shared by the API client and the commands.

Owns the only reads and writes of the persisted token/user so the HTTP
layer never touches storage directly.
"""

from __future__ import annotations

import base64
import binascii
import json
import time
from typing import Any, Callable

from tenderadmin.core.logging import get_logger

from .store import TOKEN_KEY, USER_KEY, CredentialStore

logger = get_logger("auth.session")

LOGIN_ROUTE = "/login"
DEFAULT_MAX_TOKEN_AGE_MS = 7 * 24 * 60 * 60 * 1000


class Navigator:
    """Tracks the route the console should show next."""

    def __init__(self, route: str = "/", on_navigate: Callable[[str], None] | None = None):
        self.current_route = route
        self.history: list[str] = []
        self._on_navigate = on_navigate

    def navigate(self, route: str) -> None:
        self.history.append(self.current_route)
        self.current_route = route
        if self._on_navigate:
            self._on_navigate(route)


def encode_session_token(username: str, timestamp_ms: int | None = None) -> str:
    """Mint the fallback session token used when the server returns none."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    payload = json.dumps({"username": username, "timestamp": timestamp_ms})
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Decode a locally minted session token, or None for anything else (JWTs)."""
    try:
        decoded = json.loads(base64.b64decode(token, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if isinstance(decoded, dict) and decoded.get("username") and decoded.get("timestamp"):
        return decoded
    return None


class AuthContext:
    """Token access and the unauthorized-response policy."""

    def __init__(
        self,
        store: CredentialStore,
        navigator: Navigator | None = None,
        max_token_age_ms: int = DEFAULT_MAX_TOKEN_AGE_MS,
    ):
        self.store = store
        self.navigator = navigator or Navigator()
        self.max_token_age_ms = max_token_age_ms

    def get_token(self) -> str | None:
        return self.store.get(TOKEN_KEY)

    def current_user(self) -> dict[str, Any] | None:
        raw = self.store.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return user if isinstance(user, dict) else None

    def save_session(self, token: str, user: dict[str, Any]) -> None:
        self.store.set(TOKEN_KEY, token)
        self.store.set(USER_KEY, json.dumps(user))

    def clear(self) -> None:
        self.store.remove(TOKEN_KEY)
        self.store.remove(USER_KEY)

    def on_unauthorized(self) -> None:
        """Drop stored credentials and send the user to the login screen."""
        logger.warning("Session expired; clearing stored credentials")
        self.clear()
        self.navigator.navigate(LOGIN_ROUTE)

    def validate(self, now_ms: int | None = None) -> bool:
        """Check the stored session, clearing it when it is unusable."""
        token = self.get_token()
        raw_user = self.store.get(USER_KEY)
        if not token or not raw_user:
            return False

        user = self.current_user()
        if not user or not user.get("id") or not user.get("username"):
            self.clear()
            return False

        session = decode_session_token(token)
        if session is not None:
            if now_ms is None:
                now_ms = int(time.time() * 1000)
            if now_ms - int(session["timestamp"]) > self.max_token_age_ms:
                self.clear()
                return False
            return True

        if len(token) > 10:
            return True

        self.clear()
        return False

    def is_authenticated(self) -> bool:
        return self.validate()


def display_name(user: dict[str, Any] | None) -> str:
    """Name recorded as created_by/updated_by on submitted records."""
    if not user:
        return "admin"
    if user.get("name") and user.get("surname"):
        return f"{user['name']} {user['surname']}"
    for key in ("full_name", "name", "username"):
        if user.get(key):
            return str(user[key])
    return "admin"
