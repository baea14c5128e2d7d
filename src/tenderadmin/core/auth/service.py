"""
Admin login and logout against the API.
"""

from __future__ import annotations

from typing import Any

from tenderadmin.core.api.base import ApiError
from tenderadmin.core.api.client import ApiClient
from tenderadmin.core.logging import get_logger

from .session import LOGIN_ROUTE, AuthContext, encode_session_token

logger = get_logger("auth.service")

LOGIN_PATH = "/admin/auth/login"
TOKEN_FIELDS = ("token", "accessToken", "access_token")


class LoginError(ApiError):
    """The server answered but no usable session could be built."""
    pass


def _extract_user(body: Any) -> dict[str, Any] | None:
    if not isinstance(body, dict):
        return None
    for candidate in (body.get("data"), body.get("user"), body):
        if isinstance(candidate, dict) and candidate.get("username"):
            return candidate
    return None


def _extract_token(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    sources = [body]
    if isinstance(body.get("data"), dict):
        sources.append(body["data"])
    for source in sources:
        for key in TOKEN_FIELDS:
            if source.get(key):
                return str(source[key])
    return None


class AuthService:
    """Login/logout flows backed by an AuthContext."""

    def __init__(self, client: ApiClient, context: AuthContext):
        self.client = client
        self.context = context

    async def login(self, username: str, password: str) -> dict[str, Any]:
        """Authenticate and persist the session.

        Returns:
            The user record reported by the server

        Raises:
            ApiError: Request failed (wrong credentials arrive as AuthenticationError)
            LoginError: Response carried no valid user
        """
        username = username.strip()
        body = await self.client.post(LOGIN_PATH, json={"username": username, "password": password})

        user = _extract_user(body)
        if user is None:
            raise LoginError("No valid user data received from server", data=body)

        token = _extract_token(body)
        if not token:
            logger.info("Server returned no token; minting a session token for %s", user["username"])
            token = encode_session_token(user["username"])

        self.context.save_session(token, user)
        logger.info("Logged in as %s", user["username"])
        return user

    def logout(self) -> None:
        self.context.clear()
        self.context.navigator.navigate(LOGIN_ROUTE)
        logger.info("Logged out")
