"""
HTTP client for the tender-listing REST API using httpx.

Provides async requests with:
- Bearer token injection from the auth context (skipped for auth endpoints)
- Global handling of 401 responses (credentials cleared, login route)
- Normalization of every failure to ApiError
- A fixed per-request timeout and no retries
"""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from tenderadmin.core.logging import get_logger

from .base import (
    ApiError,
    NetworkError,
    RequestTimeoutError,
    error_from_response,
)

if TYPE_CHECKING:
    from tenderadmin.core.config.models import AppConfig

logger = get_logger("api.client")

# Path fragments that identify authentication endpoints
AUTH_PATH_MARKERS = ("/login", "/auth", "/bootstrap")
# A 401 from these is a failed login, not an expired session
LOGIN_PATH_MARKERS = ("/login", "/auth")

DEFAULT_HEADERS = {
    "Accept": "application/json",
}


class AuthProvider(Protocol):
    """What the client needs from the auth layer."""

    def get_token(self) -> str | None: ...

    def on_unauthorized(self) -> None: ...


def is_auth_path(path: str) -> bool:
    return any(marker in path for marker in AUTH_PATH_MARKERS)


def is_login_path(path: str) -> bool:
    return any(marker in path for marker in LOGIN_PATH_MARKERS)


class ApiClient:
    """Single HTTP entry point every service depends on.

    Features:
    - Persistent connection pooling
    - Bearer authentication via an injected AuthProvider
    - Uniform {message, status, data} errors
    """

    def __init__(
        self,
        base_url: str,
        auth: AuthProvider | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        default_headers: dict[str, str] | None = None,
    ):
        """Initialize the API client.

        Args:
            base_url: API base URL, e.g. http://localhost:3000/api
            auth: Token source and unauthorized handler
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (mock API, tests)
            default_headers: Extra headers for all requests
        """
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout
        self.transport = transport
        self.default_headers = {**DEFAULT_HEADERS, **(default_headers or {})}

        self._client: httpx.AsyncClient | None = None
        self._request_ids = itertools.count(1)

    @classmethod
    def from_config(cls, config: "AppConfig", auth: AuthProvider | None = None) -> "ApiClient":
        """Build a client from application configuration."""
        transport = None
        if config.api.mock_mode:
            from .mock import MockApi

            logger.info("Mock mode enabled; requests are served in-memory")
            transport = MockApi().transport()

        return cls(
            base_url=config.api.base_url,
            auth=auth,
            timeout=config.api.timeout_seconds,
            transport=transport,
        )

    def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self.default_headers,
                transport=self.transport,
                event_hooks={"request": [self._inject_auth]},
            )
        return self._client

    async def _inject_auth(self, request: httpx.Request) -> None:
        """Request hook adding the bearer token to non-auth requests."""
        if self.auth is None or is_auth_path(request.url.path):
            return
        token = self.auth.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return path if path.startswith("/") else f"/{path}"

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _handle_error_status(self, response: httpx.Response, path: str) -> ApiError:
        """Apply the global 401 policy and build the typed error."""
        data = self._decode(response)
        if response.status_code == 401 and not is_login_path(path) and self.auth is not None:
            self.auth.on_unauthorized()
        return error_from_response(response.status_code, data, url=str(response.request.url))

    def _transport_error(self, error: httpx.HTTPError, method: str, path: str) -> ApiError:
        if isinstance(error, httpx.TimeoutException):
            return RequestTimeoutError(
                f"timeout of {int(self.timeout * 1000)}ms exceeded",
                url=path,
                cause=error,
            )
        return NetworkError(
            str(error) or "Network error. Please check your connection and try again.",
            url=path,
            cause=error,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: Any = None,
    ) -> Any:
        """Send a request and return the decoded body.

        Raises:
            ApiError: On any non-2xx response or transport failure
        """
        client = self._ensure_client()
        url = self._url(path)
        request_id = next(self._request_ids)
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug(
            "%s %s params=%s",
            method.upper(),
            url,
            clean_params,
            extra={"method": method.upper(), "url": url, "seq": request_id},
        )

        try:
            response = await client.request(
                method.upper(),
                url,
                params=clean_params or None,
                json=json,
                data=data,
                files=files,
            )
        except httpx.HTTPError as e:
            error = self._transport_error(e, method, url)
            logger.warning(
                "%s %s failed: %s",
                method.upper(),
                url,
                error.message,
                extra={"method": method.upper(), "url": url, "seq": request_id},
            )
            raise error from e

        if response.is_success:
            return self._decode(response)

        error = self._handle_error_status(response, url)
        logger.info(
            "%s %s -> %s %s",
            method.upper(),
            url,
            response.status_code,
            error.message,
            extra={"method": method.upper(), "url": url, "status": response.status_code, "seq": request_id},
        )
        raise error

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def download(self, path: str, destination: Path | str) -> Path:
        """Stream a binary response body into a file.

        Args:
            path: API path of the file
            destination: Target file path (parent directories are created)

        Returns:
            Path of the written file
        """
        client = self._ensure_client()
        url = self._url(path)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        try:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    await response.aread()
                    raise self._handle_error_status(response, url)
                with open(destination, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            destination.unlink(missing_ok=True)
            raise self._transport_error(e, "GET", url) from e

        logger.info("Downloaded %s to %s", url, destination)
        return destination

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
