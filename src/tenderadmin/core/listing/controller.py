"""
List page controller.

Holds the state of one paginated, searchable, filterable listing and
decides when to hit the API:
- search input is debounced and resets to page 1
- identical parameters are not re-requested while loading or loaded
- responses that arrive after a newer request was issued are dropped
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Protocol, TypeVar

from tenderadmin.core.api.base import ApiError, is_timeout
from tenderadmin.core.api.envelope import Page
from tenderadmin.core.logging import get_contextual_logger
from tenderadmin.core.notify import Notifier, notify_api_error

from .debounce import Debouncer
from .pagination import item_range, page_window

T = TypeVar("T")

TIMEOUT_MESSAGE = "Request timed out. The server might be busy."
SERVER_ERROR_MESSAGE = "Server error. Please try again later."

Fetch = Callable[[dict[str, Any]], Awaitable[Page[T]]]


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class Deletable(Protocol):
    label: str

    async def delete(self, item_id: int) -> None: ...


class ListController(Generic[T]):
    """State machine behind a list page."""

    def __init__(
        self,
        fetch: Fetch[T],
        *,
        label: str = "items",
        page_size: int = 10,
        debounce_ms: int = 500,
        search_key: str = "search",
        notifier: Notifier | None = None,
    ):
        self.fetch = fetch
        self.label = label
        self.page_size = page_size
        self.search_key = search_key
        self.notifier = notifier or Notifier(echo=False)
        self.log = get_contextual_logger("listing", label)

        self.page = 1
        self.search = ""
        self.filters: dict[str, Any] = {}

        self.state = LoadState.IDLE
        self.items: list[T] = []
        self.total_items = 0
        self.total_pages = 0
        self.error: str | None = None

        self._seq = 0
        self._last_key: str | None = None
        self._debouncer: Debouncer[str] = Debouncer(debounce_ms, self._apply_search)

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def loading(self) -> bool:
        return self.state == LoadState.LOADING

    @property
    def has_pagination(self) -> bool:
        return self.total_items > 0 and self.total_pages > 1

    @property
    def is_empty(self) -> bool:
        return self.state == LoadState.SUCCESS and not self.items

    @property
    def visible_pages(self) -> list[int]:
        return page_window(self.page, self.total_pages)

    @property
    def showing(self) -> tuple[int, int]:
        return item_range(self.page, self.page_size, self.total_items)

    @property
    def sequence(self) -> int:
        """Sequence number of the most recently issued request."""
        return self._seq

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def configure(
        self,
        *,
        page: int | None = None,
        search: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> None:
        """Set the initial query without fetching."""
        if page is not None:
            self.page = max(1, page)
        if search is not None:
            self.search = search.strip()
        if filters:
            for name, value in filters.items():
                self._put_filter(name, value)

    def set_search(self, text: str) -> None:
        """Queue a search; only the last value within the debounce window applies."""
        self._debouncer.call(text)

    async def _apply_search(self, text: str) -> None:
        self.search = text.strip()
        self.page = 1
        await self.refresh()

    async def flush_search(self) -> None:
        await self._debouncer.flush()

    async def wait_for_search(self) -> None:
        await self._debouncer.wait()

    def _put_filter(self, name: str, value: Any) -> None:
        if value is None or value == "":
            self.filters.pop(name, None)
        else:
            self.filters[name] = value

    async def set_filter(self, name: str, value: Any) -> None:
        self._put_filter(name, value)
        self.page = 1
        await self.refresh()

    async def clear_filters(self) -> None:
        self.filters.clear()
        self.page = 1
        await self.refresh()

    async def set_page(self, page: int) -> None:
        self.page = max(1, page)
        await self.refresh()

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    def build_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "limit": self.page_size}
        if self.search:
            params[self.search_key] = self.search
        for name, value in self.filters.items():
            if value is not None and value != "":
                params[name] = value
        return params

    @staticmethod
    def _params_key(params: dict[str, Any]) -> str:
        return json.dumps(params, sort_keys=True, default=str)

    async def refresh(self, force: bool = False) -> Page[T] | None:
        """Fetch the current page.

        Returns the applied page, or None when the request was skipped,
        failed or superseded by a newer one.
        """
        params = self.build_params()
        key = self._params_key(params)

        if (
            not force
            and key == self._last_key
            and self.state in (LoadState.LOADING, LoadState.SUCCESS)
        ):
            self.log.debug("Same parameters, skipping request")
            return None

        self._last_key = key
        self._seq += 1
        seq = self._seq
        self.state = LoadState.LOADING
        self.error = None

        try:
            page = await self.fetch(params)
        except ApiError as e:
            if seq != self._seq:
                self.log.debug("Discarding stale failure for request %s", seq)
                return None
            self._last_key = None
            self._fail(e)
            return None
        except Exception:
            # Unexpected failures propagate, but must not leave the list stuck loading
            if seq == self._seq:
                self._last_key = None
                self.state = LoadState.ERROR
                self.error = f"Failed to load {self.label}"
            raise

        if seq != self._seq:
            self.log.debug("Discarding stale response for request %s (latest %s)", seq, self._seq)
            return None

        self.items = list(page.data)
        self.total_items = page.total
        self.total_pages = page.total_pages

        if page.total_pages > 0 and self.page > page.total_pages:
            self.log.info("Page %s is past the last page %s; returning to page 1", self.page, page.total_pages)
            self.page = 1
            return await self.refresh()

        self.state = LoadState.SUCCESS
        return page

    async def retry(self) -> Page[T] | None:
        return await self.refresh(force=True)

    def _fail(self, error: ApiError) -> None:
        self.state = LoadState.ERROR
        if is_timeout(error):
            self.error = TIMEOUT_MESSAGE
        elif error.status is not None and error.status >= 500:
            self.error = SERVER_ERROR_MESSAGE
        else:
            self.error = f"Failed to load {self.label}"

        self.log.warning("Loading failed: %s", error.message)
        # Timeouts are shown inline only
        if not is_timeout(error):
            self.notifier.error("Loading Failed", self.error)

    # -------------------------------------------------------------------------
    # Row actions
    # -------------------------------------------------------------------------

    async def delete(self, item_id: int, service: Deletable, name: str | None = None) -> bool:
        """Delete a row and reload; reports failures instead of raising.

        Returns:
            True if the row was deleted
        """
        entity = service.label
        try:
            await service.delete(item_id)
        except ApiError as e:
            notify_api_error(self.notifier, e, "Delete", entity)
            if e.status == 404:
                await self.refresh(force=True)
            return False

        subject = f'"{name}"' if name else f"{entity} #{item_id}"
        self.notifier.success(f"{entity} Deleted", f"{subject} has been deleted successfully.")
        await self.refresh(force=True)
        return True
