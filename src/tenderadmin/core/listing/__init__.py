"""Paginated list state, debouncing and page windows."""

from .controller import (
    SERVER_ERROR_MESSAGE,
    TIMEOUT_MESSAGE,
    ListController,
    LoadState,
)
from .debounce import Debouncer
from .pagination import item_range, page_window

__all__ = [
    "SERVER_ERROR_MESSAGE",
    "TIMEOUT_MESSAGE",
    "ListController",
    "LoadState",
    "Debouncer",
    "item_range",
    "page_window",
]
