"""Page-number helpers for list views."""

from __future__ import annotations


def page_window(current: int, total: int, max_visible: int = 5) -> list[int]:
    """Page numbers to offer around the current page.

    All pages when they fit; otherwise the first pages near the start,
    the last pages near the end, and ``current +- 2`` in between.
    """
    if total <= 0:
        return []
    if total <= max_visible:
        return list(range(1, total + 1))

    half = max_visible // 2
    if current <= half + 1:
        return list(range(1, max_visible + 1))
    if current >= total - half:
        return list(range(total - max_visible + 1, total + 1))
    return list(range(current - half, current + half + 1))


def item_range(page: int, limit: int, total: int) -> tuple[int, int]:
    """First and last item numbers shown on a page ("Showing 11-20 of 45")."""
    if total == 0:
        return 0, 0
    return (page - 1) * limit + 1, min(page * limit, total)
