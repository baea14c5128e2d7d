"""
Response envelope normalization.

The backend answers either with ``{"success": true, "data": ..., "pagination": {...}}``
or with a bare JSON array/object. Every service goes through these helpers
so the rest of the code only ever sees plain lists, objects and Page values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

import pydantic

from tenderadmin.core.logging import get_logger

from .base import ResponseFormatError

logger = get_logger("api.envelope")

T = TypeVar("T")
U = TypeVar("U")
M = TypeVar("M", bound=pydantic.BaseModel)


@dataclass
class Page(Generic[T]):
    """One page of a listing."""

    data: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0
    limit: int = 10

    @property
    def is_empty(self) -> bool:
        return not self.data

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        """Return a page with every row transformed."""
        return Page(
            data=[fn(item) for item in self.data],
            total=self.total,
            page=self.page,
            total_pages=self.total_pages,
            limit=self.limit,
        )


def is_success_envelope(body: Any) -> bool:
    return isinstance(body, dict) and bool(body.get("success"))


def unwrap_entity(body: Any) -> Any:
    """Return the entity inside a success envelope, or the body itself."""
    if is_success_envelope(body):
        return body.get("data")
    return body


def unwrap_list(body: Any) -> list[Any]:
    """Return the list inside a success envelope or a bare array."""
    if is_success_envelope(body):
        data = body.get("data")
        return list(data) if isinstance(data, list) else []
    if isinstance(body, list):
        return body
    logger.warning("Unexpected response format: %r", body)
    return []


def _first_int(*values: Any) -> int | None:
    for value in values:
        if value is None or value == "":
            continue
        try:
            number = int(value)
        except (TypeError, ValueError):
            continue
        if number:
            return number
    return None


def unwrap_page(body: Any, page: int = 1, limit: int = 10) -> Page[Any]:
    """Normalize a listing response into a Page.

    Args:
        body: Decoded response body
        page: Requested page, used when the server omits it
        limit: Requested page size, used when the server omits it
    """
    if is_success_envelope(body):
        data = body.get("data")
        rows = list(data) if isinstance(data, list) else []
        pagination = body.get("pagination") or {}

        current_limit = _first_int(pagination.get("limit"), body.get("limit")) or limit
        total = _first_int(pagination.get("total"), body.get("total"))
        if total is None:
            total = len(rows)
        total_pages = _first_int(pagination.get("totalPages"), body.get("totalPages"))
        if total_pages is None:
            total_pages = math.ceil(total / current_limit) if current_limit else 0
        current_page = _first_int(
            pagination.get("page"),
            pagination.get("currentPage"),
            body.get("currentPage"),
        ) or page

        return Page(
            data=rows,
            total=total,
            page=current_page,
            total_pages=total_pages,
            limit=current_limit,
        )

    if isinstance(body, list):
        return Page(
            data=body,
            total=len(body),
            page=1,
            total_pages=1 if body else 0,
            limit=len(body) or limit,
        )

    logger.warning("Unexpected response format: %r", body)
    return Page(data=[], total=0, page=1, total_pages=0, limit=limit)


def estimate_page(body: Any, page: int = 1, limit: int = 10) -> Page[Any]:
    """Normalize a listing whose server omits totals.

    A page shorter than the limit is taken as the last page; a full page
    implies at least one more.
    """
    if not is_success_envelope(body):
        return unwrap_page(body, page=page, limit=limit)

    data = body.get("data")
    rows = list(data) if isinstance(data, list) else []
    pagination = body.get("pagination") or {}
    current_limit = _first_int(pagination.get("limit")) or limit
    current_page = _first_int(pagination.get("page")) or page

    if len(rows) < current_limit:
        estimated_total = (current_page - 1) * current_limit + len(rows)
        estimated_pages = current_page
    else:
        estimated_total = current_page * current_limit + 1
        estimated_pages = current_page + 1

    return Page(
        data=rows,
        total=_first_int(pagination.get("total")) or estimated_total,
        page=current_page,
        total_pages=_first_int(pagination.get("totalPages")) or estimated_pages,
        limit=current_limit,
    )


def parse_record(model: type[M], data: Any, label: str | None = None) -> M:
    """Validate one record, reporting a malformed row as an ApiError."""
    what = label or model.__name__
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        logger.warning("Malformed %s record: %s", model.__name__, e)
        raise ResponseFormatError(
            f"The server returned an invalid {what.lower()} record",
            data=data,
            cause=e,
        ) from e


def parse_records(model: type[M], rows: list[Any], label: str | None = None) -> list[M]:
    """Validate every dict row; non-dict entries are skipped."""
    return [parse_record(model, row, label) for row in rows if isinstance(row, dict)]
