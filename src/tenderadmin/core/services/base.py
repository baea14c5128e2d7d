"""
Generic resource service.

Each entity collection exposes the same CRUD contract over
``/<endpoint>``; subclasses only declare the endpoint and model and add
their extra routes.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from tenderadmin.core.api.client import ApiClient
from tenderadmin.core.api.envelope import Page, parse_record, parse_records, unwrap_entity, unwrap_list, unwrap_page
from tenderadmin.core.logging import get_contextual_logger
from tenderadmin.core.models.entities import Entity

ModelT = TypeVar("ModelT", bound=Entity)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Drop None and empty-string values."""
    return {k: v for k, v in (params or {}).items() if v is not None and v != ""}


class ResourceService(Generic[ModelT]):
    """CRUD access to one API collection.

    Subclasses set:
    - endpoint: collection path, e.g. "/regions"
    - model: pydantic model for rows
    - label: singular human name used in messages
    """

    endpoint: ClassVar[str] = ""
    model: ClassVar[type[Entity]] = Entity
    label: ClassVar[str] = "Item"
    search_key: ClassVar[str] = "search"

    def __init__(self, client: ApiClient):
        self.client = client
        self.log = get_contextual_logger("services", self.endpoint.strip("/"))

    def path(self, *parts: Any) -> str:
        return "/".join([self.endpoint.rstrip("/"), *(str(p).strip("/") for p in parts)])

    def parse(self, data: Any) -> ModelT:
        return parse_record(self.model, data, self.label)  # type: ignore[return-value]

    def parse_many(self, rows: list[Any]) -> list[ModelT]:
        return parse_records(self.model, rows, self.label)  # type: ignore[return-value]

    def page_from(self, body: Any, params: dict[str, Any]) -> Page[ModelT]:
        page = unwrap_page(body, page=params["page"], limit=params["limit"])
        return Page(
            data=self.parse_many(page.data),
            total=page.total,
            page=page.page,
            total_pages=page.total_pages,
            limit=page.limit,
        )

    @staticmethod
    def with_paging(params: dict[str, Any] | None) -> dict[str, Any]:
        cleaned = clean_params(params)
        cleaned.setdefault("page", DEFAULT_PAGE)
        cleaned.setdefault("limit", DEFAULT_LIMIT)
        return cleaned

    async def list(self, params: dict[str, Any] | None = None) -> Page[ModelT]:
        """Fetch one page; ``page`` defaults to 1 and ``limit`` to 10."""
        query = self.with_paging(params)
        self.log.debug("Listing with %s", query)
        body = await self.client.get(self.endpoint, params=query)
        return self.page_from(body, query)

    async def list_all(self) -> list[ModelT]:
        """Fetch the whole collection (used for dropdowns)."""
        body = await self.client.get(self.endpoint)
        return self.parse_many(unwrap_list(body))

    async def get(self, item_id: int) -> ModelT:
        body = await self.client.get(self.path(item_id))
        return self.parse(unwrap_entity(body))

    async def create(self, payload: dict[str, Any]) -> ModelT:
        self.log.info("Creating %s", self.label.lower())
        body = await self.client.post(self.endpoint, json=payload)
        data = unwrap_entity(body)
        if isinstance(data, dict) and data.get("id"):
            return self.parse(data)
        # Server acknowledged without echoing the record
        return self.parse({**payload, "id": 0})

    async def update(self, item_id: int | None, payload: dict[str, Any]) -> ModelT:
        if not item_id:
            raise ValueError(f"{self.label} ID is required for update")
        self.log.info("Updating %s %s", self.label.lower(), item_id)
        body = await self.client.put(self.path(item_id), json=payload)
        data = unwrap_entity(body)
        if isinstance(data, dict):
            return self.parse({"id": item_id, **payload, **data})
        return self.parse({**payload, "id": item_id})

    async def delete(self, item_id: int) -> None:
        self.log.info("Deleting %s %s", self.label.lower(), item_id)
        await self.client.delete(self.path(item_id))
