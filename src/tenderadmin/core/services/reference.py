"""Reference data collections used by tender forms."""

from __future__ import annotations

from typing import Any

from tenderadmin.core.api.envelope import Page, unwrap_entity, unwrap_list
from tenderadmin.core.models.entities import Category, NoticeType, ReferenceItem

from .base import ResourceService


class NoticeTypesService(ResourceService[NoticeType]):
    endpoint = "/notice-types"
    model = NoticeType
    label = "Notice Type"

    @staticmethod
    def _mirror(payload: dict[str, Any]) -> dict[str, Any]:
        # The API stores the label as ``notice``; keep both keys in sync
        name = payload.get("name") or payload.get("notice")
        if not name:
            return dict(payload)
        return {**payload, "name": name, "notice": name}

    async def create(self, payload: dict[str, Any]) -> NoticeType:
        return await super().create(self._mirror(payload))

    async def update(self, item_id: int | None, payload: dict[str, Any]) -> NoticeType:
        return await super().update(item_id, self._mirror(payload))


class ProceduresService(ResourceService[ReferenceItem]):
    endpoint = "/procedures"
    model = ReferenceItem
    label = "Procedure"

    async def search(self, term: str) -> list[ReferenceItem]:
        body = await self.client.get(self.path("search", term.strip()))
        return self.parse_many(unwrap_list(body))


class CategoriesService(ResourceService[Category]):
    endpoint = "/categories"
    model = Category
    label = "Category"

    async def search(self, term: str) -> list[Category]:
        body = await self.client.get(self.path("search"), params={"search": term.strip()})
        return self.parse_many(unwrap_list(body))

    async def roots(self) -> list[Category]:
        body = await self.client.get(self.path("roots"))
        return self.parse_many(unwrap_list(body))


class ContractingAuthoritiesService(ResourceService[ReferenceItem]):
    endpoint = "/contracting-authorities"
    model = ReferenceItem
    label = "Contracting Authority"

    async def search(self, name: str, page: int = 1, limit: int = 20) -> Page[ReferenceItem]:
        query = {"search": name.strip(), "page": page, "limit": limit}
        body = await self.client.get(self.path("search"), params=query)
        return self.page_from(body, query)

    async def stats(self) -> dict[str, Any]:
        data = unwrap_entity(await self.client.get(self.path("stats")))
        return data if isinstance(data, dict) else {}


class ContractTypesService(ResourceService[ReferenceItem]):
    endpoint = "/contract-types"
    model = ReferenceItem
    label = "Contract Type"


class RegionsService(ResourceService[ReferenceItem]):
    endpoint = "/regions"
    model = ReferenceItem
    label = "Region"


class CountriesService(ResourceService[ReferenceItem]):
    endpoint = "/states"
    model = ReferenceItem
    label = "Country"
