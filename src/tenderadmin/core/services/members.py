"""Subscriber (member) accounts."""

from __future__ import annotations

import time
from typing import Any

from tenderadmin.core.api.envelope import Page, unwrap_entity
from tenderadmin.core.models.entities import Member
from tenderadmin.core.normalize.parsing import SECONDS_PER_DAY

from .base import ResourceService

DEFAULT_VALIDITY_DAYS = 365

OPTIONAL_TEXT_FIELDS = ("name", "phone_number", "company", "fiscal_number", "contact", "package")


def clean_member_payload(data: dict[str, Any], *, creating: bool, now: int | None = None) -> dict[str, Any]:
    """Trim text fields, lower-case the email and apply create defaults.

    On create, missing dates default to now and now + 365 days, and
    status/active default to 1. On update only provided keys are sent.
    """
    payload: dict[str, Any] = {}
    if data.get("username"):
        payload["username"] = str(data["username"]).strip()
    if data.get("password"):
        payload["password"] = data["password"]
    if data.get("email"):
        payload["email"] = str(data["email"]).strip().lower()

    if creating:
        now = int(time.time()) if now is None else now
        payload["register_date"] = data.get("register_date") or now
        payload["expire_date"] = data.get("expire_date") or now + DEFAULT_VALIDITY_DAYS * SECONDS_PER_DAY
        payload["status"] = 1 if data.get("status") is None else data["status"]
        payload["active"] = 1 if data.get("active") is None else data["active"]
        payload["group"] = data.get("group") or None
        for key in OPTIONAL_TEXT_FIELDS:
            if data.get(key):
                payload[key] = str(data[key]).strip()
        return payload

    for key in ("register_date", "expire_date", "status", "active", "group"):
        if key in data and data[key] is not None:
            payload[key] = data[key]
    for key in OPTIONAL_TEXT_FIELDS:
        if key in data and data[key] is not None:
            payload[key] = str(data[key]).strip()
    return payload


class MembersService(ResourceService[Member]):
    endpoint = "/members"
    model = Member
    label = "Subscriber"

    async def _filtered(self, path: str, params: dict[str, Any] | None) -> Page[Member]:
        query = self.with_paging(params)
        body = await self.client.get(path, params=query)
        return self.page_from(body, query)

    async def list_active(self, params: dict[str, Any] | None = None) -> Page[Member]:
        return await self._filtered(self.path("active"), params)

    async def list_expired(self, params: dict[str, Any] | None = None) -> Page[Member]:
        return await self._filtered(self.path("expired"), params)

    async def list_by_status(self, status: int, params: dict[str, Any] | None = None) -> Page[Member]:
        return await self._filtered(self.path("status", status), params)

    async def list_inactive(self, params: dict[str, Any] | None = None) -> Page[Member]:
        return await self._filtered(self.path("filter", "inactive"), params)

    async def create(self, payload: dict[str, Any]) -> Member:
        return await super().create(clean_member_payload(payload, creating=True))

    async def update(self, item_id: int | None, payload: dict[str, Any]) -> Member:
        return await super().update(item_id, clean_member_payload(payload, creating=False))

    async def _member_action(self, method: str, item_id: int, action: str, body: Any = None) -> Member:
        response = await self.client.request(method, self.path(item_id, action), json=body)
        data = unwrap_entity(response)
        if isinstance(data, dict):
            return self.parse({"id": item_id, **data})
        return await self.get(item_id)

    async def update_status(self, item_id: int, status: int) -> Member:
        self.log.info("Setting status of subscriber %s to %s", item_id, status)
        return await self._member_action("PATCH", item_id, "status", {"status": status})

    async def update_active(self, item_id: int, active: int) -> Member:
        self.log.info("Setting active flag of subscriber %s to %s", item_id, active)
        return await self._member_action("PATCH", item_id, "active", {"active": active})

    async def activate(self, item_id: int) -> Member:
        self.log.info("Activating subscriber %s", item_id)
        return await self._member_action("PUT", item_id, "activate")

    async def change_password(self, item_id: int, password: str) -> None:
        self.log.info("Changing password of subscriber %s", item_id)
        await self.client.patch(self.path(item_id, "password"), json={"password": password})

    async def extend_expiry(self, item_id: int, days: int) -> Member:
        """Push the expiry date forward by whole days."""
        if days <= 0:
            raise ValueError("days must be a positive number")
        self.log.info("Extending subscriber %s by %s days", item_id, days)
        return await self._member_action("PUT", item_id, "extend-valid-time", {"days": days})

    async def stats(self) -> dict[str, Any]:
        body = await self.client.get(self.path("stats"))
        data = unwrap_entity(body)
        return data if isinstance(data, dict) else {}
