"""
In-memory mock of the tender-listing API.

Served through ``httpx.MockTransport`` when mock mode is enabled, so the
console can be driven without a backend. Responses use the
``{"success": true, "data": ..., "pagination": {...}}`` envelope.
"""

from __future__ import annotations

import json
import math
import time
from copy import deepcopy
from datetime import datetime, timedelta, timezone
from email.parser import BytesParser
from email.policy import HTTP
from typing import Any

import httpx

from tenderadmin.core.logging import get_logger

logger = get_logger("api.mock")

COLLECTIONS = (
    "tenders",
    "members",
    "categories",
    "procedures",
    "notice-types",
    "contract-types",
    "contracting-authorities",
    "regions",
    "states",
)

SEARCH_FIELDS = ("title", "name", "notice", "username", "email", "procurement_number", "company")


def _now() -> int:
    return int(time.time())


def default_seed() -> dict[str, list[dict[str, Any]]]:
    """Reference data and a few records to make the mock usable."""
    now = _now()
    day = 24 * 3600
    return {
        "categories": [
            {"id": 1, "name": "IT Services", "parent_id": 0},
            {"id": 2, "name": "Construction", "parent_id": 0},
            {"id": 3, "name": "Medical Equipment", "parent_id": 0},
            {"id": 4, "name": "Office Supplies", "parent_id": 0},
            {"id": 5, "name": "Software Development", "parent_id": 0},
        ],
        "procedures": [
            {"id": 1, "name": "Open"},
            {"id": 2, "name": "Restricted"},
            {"id": 3, "name": "Negotiated"},
        ],
        "notice-types": [
            {"id": 1, "notice": "Contract Notice", "name": "Contract Notice"},
            {"id": 2, "notice": "Award Notice", "name": "Award Notice"},
        ],
        "contract-types": [
            {"id": 1, "name": "Works"},
            {"id": 2, "name": "Supplies"},
            {"id": 3, "name": "Services"},
        ],
        "contracting-authorities": [
            {"id": 1, "name": "Ministry of Infrastructure"},
            {"id": 2, "name": "Municipality of Pristina"},
        ],
        "regions": [
            {"id": 1, "name": "Pristina"},
            {"id": 2, "name": "Prizren"},
        ],
        "states": [
            {"id": 1, "name": "Kosovo"},
            {"id": 2, "name": "Albania"},
        ],
        "members": [
            {
                "id": 1,
                "username": "arta",
                "name": "Arta Krasniqi",
                "email": "arta@example.com",
                "company": "uTender Partners",
                "status": 1,
                "active": 1,
                "register_date": now - 200 * day,
                "expire_date": now + 20 * day,
            },
            {
                "id": 2,
                "username": "besnik",
                "name": "Besnik Gashi",
                "email": "besnik@example.com",
                "company": "BBros",
                "status": 1,
                "active": 1,
                "register_date": now - 400 * day,
                "expire_date": now - 5 * day,
            },
        ],
        "tenders": [
            {
                "id": 1,
                "title": "Construction of administrative building in Pristina",
                "procurement_number": "PRN-2023-001",
                "publication_date": now - 3 * day,
                "expiry_date": now + 30 * day,
                "category_id": 2,
                "procedures_id": 1,
                "notice_type_id": 1,
                "contract_type_id": 1,
                "contracting_authority_id": 1,
                "file": "specification.pdf",
                "cmimi": "5200000.00",
                "created_by": "admin",
                "flag": 0,
                "retendering": 0,
            },
        ],
    }


class MockApi:
    """Request handler backed by in-memory collections."""

    def __init__(self, seed: dict[str, list[dict[str, Any]]] | None = None):
        self.data: dict[str, list[dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        for name, rows in (default_seed() if seed is None else seed).items():
            self.data[name] = deepcopy(rows)
        self.sent_emails: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # -------------------------------------------------------------------------
    # Response helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _ok(data: Any, status: int = 200, **extra: Any) -> httpx.Response:
        return httpx.Response(status, json={"success": True, "data": data, **extra})

    @staticmethod
    def _fail(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"success": False, "message": message})

    def _next_id(self, collection: str) -> int:
        return max((row["id"] for row in self.data[collection]), default=0) + 1

    def _find(self, collection: str, item_id: int) -> dict[str, Any] | None:
        for row in self.data[collection]:
            if row.get("id") == item_id:
                return row
        return None

    def _paginate(self, rows: list[dict[str, Any]], params: httpx.QueryParams) -> httpx.Response:
        limit = int(params.get("limit") or 10)
        page = int(params.get("page") or 1)
        total = len(rows)
        start = (page - 1) * limit
        return self._ok(
            rows[start:start + limit],
            pagination={
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
        )

    @staticmethod
    def _matches(row: dict[str, Any], term: str) -> bool:
        term = term.lower()
        return any(term in str(row.get(key) or "").lower() for key in SEARCH_FIELDS)

    def _filter(self, rows: list[dict[str, Any]], params: httpx.QueryParams) -> list[dict[str, Any]]:
        term = params.get("search") or params.get("value")
        if term:
            rows = [row for row in rows if self._matches(row, term)]
        for key, value in params.items():
            if key in ("search", "value", "page", "limit", "status", "date_from", "date_to"):
                continue
            rows = [row for row in rows if str(row.get(key)) == value]
        status = params.get("status")
        if status is not None and status.isdigit():
            rows = [row for row in rows if str(row.get("status")) == status]
        return rows

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        segments = [s for s in request.url.path.split("/") if s]

        if "auth" in segments and segments[-1] == "login":
            return self._login(request)
        if "email" in segments:
            return self._email(request, segments[segments.index("email") + 1:])

        for index, segment in enumerate(segments):
            if segment in COLLECTIONS:
                return self._collection(request, segment, segments[index + 1:])

        return self._fail(404, f"Route not found: {request.url.path}")

    def _body(self, request: httpx.Request) -> dict[str, Any]:
        if not request.content:
            return {}
        try:
            body = json.loads(request.content)
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _form_parts(request: httpx.Request) -> list[tuple[str, str | None, bytes]]:
        """Split a multipart body into (field, filename, content) parts."""
        content_type = request.headers.get("Content-Type", "")
        if not content_type.startswith("multipart/"):
            return []
        head = f"Content-Type: {content_type}\r\n\r\n".encode("latin-1")
        message = BytesParser(policy=HTTP).parsebytes(head + request.content)
        parts = []
        for part in message.iter_parts():
            field = part.get_param("name", header="content-disposition")
            if field:
                parts.append((str(field), part.get_filename(), part.get_payload(decode=True) or b""))
        return parts

    def _login(self, request: httpx.Request) -> httpx.Response:
        body = self._body(request)
        if not body.get("username") or not body.get("password"):
            return self._fail(401, "Invalid username or password")
        user = {"id": 1, "username": body["username"].strip(), "name": "Administrator"}
        return httpx.Response(
            200,
            json={"success": True, "data": user, "token": f"mock-token-{user['username']}-{_now()}"},
        )

    def _email(self, request: httpx.Request, rest: list[str]) -> httpx.Response:
        action = rest[0] if rest else ""
        if action == "templates":
            return self._ok([
                {"value": "custom", "label": "Custom Message"},
                {"value": "renewal", "label": "Subscription Renewal"},
            ])
        if action == "recipient-groups":
            return self._ok([
                {"value": "active", "label": "Active Subscribers"},
                {"value": "expired", "label": "Expired Subscribers"},
                {"value": "specific", "label": "Specific Users"},
            ])
        if action == "users":
            rows = self._filter(self.data["members"], request.url.params)
            limit = int(request.url.params.get("limit") or 50)
            return self._ok([
                {
                    "value": row["id"],
                    "label": f"{row.get('name') or row['username']} ({row['email']})",
                    "email": row["email"],
                    "name": row.get("name") or row["username"],
                    "active": row.get("active", 1),
                }
                for row in rows[:limit]
            ])
        if action == "send" and request.method == "POST":
            body = self._body(request)
            self.sent_emails.append(body)
            recipients = body.get("specificUsers") or body.get("customEmails") or []
            return httpx.Response(200, json={
                "success": True,
                "message": "Email sent",
                "data": {
                    "totalRecipients": len(recipients),
                    "successful": len(recipients),
                    "failed": 0,
                    "recipients": recipients,
                },
            })
        return self._fail(404, "Unknown email route")

    def _collection(self, request: httpx.Request, name: str, rest: list[str]) -> httpx.Response:
        rows = self.data[name]
        params = request.url.params
        method = request.method

        if not rest:
            if method == "GET":
                return self._paginate(self._filter(rows, params), params)
            if method == "POST":
                body = self._body(request)
                record = {**body, "id": self._next_id(name), "create_date": _now()}
                rows.append(record)
                return self._ok(record, status=201)
            return self._fail(405, "Method not allowed")

        head = rest[0]

        if name == "members" and method == "GET" and head in ("active", "expired", "status", "filter"):
            return self._member_filter(rest, params)
        if name == "tenders" and method == "POST" and head == "upload":
            return self._upload(request)
        if name == "tenders" and method == "POST" and head == "process-document":
            return self._process_document(request)
        if head == "stats":
            return self._ok({"total": len(rows)})
        if head == "roots":
            return self._ok([row for row in rows if not row.get("parent_id")])
        if head == "search":
            term = rest[1] if len(rest) > 1 else (params.get("search") or "")
            return self._ok([row for row in rows if self._matches(row, term)])
        if head == "created-by" and len(rest) > 1:
            owned = [row for row in rows if row.get("created_by") == rest[1]]
            limit = int(params.get("limit") or 10)
            page = int(params.get("page") or 1)
            start = (page - 1) * limit
            return self._ok(owned[start:start + limit], pagination={"page": page, "limit": limit})

        if not head.isdigit():
            return self._fail(404, f"Route not found: {request.url.path}")

        record = self._find(name, int(head))
        if record is None:
            return self._fail(404, f"{name} {head} not found")

        if len(rest) > 1:
            return self._record_action(request, name, record, rest[1:])

        if method == "GET":
            return self._ok(record)
        if method in ("PUT", "PATCH"):
            record.update({k: v for k, v in self._body(request).items() if k != "id"})
            record["update_date"] = _now()
            return self._ok(record)
        if method == "DELETE":
            rows.remove(record)
            return self._ok(None)
        return self._fail(405, "Method not allowed")

    def _member_filter(self, rest: list[str], params: httpx.QueryParams) -> httpx.Response:
        now = _now()
        rows = self.data["members"]
        head = rest[0]
        if head == "active":
            rows = [r for r in rows if r.get("active") == 1 and (r.get("expire_date") or now + 1) > now]
        elif head == "expired":
            rows = [r for r in rows if (r.get("expire_date") or now + 1) <= now]
        elif head == "status" and len(rest) > 1:
            rows = [r for r in rows if str(r.get("status")) == rest[1]]
        elif head == "filter" and len(rest) > 1 and rest[1] == "inactive":
            rows = [r for r in rows if r.get("active") != 1]
        term = params.get("search")
        if term:
            rows = [r for r in rows if self._matches(r, term)]
        return self._paginate(rows, params)

    def _record_action(
        self,
        request: httpx.Request,
        name: str,
        record: dict[str, Any],
        action: list[str],
    ) -> httpx.Response:
        body = self._body(request)
        verb = action[0]

        if name == "tenders" and verb == "download" and len(action) > 1:
            filename = "/".join(action[1:])
            files = {record.get(key) for key in ("file", "file_2", "file_3", "file_4", "file_5")}
            if filename not in files:
                return self._fail(404, f"File not found: {filename}")
            return httpx.Response(
                200,
                content=f"Mock document {filename} for tender {record['id']}".encode("utf-8"),
                headers={"Content-Type": "application/octet-stream"},
            )

        if name == "members":
            if verb == "extend-valid-time":
                days = int(body.get("days") or 0)
                if days <= 0:
                    return self._fail(400, "days must be a positive number")
                base = record.get("expire_date") or _now()
                record["expire_date"] = base + days * 24 * 3600
                return self._ok(record)
            if verb == "status":
                record["status"] = body.get("status")
                return self._ok(record)
            if verb == "active":
                record["active"] = body.get("active")
                return self._ok(record)
            if verb == "activate":
                record["active"] = 1
                record["status"] = 1
                return self._ok(record)
            if verb == "password":
                if not body.get("password"):
                    return self._fail(400, "Password is required")
                return self._ok(None)

        return self._fail(404, f"Unknown action: {verb}")

    def _upload(self, request: httpx.Request) -> httpx.Response:
        parts = self._form_parts(request)
        files = [(field, filename, content) for field, filename, content in parts if filename]
        if not files:
            return self._fail(400, "No files uploaded")

        tender_id = next(
            (int(content) for field, _, content in parts if field == "tenderId" and content.strip().isdigit()),
            None,
        )
        tender = self._find("tenders", tender_id) if tender_id else None
        if tender_id and tender is None:
            return self._fail(404, f"tenders {tender_id} not found")

        uploaded = []
        slots = ("file", "file_2", "file_3", "file_4", "file_5")
        for index, (field, filename, content) in enumerate(files[:len(slots)], start=1):
            uploaded.append({
                "id": index,
                "name": filename,
                "size": len(content),
                "url": f"mock://uploads/{filename}",
                "fieldName": field,
            })
            if tender is not None:
                tender[slots[index - 1]] = filename
        return httpx.Response(200, json={"uploadedFiles": uploaded, "tenderId": tender_id})

    def _process_document(self, request: httpx.Request) -> httpx.Response:
        document = next(
            (filename for field, filename, _ in self._form_parts(request) if field == "document" and filename),
            None,
        )
        if not document:
            return self._fail(400, "No document uploaded")
        today = datetime.now(timezone.utc).replace(microsecond=0)
        return httpx.Response(200, json={
            "link": f"https://example.com/tender/{document}",
            "title": "Construction of administrative building in Pristina",
            "prosecutionNumber": "TN-2024-001",
            "category": "Construction",
            "subCategory": "Commercial Buildings",
            "contractType": "Works",
            "procedure": "Open",
            "noticeType": "Contract Notice",
            "country": "Kosovo",
            "region": "Pristina",
            "publicationDate": today.isoformat(),
            "endDate": (today + timedelta(days=30)).isoformat(),
            "email": "procurement@example.com",
            "price": "150000.00",
            "retendering": False,
            "description": f"Extracted from {document}.",
            "authorities": ["Ministry of Infrastructure", "Municipality of Pristina"],
        })
