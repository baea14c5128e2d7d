"""Tender listing, documents, uploads and downloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

from tenderadmin.core.api.envelope import Page, estimate_page, parse_record, unwrap_entity
from tenderadmin.core.models.entities import DOCUMENT_FIELDS, ExtractedTender, Tender, UploadResult

from .base import ResourceService


def _payload(body: Any) -> Any:
    # Upload routes answer either enveloped or with the fields at the top level
    data = unwrap_entity(body)
    return body if data is None else data


@dataclass
class TenderDocument:
    """A stored document attached to a tender."""

    name: str
    path: str
    field: str
    url: str


class TendersService(ResourceService[Tender]):
    endpoint = "/tenders"
    model = Tender
    label = "Tender"
    search_key = "value"

    async def list_by_creator(
        self,
        created_by: str,
        params: dict[str, Any] | None = None,
    ) -> Page[Tender]:
        """List tenders created by one admin.

        This route omits totals, so pagination is estimated from the
        size of the returned page.
        """
        query = self.with_paging(params)
        body = await self.client.get(self.path("created-by", quote(created_by, safe="")), params=query)
        page = estimate_page(body, page=query["page"], limit=query["limit"])
        return page.map(self.parse)

    def download_path(self, tender_id: int, filename: str) -> str:
        return self.path(tender_id, "download", filename)

    async def download_file(self, tender_id: int, filename: str, destination: Path | str) -> Path:
        """Save one tender document to disk."""
        destination = Path(destination)
        if destination.is_dir():
            destination = destination / Path(filename).name
        self.log.info("Downloading %s from tender %s", filename, tender_id)
        return await self.client.download(self.download_path(tender_id, filename), destination)

    def documents(self, tender: Tender) -> list[TenderDocument]:
        """List the documents present on a tender, in slot order."""
        documents = []
        for index, field_name in enumerate(DOCUMENT_FIELDS, start=1):
            stored = getattr(tender, field_name)
            if not stored:
                continue
            documents.append(
                TenderDocument(
                    name=stored.split("/")[-1] or f"Document {index}",
                    path=stored,
                    field=field_name,
                    url=self.download_path(tender.id, stored),
                )
            )
        return documents

    @staticmethod
    def is_expired(tender: Tender, now: datetime | None = None) -> bool:
        return tender.is_expired(now)

    async def upload_files(self, paths: list[Path | str], tender_id: int | None = None) -> UploadResult:
        """Store documents for a tender as file_1..file_n.

        Raises:
            ValueError: More files than a tender has document slots
        """
        if len(paths) > len(DOCUMENT_FIELDS):
            raise ValueError(f"A tender holds at most {len(DOCUMENT_FIELDS)} documents")
        files = []
        for index, path in enumerate(paths, start=1):
            path = Path(path)
            files.append((f"file_{index}", (path.name, path.read_bytes())))
        data = {"tenderId": str(tender_id)} if tender_id else None

        self.log.info("Uploading %s document(s) for tender %s", len(files), tender_id or "(new)")
        body = await self.client.post(self.path("upload"), data=data, files=files)
        return parse_record(UploadResult, _payload(body), "upload")

    async def process_document(self, path: Path | str) -> ExtractedTender:
        """Send one document to the server and read back the tender fields it found."""
        path = Path(path)
        self.log.info("Extracting tender fields from %s", path.name)
        body = await self.client.post(
            self.path("process-document"),
            files={"document": (path.name, path.read_bytes())},
        )
        return parse_record(ExtractedTender, _payload(body), "extracted tender")
