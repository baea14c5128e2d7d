"""Create and edit forms for tenders."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tenderadmin.core.auth.session import display_name
from tenderadmin.core.models.entities import DOCUMENT_FIELDS, ExtractedTender, Tender
from tenderadmin.core.normalize.parsing import parse_date, to_timestamp
from tenderadmin.core.reference.subcategories import Subcategory, belongs_to, subcategories_for

from .base import Form, blank, trimmed

DOCUMENT_REQUIRED = "At least one document is required for the tender"

MAX_DOCUMENTS = len(DOCUMENT_FIELDS)


def _check_date(errors: dict[str, str], key: str, label: str, value: Any) -> None:
    if not blank(value) and parse_date(value) is None:
        errors[key] = f"{label} is not a valid date"


@dataclass
class TenderForm(Form):
    """Fields of the add-tender page."""

    title: str = ""
    procurement_number: str = ""
    category: str | None = None
    category_id: int | None = None
    subcategory_id: int | None = None
    contract_type_id: int | None = None
    procedure_id: int | None = None
    notice_type_id: int | None = None
    country_id: int | None = None
    region_id: int | None = None
    publication_date: Any = None
    end_date: Any = None
    email: str = ""
    price: str = ""
    retendering: bool = False
    description: str = ""
    authority_ids: list[int] = field(default_factory=list)
    documents: list[str | Path] = field(default_factory=list)

    def select_category(self, name: str | None, category_id: int | None = None) -> list[Subcategory]:
        """Change the category and return the subcategories now on offer.

        A selected subcategory that does not belong to the new category is
        cleared; clearing the category clears the subcategory.
        """
        if not name:
            self.category = None
            self.category_id = None
            self.subcategory_id = None
            return []

        self.category = name
        self.category_id = category_id
        if self.subcategory_id is not None and not belongs_to(self.subcategory_id, name):
            self.subcategory_id = None
        return subcategories_for(name)

    def fill_from(self, extracted: ExtractedTender) -> "TenderForm":
        """Pre-fill blank fields with values read from a tender document.

        Values already entered win. Lookup names (category, procedure, ...)
        are left to the caller, which has the reference lists.
        """
        for key in ("title", "procurement_number", "email", "price", "description"):
            value = getattr(extracted, key)
            if blank(getattr(self, key)) and not blank(value):
                setattr(self, key, value.strip())
        if blank(self.publication_date) and extracted.publication_date:
            self.publication_date = extracted.publication_date
        if blank(self.end_date) and extracted.end_date:
            self.end_date = extracted.end_date
        self.retendering = self.retendering or extracted.retendering
        return self

    @property
    def subcategory_options(self) -> list[Subcategory]:
        return subcategories_for(self.category)

    def document_names(self) -> list[str]:
        return [Path(doc).name for doc in self.documents if doc][:MAX_DOCUMENTS]

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.document_names():
            errors["documents"] = DOCUMENT_REQUIRED
        _check_date(errors, "publication_date", "Publication date", self.publication_date)
        _check_date(errors, "end_date", "End date", self.end_date)
        return errors

    def to_payload(self, current_user: dict[str, Any] | None = None, now: int | None = None) -> dict[str, Any]:
        """Build the POST /tenders body."""
        author = display_name(current_user)
        payload: dict[str, Any] = {
            "title": trimmed(self.title),
            "procurement_number": trimmed(self.procurement_number),
            "publication_date": to_timestamp(self.publication_date),
            "expiry_date": to_timestamp(self.end_date),
            "description": trimmed(self.description),
            "notice_type_id": self.notice_type_id or None,
            "category_id": self.category_id or None,
            "procedures_id": self.procedure_id or None,
            "contract_type_id": self.contract_type_id or None,
            "region_id": self.region_id or None,
            "states_id": self.country_id or None,
            "contracting_authority_id": self.authority_ids[0] if self.authority_ids else None,
            "cmimi": trimmed(self.price),
            "email": trimmed(self.email),
            "folder": None,
            "created_by": author,
            "updated_by": author,
            "create_date": int(time.time()) if now is None else now,
            "flag": 0,
            "retendering": 1 if self.retendering else 0,
        }
        for field_name, name in zip(DOCUMENT_FIELDS, self.document_names()):
            payload[field_name] = name
        return payload


@dataclass
class TenderEditForm(Form):
    """Fields editable on an existing tender."""

    id: int = 0
    title: str | None = None
    procurement_number: str | None = None
    description: str | None = None
    email: str | None = None
    price: Any = None
    category_id: int | None = None
    contract_type_id: int | None = None
    procedure_id: int | None = None
    notice_type_id: int | None = None
    country_id: int | None = None
    region_id: int | None = None
    authority_ids: list[int] = field(default_factory=list)
    publication_date: Any = None
    expiry_date: Any = None
    retendering: bool = False

    @classmethod
    def from_tender(cls, tender: Tender) -> "TenderEditForm":
        return cls(
            id=tender.id,
            title=tender.title,
            procurement_number=tender.procurement_number,
            description=tender.description,
            email=tender.email,
            price=tender.cmimi,
            category_id=tender.category_id,
            contract_type_id=tender.contract_type_id,
            procedure_id=tender.procedures_id,
            notice_type_id=tender.notice_type_id,
            country_id=tender.states_id,
            region_id=tender.region_id,
            authority_ids=[tender.contracting_authority_id] if tender.contracting_authority_id else [],
            publication_date=tender.publication_date,
            expiry_date=tender.expiry_date,
            retendering=bool(tender.retendering),
        )

    def apply(self, **changes: Any) -> "TenderEditForm":
        """Overwrite fields with the non-None values given."""
        for key, value in changes.items():
            if value is None:
                continue
            if not hasattr(self, key):
                raise AttributeError(f"Unknown tender field: {key}")
            setattr(self, key, value)
        return self

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if self.title is not None and blank(self.title):
            errors["title"] = "Title cannot be empty"
        _check_date(errors, "publication_date", "Publication date", self.publication_date)
        _check_date(errors, "expiry_date", "Expiry date", self.expiry_date)
        return errors

    def to_payload(self) -> dict[str, Any]:
        """Build the PUT body: only fields that are set, plus retendering."""
        payload: dict[str, Any] = {}
        for key in ("title", "procurement_number", "description", "email"):
            value = getattr(self, key)
            if value:
                payload[key] = value
        if self.price:
            payload["cmimi"] = str(self.price)

        id_fields = {
            "category_id": self.category_id,
            "contract_type_id": self.contract_type_id,
            "procedures_id": self.procedure_id,
            "notice_type_id": self.notice_type_id,
            "states_id": self.country_id,
            "region_id": self.region_id,
        }
        payload.update({k: v for k, v in id_fields.items() if v})

        if self.authority_ids:
            payload["contracting_authority_id"] = self.authority_ids[0]
        if self.publication_date:
            payload["publication_date"] = to_timestamp(self.publication_date)
        if self.expiry_date:
            payload["expiry_date"] = to_timestamp(self.expiry_date)

        payload["retendering"] = 1 if self.retendering else 0
        return payload
