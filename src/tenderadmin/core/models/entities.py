"""
Pydantic models for API entities.

The backend adds fields over time, so every model keeps unknown keys.
Dates are epoch seconds for members and either epoch seconds or ISO
strings for tenders.
"""

from __future__ import annotations

import math
import time
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tenderadmin.core.normalize.parsing import SECONDS_PER_DAY, parse_date


DOCUMENT_FIELDS = ("file", "file_2", "file_3", "file_4", "file_5")


class AccountStatus(str, Enum):
    """Derived subscriber account status."""
    INACTIVE = "Inactive"
    EXPIRED = "Expired"
    EXPIRING_SOON = "Expiring Soon"
    INVALID_STATUS = "Invalid Status"
    ACTIVE = "Active"


def coerce_text(v: Any) -> Any:
    """Null text from the API becomes an empty string; numbers become text."""
    if v is None:
        return ""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class Entity(BaseModel):
    """Base for every API record."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int = Field(default=0, description="Server-assigned identifier (0 before creation)")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int:
        if v is None or v == "":
            return 0
        return int(v)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ReferenceItem(Entity):
    """Named lookup record (procedures, regions, contract types, ...)."""

    name: str = ""
    created_by: str | None = None
    create_date: int | None = None
    updated_by: str | None = None
    update_date: int | None = None
    update_no: int | None = None

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> Any:
        return coerce_text(v)

    @property
    def display_name(self) -> str:
        return self.name or f"#{self.id}"


class NoticeType(ReferenceItem):
    """Notice type; the API names the label ``notice``."""

    notice: str = ""

    @field_validator("notice", mode="before")
    @classmethod
    def coerce_notice(cls, v: Any) -> Any:
        return coerce_text(v)

    @model_validator(mode="after")
    def mirror_name(self) -> "NoticeType":
        if self.notice and not self.name:
            self.name = self.notice
        elif self.name and not self.notice:
            self.notice = self.name
        return self


class Category(ReferenceItem):
    """Tender category; roots have ``parent_id == 0``."""

    parent_id: int = 0
    code: str = ""

    @field_validator("parent_id", mode="before")
    @classmethod
    def coerce_parent(cls, v: Any) -> int:
        return int(v) if v not in (None, "") else 0

    @field_validator("code", mode="before")
    @classmethod
    def coerce_code(cls, v: Any) -> Any:
        return coerce_text(v)

    @model_validator(mode="after")
    def derive_code(self) -> "Category":
        if not self.code and self.name:
            self.code = self.name[:4].upper()
        return self

    @property
    def is_root(self) -> bool:
        return self.parent_id == 0


class Tender(Entity):
    """A procurement notice."""

    title: str = ""
    procurement_number: str | None = None
    publication_date: int | str | None = None
    expiry_date: int | str | None = None
    retendering: bool | int | None = None
    folder: str | None = None

    file: str | None = None
    file_2: str | None = None
    file_3: str | None = None
    file_4: str | None = None
    file_5: str | None = None

    contract_type_id: int | None = None
    category_id: int | None = None
    procedures_id: int | None = None
    notice_type_id: int | None = None
    region_id: int | None = None
    states_id: int | None = None
    contracting_authority_id: int | None = None

    # Joined names
    contracting_authority_name: str | None = None
    category_name: str | None = None
    contract_type_name: str | None = None
    procedure_name: str | None = None
    notice_type_name: str | None = None
    region_name: str | None = None
    state_name: str | None = None

    description: str | None = None
    email: str | None = None
    cmimi: float | str | None = None
    flag: int | None = None

    created_by: str | None = None
    create_date: int | None = None
    updated_by: str | None = None
    update_date: int | None = None
    update_no: int | None = None

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v: Any) -> Any:
        return coerce_text(v)

    @property
    def expiry(self) -> datetime | None:
        return parse_date(self.expiry_date)

    def is_expired(self, now: datetime | None = None) -> bool:
        expiry = self.expiry
        if expiry is None:
            return False
        return expiry < (now or datetime.now())

    def document_names(self) -> list[str]:
        """Stored document names, in slot order."""
        return [getattr(self, name) for name in DOCUMENT_FIELDS if getattr(self, name)]


class Member(Entity):
    """A subscriber account."""

    username: str = ""
    email: str = ""
    name: str | None = None
    status: int = 0
    active: int = 0
    group: int | None = None
    register_date: int | None = None
    expire_date: int | None = None
    phone_number: str | None = None
    company: str | None = None
    fiscal_number: str | None = None
    contact: str | None = None
    package: str | None = None

    @field_validator("username", "email", mode="before")
    @classmethod
    def coerce_login(cls, v: Any) -> Any:
        return coerce_text(v)

    @field_validator("status", "active", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> int:
        if v is None or v == "":
            return 0
        if isinstance(v, bool):
            return int(v)
        return int(v)

    def _now(self, now: float | None) -> float:
        return time.time() if now is None else now

    def is_expired(self, now: float | None = None) -> bool:
        if not self.expire_date:
            return False
        return self.expire_date < int(self._now(now))

    def days_until_expiry(self, now: float | None = None) -> int:
        if not self.expire_date:
            return 0
        return math.ceil((self.expire_date - int(self._now(now))) / SECONDS_PER_DAY)

    def account_status(self, now: float | None = None) -> AccountStatus:
        if self.active != 1:
            return AccountStatus.INACTIVE
        if self.is_expired(now):
            return AccountStatus.EXPIRED
        if 0 <= self.days_until_expiry(now) <= 7:
            return AccountStatus.EXPIRING_SOON
        if self.status != 1:
            return AccountStatus.INVALID_STATUS
        return AccountStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return self.name or self.username


class EmailOption(BaseModel):
    """Value/label pair used by the email endpoints."""

    model_config = ConfigDict(extra="allow")

    value: Any
    label: str = ""
    email: str | None = None
    name: str | None = None

    @field_validator("label", mode="before")
    @classmethod
    def coerce_label(cls, v: Any) -> Any:
        return coerce_text(v)


class EmailSendResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    total_recipients: int = Field(default=0, alias="totalRecipients")
    successful: int = 0
    failed: int = 0
    recipients: list[Any] = Field(default_factory=list)


class UploadedFile(BaseModel):
    """A document stored by POST /tenders/upload."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | int | None = None
    name: str = ""
    size: int = 0
    url: str | None = None
    field_name: str | None = Field(default=None, alias="fieldName")


class UploadResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uploaded_files: list[UploadedFile] = Field(default_factory=list, alias="uploadedFiles")
    tender_id: int | None = Field(default=None, alias="tenderId")

    def names(self) -> list[str]:
        return [f.name for f in self.uploaded_files if f.name]


class ExtractedTender(BaseModel):
    """Fields read out of a tender document by the server.

    Lookup fields (category, procedure, ...) come back as names and are
    resolved against the reference lists by the caller.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    link: str | None = None
    title: str | None = None
    procurement_number: str | None = Field(default=None, alias="prosecutionNumber")
    category: str | None = None
    sub_category: str | None = Field(default=None, alias="subCategory")
    contract_type: str | None = Field(default=None, alias="contractType")
    procedure: str | None = None
    notice_type: str | None = Field(default=None, alias="noticeType")
    country: str | None = None
    region: str | None = None
    publication_date: str | None = Field(default=None, alias="publicationDate")
    end_date: str | None = Field(default=None, alias="endDate")
    email: str | None = None
    price: str | None = None
    retendering: bool = False
    description: str | None = None
    authorities: list[str] = Field(default_factory=list)

    @field_validator(
        "link", "title", "procurement_number", "category", "sub_category", "contract_type", "procedure",
        "notice_type", "country", "region", "publication_date", "end_date", "email", "price", "description",
        mode="before",
    )
    @classmethod
    def coerce_scalars(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return coerce_text(v)

    @field_validator("retendering", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("1", "true", "yes", "po")
        return bool(v)

    @field_validator("authorities", mode="before")
    @classmethod
    def coerce_authorities(cls, v: Any) -> list[str]:
        if not v:
            return []
        if isinstance(v, str):
            return [v]
        return [str(a.get("name", "")) if isinstance(a, dict) else str(a) for a in v if a]
