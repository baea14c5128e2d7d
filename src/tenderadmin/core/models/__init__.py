"""API entity models."""

from .entities import (
    DOCUMENT_FIELDS,
    AccountStatus,
    Entity,
    ReferenceItem,
    NoticeType,
    Category,
    Tender,
    Member,
    EmailOption,
    EmailSendResult,
    UploadedFile,
    UploadResult,
    ExtractedTender,
)

__all__ = [
    "DOCUMENT_FIELDS",
    "AccountStatus",
    "Entity",
    "ReferenceItem",
    "NoticeType",
    "Category",
    "Tender",
    "Member",
    "EmailOption",
    "EmailSendResult",
    "UploadedFile",
    "UploadResult",
    "ExtractedTender",
]
