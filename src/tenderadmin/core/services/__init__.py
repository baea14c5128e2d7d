"""Typed services over the API collections."""

from .base import ResourceService, clean_params
from .tenders import TenderDocument, TendersService
from .members import MembersService, clean_member_payload
from .reference import (
    NoticeTypesService,
    ProceduresService,
    CategoriesService,
    ContractingAuthoritiesService,
    ContractTypesService,
    RegionsService,
    CountriesService,
)
from .email import EmailRequest, EmailService, password_email

__all__ = [
    "ResourceService",
    "clean_params",
    # Tenders
    "TenderDocument",
    "TendersService",
    # Members
    "MembersService",
    "clean_member_payload",
    # Reference data
    "NoticeTypesService",
    "ProceduresService",
    "CategoriesService",
    "ContractingAuthoritiesService",
    "ContractTypesService",
    "RegionsService",
    "CountriesService",
    # Email
    "EmailRequest",
    "EmailService",
    "password_email",
]
