"""Subscriber forms."""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from typing import Any

from tenderadmin.core.models.entities import Member
from tenderadmin.core.normalize.parsing import SECONDS_PER_DAY, parse_date

from .base import EMAIL_PATTERN, Form, blank

EXPIRY_NOT_LATER = "New expiry date must be after the current expiry date."


def email_error(email: str | None) -> str | None:
    if blank(email):
        return "Email is required"
    if not re.search(EMAIL_PATTERN, email or ""):
        return "Email is invalid"
    return None


@dataclass
class MemberForm(Form):
    """Add/edit subscriber fields."""

    username: str = ""
    name: str = ""
    email: str = ""
    password: str = ""
    phone_number: str | None = None
    company: str | None = None
    fiscal_number: str | None = None
    contact: str | None = None
    package: str | None = None
    status: int | None = None
    active: int | None = None
    group: int | None = None
    register_date: Any = None
    expire_date: Any = None
    creating: bool = True

    @classmethod
    def from_member(cls, member: Member) -> "MemberForm":
        return cls(
            username=member.username,
            name=member.name or member.username,
            email=member.email,
            phone_number=member.phone_number,
            company=member.company,
            fiscal_number=member.fiscal_number,
            contact=member.contact,
            package=member.package,
            status=member.status,
            active=member.active,
            group=member.group,
            creating=False,
        )

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if blank(self.username):
            errors["username"] = "Username is required"
        if blank(self.name):
            errors["name"] = "Name is required"
        problem = email_error(self.email)
        if problem:
            errors["email"] = problem
        if self.creating and blank(self.password):
            errors["password"] = "Password is required"
        for key, label in (("register_date", "Registration date"), ("expire_date", "Expiry date")):
            value = getattr(self, key)
            if not blank(value) and parse_date(value) is None:
                errors[key] = f"{label} is not a valid date"
        return errors

    def to_payload(self) -> dict[str, Any]:
        """Raw values for MembersService.create/update (which trims them)."""
        payload: dict[str, Any] = {
            "username": self.username,
            "name": self.name,
            "email": self.email,
        }
        if self.password:
            payload["password"] = self.password
        for key in ("phone_number", "company", "fiscal_number", "contact", "package", "status", "active", "group"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        for key in ("register_date", "expire_date"):
            parsed = parse_date(getattr(self, key))
            if parsed is not None:
                payload[key] = int(parsed.timestamp())
        return payload


@dataclass
class ExtendExpiryForm(Form):
    """Move a subscriber's expiry to a new date.

    The number of days sent to the API is counted from the current expiry
    (or from now when the subscriber has none), rounded up.
    """

    member: Member
    new_date: Any = None
    now: float | None = None

    @property
    def base_timestamp(self) -> float:
        if self.member.expire_date:
            return float(self.member.expire_date)
        return time.time() if self.now is None else self.now

    @property
    def days(self) -> int | None:
        target = parse_date(self.new_date)
        if target is None:
            return None
        return math.ceil((target.timestamp() - self.base_timestamp) / SECONDS_PER_DAY)

    def field_errors(self) -> dict[str, str]:
        if blank(self.new_date):
            return {"new_date": "Please choose a new expiry date"}
        days = self.days
        if days is None:
            return {"new_date": "New expiry date is not a valid date"}
        if days <= 0:
            return {"new_date": EXPIRY_NOT_LATER}
        return {}
