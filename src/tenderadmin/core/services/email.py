"""Bulk and single-recipient email."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from tenderadmin.core.api.base import ApiError
from tenderadmin.core.api.client import ApiClient
from tenderadmin.core.api.envelope import parse_record, parse_records, unwrap_list
from tenderadmin.core.logging import get_contextual_logger
from tenderadmin.core.models.entities import EmailOption, EmailSendResult

PASSWORD_SUBJECT = "Your New Password - UTender"

PASSWORD_MESSAGE = """Hello {name},

Your new password for UTender has been generated:

Password: {password}

For security reasons, please log in and change this password as soon as possible.

If you did not request this password reset, please contact our support team immediately.

Best regards,
The UTender Team"""


@dataclass
class EmailRequest:
    """Body of POST /email/send."""

    subject: str
    message: str
    recipientType: str = "all"
    specificUsers: list[int] = field(default_factory=list)
    customEmails: list[str] = field(default_factory=list)
    template: str | None = None
    templateData: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v not in (None, [])}


def password_email(user_id: int, name: str, password: str) -> EmailRequest:
    """Build the new-password message for one subscriber."""
    return EmailRequest(
        subject=PASSWORD_SUBJECT,
        message=PASSWORD_MESSAGE.format(name=name, password=password),
        recipientType="specific",
        specificUsers=[user_id],
        template="custom",
    )


class EmailService:
    endpoint = "/email"

    def __init__(self, client: ApiClient):
        self.client = client
        self.log = get_contextual_logger("services", "email")

    async def send(self, request: EmailRequest) -> EmailSendResult:
        """Send an email; a body with ``success: false`` raises ApiError."""
        self.log.info("Sending %r to %s", request.subject, request.recipientType)
        body = await self.client.post(f"{self.endpoint}/send", json=request.to_payload())
        if isinstance(body, dict) and body.get("success") is False:
            raise ApiError(body.get("message") or "Failed to send email", data=body)
        data = body.get("data") if isinstance(body, dict) else None
        return parse_record(EmailSendResult, data or {})

    async def templates(self) -> list[EmailOption]:
        body = await self.client.get(f"{self.endpoint}/templates")
        return parse_records(EmailOption, unwrap_list(body))

    async def users(self, search: str | None = None, limit: int = 50) -> list[EmailOption]:
        params = {"search": search or None, "limit": limit}
        body = await self.client.get(f"{self.endpoint}/users", params=params)
        return parse_records(EmailOption, unwrap_list(body))

    async def recipient_groups(self) -> list[EmailOption]:
        body = await self.client.get(f"{self.endpoint}/recipient-groups")
        return parse_records(EmailOption, unwrap_list(body))
