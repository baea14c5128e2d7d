"""
Email commands: bulk messages and password resets.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.markup import escape

from tenderadmin.core.forms.base import FormController
from tenderadmin.core.forms.password import PasswordResetForm
from tenderadmin.core.models.entities import EmailOption, EmailSendResult
from tenderadmin.core.reference.resolve import resolve_option
from tenderadmin.core.api.base import NotFoundError
from tenderadmin.core.services.email import EmailRequest, EmailService, password_email
from tenderadmin.core.services.members import MembersService

from ..runtime import Runtime, console, err_console, open_runtime, print_rows, run

app = typer.Typer(
    help="Send email to subscribers",
    no_args_is_help=True,
)

OPTION_COLUMNS = [
    ("value", "Value", lambda o: o.value),
    ("label", "Label", lambda o: o.label),
]


def _print_result(result: EmailSendResult) -> None:
    console.print(
        f"[dim]Recipients:[/dim] {result.total_recipients}  "
        f"[green]sent {result.successful}[/green]  "
        f"[red]failed {result.failed}[/red]"
    )


async def _find_recipient(rt: Runtime, query: str) -> Optional[EmailOption]:
    """Look a subscriber up by id, or by name/email among the email users."""
    text = query.strip()
    if text.isdigit():
        try:
            member = await MembersService(rt.client).get(int(text))
        except NotFoundError:
            return None
        return EmailOption(
            value=member.id,
            label=f"{member.display_name} ({member.email})",
            email=member.email,
            name=member.display_name,
        )
    candidates = await EmailService(rt.client).users(text)
    exact = next((c for c in candidates if c.email and c.email.lower() == text.lower()), None)
    return exact or resolve_option(text, candidates)


@app.command("templates")
def templates() -> None:
    """List the available email templates."""

    async def _templates() -> list[EmailOption]:
        async with open_runtime() as rt:
            return await EmailService(rt.client).templates()

    print_rows(run(_templates()), OPTION_COLUMNS, title="Email templates")


@app.command("groups")
def groups() -> None:
    """List the recipient groups."""

    async def _groups() -> list[EmailOption]:
        async with open_runtime() as rt:
            return await EmailService(rt.client).recipient_groups()

    print_rows(run(_groups()), OPTION_COLUMNS, title="Recipient groups")


@app.command("users")
def users(
    search: Optional[str] = typer.Option(None, "--search", "-s"),
    limit: int = typer.Option(50, "--limit", "-n", min=1),
) -> None:
    """Search subscribers that can receive email."""

    async def _users() -> list[EmailOption]:
        async with open_runtime() as rt:
            return await EmailService(rt.client).users(search, limit=limit)

    print_rows(run(_users()), [*OPTION_COLUMNS, ("email", "Email", lambda o: o.email)], title="Recipients")


@app.command("send")
def send(
    subject: str = typer.Option(..., "--subject", help="Subject line"),
    message: str = typer.Option(..., "--message", "-m", help="Message body"),
    to: str = typer.Option("all", "--to", help="Recipient group (see 'email groups')"),
    user: Optional[List[int]] = typer.Option(None, "--user", "-u", help="Subscriber id (repeatable, implies --to specific)"),
    email: Optional[List[str]] = typer.Option(None, "--email", "-e", help="Extra address (repeatable)"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Template name"),
) -> None:
    """Send an email to a group or to specific subscribers."""
    if not subject.strip() or not message.strip():
        err_console.print("[red]Subject and message are required[/red]")
        raise typer.Exit(1)

    request = EmailRequest(
        subject=subject.strip(),
        message=message,
        recipientType="specific" if user else to,
        specificUsers=list(user or []),
        customEmails=list(email or []),
        template=template,
    )

    async def _send() -> EmailSendResult:
        async with open_runtime() as rt:
            result = await EmailService(rt.client).send(request)
            rt.notifier.success("Email Sent", f"Sent to {result.successful} of {result.total_recipients} recipients.")
            return result

    _print_result(run(_send()))


@app.command("send-password")
def send_password(
    user: str = typer.Argument(..., help="Subscriber id, name or email"),
    show: bool = typer.Option(False, "--show", help="Print the generated password"),
) -> None:
    """Generate a new password and email it to a subscriber."""

    async def _send_password() -> tuple[EmailOption, str]:
        async with open_runtime() as rt:
            service = EmailService(rt.client)
            recipient = await _find_recipient(rt, user)
            if recipient is None:
                err_console.print(f"[red]Subscriber not found:[/red] {escape(user)}")
                raise typer.Exit(1)

            form = PasswordResetForm(user_id=int(recipient.value))
            form.generate()
            await FormController(rt.notifier, "User").submit(
                form,
                lambda: service.send(
                    password_email(form.user_id, recipient.name or recipient.label, form.password)
                ),
                verb="Send Password",
                success_title="Password Sent Successfully!",
                success_message=f"New password has been sent to {recipient.email or recipient.label}",
            )
            return recipient, form.password

    recipient, password = run(_send_password())
    if show:
        console.print(f"[dim]Password for {escape(recipient.label)}:[/dim] [bold]{password}[/bold]")
