"""
Subscriber account commands.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Optional

import typer
from rich.text import Text

from tenderadmin.core.forms.base import Form, FormController
from tenderadmin.core.forms.member import ExtendExpiryForm, MemberForm
from tenderadmin.core.forms.password import generate_password
from tenderadmin.core.models.entities import AccountStatus, Member
from tenderadmin.core.normalize.parsing import format_date
from tenderadmin.core.services.members import MembersService

from ..runtime import (
    Column,
    check_format,
    confirm_delete,
    console,
    list_controller,
    open_runtime,
    print_listing,
    print_record,
    run,
)

app = typer.Typer(
    help="Manage subscriber accounts",
    no_args_is_help=True,
)

# Status codes used by the members API
STATUS_PENDING = 0
STATUS_SUSPENDED = 2

VIEWS = ("all", "active", "expired", "suspended", "inactive", "pending")

_STATUS_STYLES = {
    AccountStatus.ACTIVE: "green",
    AccountStatus.EXPIRING_SOON: "yellow",
    AccountStatus.EXPIRED: "red",
    AccountStatus.INACTIVE: "dim",
    AccountStatus.INVALID_STATUS: "magenta",
}


def _account_status(member: Member) -> Text:
    status = member.account_status()
    return Text(status.value, style=_STATUS_STYLES[status])


COLUMNS: list[Column] = [
    ("id", "ID", lambda m: m.id),
    ("username", "Username", lambda m: m.username),
    ("name", "Name", lambda m: m.name),
    ("email", "Email", lambda m: m.email),
    ("company", "Company", lambda m: m.company),
    ("expire_date", "Expires", lambda m: format_date(m.expire_date)),
    ("days_left", "Days left", lambda m: m.days_until_expiry() if m.expire_date else None),
    ("status", "Status", _account_status),
]


def _check_view(value: str) -> str:
    if value not in VIEWS:
        raise typer.BadParameter(f"Must be one of: {', '.join(VIEWS)}")
    return value


def _fetch_for(service: MembersService, view: str):
    return {
        "all": service.list,
        "active": service.list_active,
        "expired": service.list_expired,
        "suspended": partial(service.list_by_status, STATUS_SUSPENDED),
        "inactive": service.list_inactive,
        "pending": partial(service.list_by_status, STATUS_PENDING),
    }[view]


@app.command("list")
def list_subscribers(
    view: str = typer.Option("all", "--view", "-v", callback=_check_view, help=f"Which subscribers ({', '.join(VIEWS)})"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Rows per page"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search username, name, email"),
    status: Optional[int] = typer.Option(None, "--status", help="Filter by status code (all view)"),
    active: Optional[bool] = typer.Option(None, "--active/--not-active", help="Filter by active flag (all view)"),
    group: Optional[int] = typer.Option(None, "--group", help="Filter by group (all view)"),
    format: str = typer.Option("table", "--format", "-f", callback=check_format, help="Output format (table, json, csv)"),
) -> None:
    """List subscribers.

    Examples:
        tenderadmin subscribers list --view expired
        tenderadmin subscribers list --search arta --format csv
    """

    async def _list() -> None:
        async with open_runtime() as rt:
            service = MembersService(rt.client)
            controller = list_controller(rt, _fetch_for(service, view), label="subscribers", limit=limit)
            filters: dict[str, Any] = {}
            if view == "all":
                filters = {
                    "status": status,
                    "active": None if active is None else int(active),
                    "group": group,
                }
            controller.configure(page=page, search=search, filters=filters)
            await controller.refresh()
            print_listing(controller, COLUMNS, title=f"Subscribers ({view})", format=format)

    run(_list())


@app.command("show")
def show(member_id: int = typer.Argument(..., help="Subscriber ID")) -> None:
    """Show one subscriber."""

    async def _show() -> Member:
        async with open_runtime() as rt:
            return await MembersService(rt.client).get(member_id)

    member = run(_show())
    print_record(
        f"Subscriber #{member.id}",
        [
            ("Username", member.username),
            ("Name", member.name),
            ("Email", member.email),
            ("Phone", member.phone_number),
            ("Company", member.company),
            ("Fiscal number", member.fiscal_number),
            ("Contact", member.contact),
            ("Package", member.package),
            ("Group", member.group),
            ("Registered", format_date(member.register_date)),
            ("Expires", format_date(member.expire_date)),
            ("Days left", member.days_until_expiry() if member.expire_date else None),
            ("Account", _account_status(member)),
            ("Status code", member.status),
            ("Active", "Yes" if member.active == 1 else "No"),
        ],
    )


@app.command("add")
def add(
    username: str = typer.Option(..., "--username", "-u", help="Login name"),
    name: str = typer.Option(..., "--name", help="Full name"),
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    password: Optional[str] = typer.Option(None, "--password", help="Initial password"),
    generate: bool = typer.Option(False, "--generate-password", help="Generate a random password"),
    phone: Optional[str] = typer.Option(None, "--phone"),
    company: Optional[str] = typer.Option(None, "--company"),
    fiscal_number: Optional[str] = typer.Option(None, "--fiscal-number"),
    contact: Optional[str] = typer.Option(None, "--contact"),
    package: Optional[str] = typer.Option(None, "--package"),
    group: Optional[int] = typer.Option(None, "--group"),
    registered: Optional[str] = typer.Option(None, "--registered", help="Registration date (default today)"),
    expires: Optional[str] = typer.Option(None, "--expires", help="Expiry date (default one year)"),
) -> None:
    """Create a subscriber account."""
    if generate and not password:
        password = generate_password()
        console.print(f"[dim]Generated password:[/dim] [bold]{password}[/bold]")

    form = MemberForm(
        username=username,
        name=name,
        email=email,
        password=password or "",
        phone_number=phone,
        company=company,
        fiscal_number=fiscal_number,
        contact=contact,
        package=package,
        group=group,
        register_date=registered,
        expire_date=expires,
        creating=True,
    )

    async def _add() -> Member:
        async with open_runtime() as rt:
            service = MembersService(rt.client)
            return await FormController(rt.notifier, service.label).submit(
                form,
                lambda: service.create(form.to_payload()),
                verb="Create",
                success_title="Subscriber Created",
                success_message=f'"{username.strip()}" has been created successfully.',
            )

    member = run(_add())
    if member.id:
        console.print(f"[dim]New subscriber ID:[/dim] {member.id}")


@app.command("edit")
def edit(
    member_id: int = typer.Argument(..., help="Subscriber ID"),
    username: Optional[str] = typer.Option(None, "--username", "-u"),
    name: Optional[str] = typer.Option(None, "--name"),
    email: Optional[str] = typer.Option(None, "--email", "-e"),
    password: Optional[str] = typer.Option(None, "--password", help="Set a new password"),
    phone: Optional[str] = typer.Option(None, "--phone"),
    company: Optional[str] = typer.Option(None, "--company"),
    fiscal_number: Optional[str] = typer.Option(None, "--fiscal-number"),
    contact: Optional[str] = typer.Option(None, "--contact"),
    package: Optional[str] = typer.Option(None, "--package"),
    group: Optional[int] = typer.Option(None, "--group"),
    status: Optional[int] = typer.Option(None, "--status"),
    active: Optional[bool] = typer.Option(None, "--active/--not-active"),
    expires: Optional[str] = typer.Option(None, "--expires", help="New expiry date"),
) -> None:
    """Update a subscriber; omitted options are kept."""
    changes = {
        "username": username,
        "name": name,
        "email": email,
        "password": password,
        "phone_number": phone,
        "company": company,
        "fiscal_number": fiscal_number,
        "contact": contact,
        "package": package,
        "group": group,
        "status": status,
        "active": None if active is None else int(active),
        "expire_date": expires,
    }

    async def _edit() -> Member:
        async with open_runtime() as rt:
            service = MembersService(rt.client)
            form = MemberForm.from_member(await service.get(member_id))
            for key, value in changes.items():
                if value is not None:
                    setattr(form, key, value)
            return await FormController(rt.notifier, service.label).submit(
                form,
                lambda: service.update(member_id, form.to_payload()),
                verb="Update",
                success_title="Subscriber Updated",
                success_message=f'"{form.username}" has been updated successfully.',
            )

    run(_edit())


@app.command("delete")
def delete(
    member_id: int = typer.Argument(..., help="Subscriber ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a subscriber."""
    confirm_delete(f"subscriber #{member_id}", yes)

    async def _delete() -> bool:
        async with open_runtime() as rt:
            service = MembersService(rt.client)
            controller = list_controller(rt, service.list, label="subscribers")
            return await controller.delete(member_id, service)

    if not run(_delete()):
        raise typer.Exit(1)


@app.command("extend")
def extend(
    member_id: int = typer.Argument(..., help="Subscriber ID"),
    until: str = typer.Option(..., "--until", "-u", help="New expiry date (DD/MM/YYYY)"),
) -> None:
    """Move a subscriber's expiry date forward."""

    async def _extend() -> Member:
        async with open_runtime() as rt:
            service = MembersService(rt.client)
            form = ExtendExpiryForm(member=await service.get(member_id), new_date=until)
            return await FormController(rt.notifier, service.label).submit(
                form,
                lambda: service.extend_expiry(member_id, form.days or 0),
                verb="Extend",
                success_title="Validity Extended",
                success_message=f"Subscription extended by {form.days} days.",
            )

    member = run(_extend())
    console.print(f"[dim]New expiry:[/dim] {format_date(member.expire_date)}")


async def _member_action(title: str, verb: str, action) -> Member:
    """Run a one-click account action with the usual notifications."""
    async with open_runtime() as rt:
        service = MembersService(rt.client)
        return await FormController(rt.notifier, service.label).submit(
            Form(),
            lambda: action(service),
            verb=verb,
            success_title=title,
        )


@app.command("approve")
def approve(member_id: int = typer.Argument(..., help="Subscriber ID")) -> None:
    """Approve a pending subscriber (activates the account)."""
    run(_member_action("Subscriber Approved", "Approve", lambda s: s.activate(member_id)))


@app.command("reject")
def reject(member_id: int = typer.Argument(..., help="Subscriber ID")) -> None:
    """Reject a pending subscriber (status 0, inactive)."""

    async def _reject(service: MembersService) -> Member:
        await service.update_status(member_id, STATUS_PENDING)
        return await service.update_active(member_id, 0)

    run(_member_action("Rejected Successfully", "Reject", _reject))


@app.command("reactivate")
def reactivate(member_id: int = typer.Argument(..., help="Subscriber ID")) -> None:
    """Reactivate a suspended subscriber."""
    run(_member_action("Subscriber Reactivated", "Reactivate", lambda s: s.update_active(member_id, 1)))


@app.command("stats")
def stats() -> None:
    """Show subscriber counts reported by the API."""

    async def _stats() -> dict[str, Any]:
        async with open_runtime() as rt:
            return await MembersService(rt.client).stats()

    data = run(_stats())
    print_record("Subscriber statistics", [(key.replace("_", " ").capitalize(), value) for key, value in data.items()])
