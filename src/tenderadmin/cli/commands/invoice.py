"""
Pro-forma invoice commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from tenderadmin.core.forms.base import FormController
from tenderadmin.core.forms.invoice import InvoiceForm
from tenderadmin.core.invoice.packages import PACKAGES
from tenderadmin.core.invoice.pdf import InvoiceClient, build_invoice, write_invoice
from tenderadmin.core.models.entities import Member
from tenderadmin.core.reference.resolve import resolve_option
from tenderadmin.core.services.members import MembersService

from ..runtime import Runtime, console, err_console, open_runtime, print_rows, run

app = typer.Typer(
    help="Generate pro-forma invoices",
    no_args_is_help=True,
)


@app.command("packages")
def packages() -> None:
    """List the subscription packages that can be invoiced."""
    print_rows(
        PACKAGES,
        [
            ("key", "Key", lambda p: p.key),
            ("label", "Package", lambda p: p.label),
            ("days", "Days", lambda p: p.days),
            ("description", "Description", lambda p: p.description),
        ],
        title="Packages",
    )


async def _find_client(rt: Runtime, query: str) -> Optional[Member]:
    """Look a subscriber up by id, or by name/username/email."""
    service = MembersService(rt.client)
    if query.strip().isdigit():
        return await service.get(int(query))
    page = await service.list({"search": query.strip(), "limit": 50})
    for member in page.data:
        if query.strip().lower() in (member.email.lower(), member.username.lower()):
            return member
    return resolve_option(query, page.data)


@app.command("generate")
def generate(
    client: str = typer.Option(..., "--client", "-c", help="Subscriber id, username, email or name"),
    package: str = typer.Option(..., "--package", "-p", help="Package key (see 'invoice packages')"),
    price: str = typer.Option(..., "--price", help="Total price"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default from config)"),
) -> None:
    """Generate a pro-forma invoice PDF for a subscriber.

    Examples:
        tenderadmin invoice generate --client 12 --package 12_months --price 120
    """

    async def _generate() -> Path:
        async with open_runtime() as rt:
            member = await _find_client(rt, client)
            if member is None:
                err_console.print(f"[red]Subscriber not found:[/red] {escape(client)}")
                raise typer.Exit(1)

            form = InvoiceForm(client_id=member.id, package=package, price=price)
            invoice_client = InvoiceClient.from_member(member)

            async def _write() -> Path:
                invoice = build_invoice(invoice_client, package, form.amount)
                return write_invoice(invoice, rt.config.invoice, output)

            return await FormController(rt.notifier, "Invoice").submit(
                form,
                _write,
                verb="Generate",
                success_title="Invoice Generated",
                success_message=f"Pro-forma invoice created for {invoice_client.label}.",
            )

    path = run(_generate())
    console.print(f"[green]OK[/green] Saved [cyan]{path}[/cyan]")
