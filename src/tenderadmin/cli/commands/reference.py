"""
Reference data commands.

Every lookup collection (notice types, procedures, categories, ...) gets
the same list/show/add/edit/delete commands, built by ``build_app``.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape

from tenderadmin.core.forms.base import FormController
from tenderadmin.core.forms.reference import ReferenceForm
from tenderadmin.core.models.entities import ReferenceItem
from tenderadmin.core.normalize.parsing import format_date
from tenderadmin.core.reference.resolve import filter_options
from tenderadmin.core.reference.subcategories import SUBCATEGORIES, subcategories_for
from tenderadmin.core.services.base import ResourceService
from tenderadmin.core.services.reference import (
    CategoriesService,
    ContractingAuthoritiesService,
    ContractTypesService,
    CountriesService,
    NoticeTypesService,
    ProceduresService,
    RegionsService,
)

from ..runtime import (
    Column,
    check_format,
    confirm_delete,
    console,
    list_controller,
    open_runtime,
    print_listing,
    print_record,
    print_rows,
    run,
)

app = typer.Typer(
    help="Manage reference data used by tenders",
    no_args_is_help=True,
)

KINDS: dict[str, type[ResourceService]] = {
    "notice-types": NoticeTypesService,
    "procedures": ProceduresService,
    "categories": CategoriesService,
    "authorities": ContractingAuthoritiesService,
    "contract-types": ContractTypesService,
    "regions": RegionsService,
    "countries": CountriesService,
}

COLUMNS: list[Column] = [
    ("id", "ID", lambda r: r.id),
    ("name", "Name", lambda r: r.display_name),
    ("created_by", "Created by", lambda r: r.created_by),
    ("create_date", "Created", lambda r: format_date(r.create_date)),
]


def build_app(kind: str, service_cls: type[ResourceService]) -> typer.Typer:
    """Typer sub-app with CRUD commands for one reference collection."""
    label = service_cls.label
    sub = typer.Typer(help=f"Manage {kind.replace('-', ' ')}", no_args_is_help=True)

    @sub.command("list")
    def list_items(
        page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
        limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Rows per page"),
        search: Optional[str] = typer.Option(None, "--search", "-s", help="Search by name"),
        format: str = typer.Option("table", "--format", "-f", callback=check_format, help="Output format (table, json, csv)"),
    ) -> None:
        """List records."""

        async def _list() -> None:
            async with open_runtime() as rt:
                service = service_cls(rt.client)
                controller = list_controller(rt, service.list, label=kind.replace("-", " "), limit=limit)
                controller.configure(page=page, search=search)
                await controller.refresh()
                print_listing(controller, COLUMNS, title=label + " list", format=format)

        run(_list())

    @sub.command("find")
    def find(
        query: str = typer.Argument(..., help="Name or part of a name"),
        limit: int = typer.Option(10, "--limit", "-n", min=1),
    ) -> None:
        """Find records by approximate name."""

        async def _find() -> list:
            async with open_runtime() as rt:
                return filter_options(query, await service_cls(rt.client).list_all(), limit=limit)

        matches = run(_find())
        if not matches:
            console.print(f"[dim]No {kind.replace('-', ' ')} match {escape(repr(query))}.[/dim]")
            return
        print_rows(matches, COLUMNS[:2], title=f"{label} matches")

    @sub.command("show")
    def show(item_id: int = typer.Argument(..., help=f"{label} ID")) -> None:
        """Show one record."""

        async def _show() -> ReferenceItem:
            async with open_runtime() as rt:
                return await service_cls(rt.client).get(item_id)

        item = run(_show())
        fields = [("Name", item.display_name)]
        fields += [(key.replace("_", " ").capitalize(), value) for key, value in item.to_dict().items() if key not in ("id", "name")]
        print_record(f"{label} #{item.id}", fields)

    @sub.command("add")
    def add(name: str = typer.Option(..., "--name", help=f"{label} name")) -> None:
        """Create a record."""
        form = ReferenceForm(label=label, name=name)

        async def _add() -> ReferenceItem:
            async with open_runtime() as rt:
                service = service_cls(rt.client)
                return await FormController(rt.notifier, label).submit(
                    form,
                    lambda: service.create(form.to_payload()),
                    verb="Create",
                    success_title=f"{label} Created",
                    success_message=f'"{name.strip()}" has been created successfully.',
                )

        item = run(_add())
        if item.id:
            console.print(f"[dim]New {label.lower()} ID:[/dim] {item.id}")

    @sub.command("edit")
    def edit(
        item_id: int = typer.Argument(..., help=f"{label} ID"),
        name: str = typer.Option(..., "--name", help=f"New {label.lower()} name"),
    ) -> None:
        """Rename a record."""
        form = ReferenceForm(label=label, name=name)

        async def _edit() -> ReferenceItem:
            async with open_runtime() as rt:
                service = service_cls(rt.client)
                return await FormController(rt.notifier, label).submit(
                    form,
                    lambda: service.update(item_id, form.to_payload()),
                    verb="Update",
                    success_title=f"{label} Updated",
                    success_message=f'"{name.strip()}" has been updated successfully.',
                )

        run(_edit())

    @sub.command("delete")
    def delete(
        item_id: int = typer.Argument(..., help=f"{label} ID"),
        yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    ) -> None:
        """Delete a record."""
        confirm_delete(f"{label.lower()} #{item_id}", yes)

        async def _delete() -> bool:
            async with open_runtime() as rt:
                service = service_cls(rt.client)
                controller = list_controller(rt, service.list, label=kind.replace("-", " "))
                return await controller.delete(item_id, service)

        if not run(_delete()):
            raise typer.Exit(1)

    return sub


SUB_APPS = {kind: build_app(kind, service_cls) for kind, service_cls in KINDS.items()}


@SUB_APPS["categories"].command("roots")
def category_roots(
    format: str = typer.Option("table", "--format", "-f", callback=check_format),
) -> None:
    """List top-level categories."""

    async def _roots() -> list:
        async with open_runtime() as rt:
            return await CategoriesService(rt.client).roots()

    print_rows(
        run(_roots()),
        [*COLUMNS[:2], ("code", "Code", lambda c: c.code)],
        title="Root categories",
        format=format,
    )


@SUB_APPS["authorities"].command("stats")
def authority_stats() -> None:
    """Show contracting authority counts reported by the API."""

    async def _stats() -> dict:
        async with open_runtime() as rt:
            return await ContractingAuthoritiesService(rt.client).stats()

    data = run(_stats())
    print_record("Contracting authority statistics", [(key.replace("_", " ").capitalize(), value) for key, value in data.items()])


for _kind, _sub in SUB_APPS.items():
    app.add_typer(_sub, name=_kind)


@app.command("subcategories")
def subcategories(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Parent category name"),
    format: str = typer.Option("table", "--format", "-f", callback=check_format),
) -> None:
    """List the fixed subcategories, optionally for one category."""
    rows = subcategories_for(category) if category else list(SUBCATEGORIES)
    if not rows and format == "table":
        console.print(f"[dim]No subcategories for {escape(repr(category))}.[/dim]")
        return
    print_rows(
        rows,
        [
            ("id", "ID", lambda s: s.id),
            ("name", "Name", lambda s: s.name),
            ("parent", "Category", lambda s: s.parent),
            ("code", "Code", lambda s: s.code),
        ],
        title="Subcategories",
        format=format,
    )
