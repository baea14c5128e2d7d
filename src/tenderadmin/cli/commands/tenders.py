"""
Tender commands: listing, details, create/edit/delete, documents and
document extraction.
"""

from __future__ import annotations

from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.markup import escape
from rich.text import Text

from tenderadmin.core.auth.session import display_name
from tenderadmin.core.forms.base import FormController
from tenderadmin.core.forms.tender import MAX_DOCUMENTS, TenderEditForm, TenderForm
from tenderadmin.core.models.entities import ExtractedTender, Tender, UploadResult
from tenderadmin.core.normalize.parsing import days_between, format_date, format_price
from tenderadmin.core.reference.resolve import resolve_option
from tenderadmin.core.services.reference import (
    CategoriesService,
    ContractingAuthoritiesService,
    ContractTypesService,
    CountriesService,
    NoticeTypesService,
    ProceduresService,
    RegionsService,
)
from tenderadmin.core.services.tenders import TendersService

from ..runtime import (
    Column,
    Runtime,
    check_format,
    confirm_delete,
    console,
    err_console,
    list_controller,
    open_runtime,
    print_listing,
    print_record,
    print_rows,
    resolve_reference,
    run,
)

app = typer.Typer(
    help="Browse and manage tenders",
    no_args_is_help=True,
)


def _status(tender: Tender) -> Text:
    return Text("Expired", style="red") if tender.is_expired() else Text("Open", style="green")


def _days_left(tender: Tender) -> Optional[int]:
    if tender.expiry is None or tender.is_expired():
        return None
    return days_between(datetime.now(), tender.expiry)


COLUMNS: list[Column] = [
    ("id", "ID", lambda t: t.id),
    ("title", "Title", lambda t: t.title),
    ("procurement_number", "Number", lambda t: t.procurement_number),
    ("authority", "Authority", lambda t: t.contracting_authority_name),
    ("publication_date", "Published", lambda t: format_date(t.publication_date)),
    ("expiry_date", "Expires", lambda t: format_date(t.expiry_date)),
    ("status", "Status", _status),
]


async def _reference_id(service: Any, query: Optional[str], what: str) -> Optional[int]:
    match = await resolve_reference(service, query, what)
    return match.id if match is not None else None


async def _authority_ids(rt: Runtime, queries: Optional[List[str]]) -> list[int]:
    if not queries:
        return []
    service = ContractingAuthoritiesService(rt.client)
    return [await _reference_id(service, q, "Contracting authority") for q in queries]


async def _lookup(service: Any, name: str) -> Any:
    """Match a name read from a document; no match is not an error."""
    return resolve_option(name, await service.list_all())


async def _reference_or_extracted(
    service: Any,
    query: Optional[str],
    extracted: Optional[str],
    what: str,
) -> Optional[int]:
    if query:
        return await _reference_id(service, query, what)
    if not extracted:
        return None
    match = await _lookup(service, extracted)
    return match.id if match is not None else None


EXTRACTED_COLUMNS: list[Column] = [
    ("title", "Title", lambda e: e.title),
    ("procurement_number", "Procurement number", lambda e: e.procurement_number),
    ("category", "Category", lambda e: e.category),
    ("sub_category", "Subcategory", lambda e: e.sub_category),
    ("contract_type", "Contract type", lambda e: e.contract_type),
    ("procedure", "Procedure", lambda e: e.procedure),
    ("notice_type", "Notice type", lambda e: e.notice_type),
    ("country", "Country", lambda e: e.country),
    ("region", "Region", lambda e: e.region),
    ("publication_date", "Published", lambda e: format_date(e.publication_date, empty="")),
    ("end_date", "Ends", lambda e: format_date(e.end_date, empty="")),
    ("email", "Email", lambda e: e.email),
    ("price", "Price", lambda e: e.price),
    ("retendering", "Retendering", lambda e: "Yes" if e.retendering else "No"),
    ("authorities", "Authorities", lambda e: ", ".join(e.authorities)),
    ("link", "Link", lambda e: e.link),
    ("description", "Description", lambda e: e.description),
]


@app.command("list")
def list_tenders(
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Rows per page"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search title and number"),
    notice_type: Optional[str] = typer.Option(None, "--notice-type", help="Filter by notice type (id or name)"),
    authority: Optional[str] = typer.Option(None, "--authority", help="Filter by contracting authority"),
    category: Optional[str] = typer.Option(None, "--category", help="Filter by category"),
    mine: bool = typer.Option(False, "--mine", help="Only tenders created by the logged-in admin"),
    format: str = typer.Option("table", "--format", "-f", callback=check_format, help="Output format (table, json, csv)"),
) -> None:
    """List tenders with search, filters and pagination.

    Examples:
        tenderadmin tenders list --search road --page 2
        tenderadmin tenders list --category Construction --format json
    """

    async def _list() -> None:
        async with open_runtime() as rt:
            service = TendersService(rt.client)
            fetch = service.list
            if mine:
                fetch = partial(service.list_by_creator, display_name(rt.auth.current_user()))

            controller = list_controller(rt, fetch, label="tenders", limit=limit, search_key=service.search_key)
            controller.configure(
                page=page,
                search=search,
                filters={
                    "notice_type_id": await _reference_id(NoticeTypesService(rt.client), notice_type, "Notice type"),
                    "contracting_authority_id": await _reference_id(
                        ContractingAuthoritiesService(rt.client), authority, "Contracting authority"
                    ),
                    "category_id": await _reference_id(CategoriesService(rt.client), category, "Category"),
                },
            )
            await controller.refresh()
            print_listing(controller, COLUMNS, title="Tenders", format=format)

    run(_list())


@app.command("show")
def show(tender_id: int = typer.Argument(..., help="Tender ID")) -> None:
    """Show one tender."""

    async def _show() -> tuple[Tender, list]:
        async with open_runtime() as rt:
            service = TendersService(rt.client)
            tender = await service.get(tender_id)
            return tender, service.documents(tender)

    tender, documents = run(_show())
    print_record(
        f"Tender #{tender.id}",
        [
            ("Title", tender.title),
            ("Procurement number", tender.procurement_number),
            ("Authority", tender.contracting_authority_name or tender.contracting_authority_id),
            ("Category", tender.category_name or tender.category_id),
            ("Procedure", tender.procedure_name or tender.procedures_id),
            ("Notice type", tender.notice_type_name or tender.notice_type_id),
            ("Contract type", tender.contract_type_name or tender.contract_type_id),
            ("Region", tender.region_name or tender.region_id),
            ("Country", tender.state_name or tender.states_id),
            ("Published", format_date(tender.publication_date)),
            ("Expires", format_date(tender.expiry_date)),
            ("Status", _status(tender)),
            ("Days left", _days_left(tender)),
            ("Price", format_price(tender.cmimi) if tender.cmimi else None),
            ("Email", tender.email),
            ("Retendering", "Yes" if tender.retendering else "No"),
            ("Documents", ", ".join(d.name for d in documents)),
            ("Created by", tender.created_by),
            ("Description", tender.description),
        ],
    )


@app.command("add")
def add(
    title: str = typer.Option("", "--title", "-t", help="Tender title (read from the document with --autofill)"),
    procurement_number: str = typer.Option("", "--number", help="Procurement number"),
    category: Optional[str] = typer.Option(None, "--category", help="Category (id or name)"),
    subcategory: Optional[str] = typer.Option(None, "--subcategory", help="Subcategory of the chosen category"),
    contract_type: Optional[str] = typer.Option(None, "--contract-type", help="Contract type"),
    procedure: Optional[str] = typer.Option(None, "--procedure", help="Procedure"),
    notice_type: Optional[str] = typer.Option(None, "--notice-type", help="Notice type"),
    country: Optional[str] = typer.Option(None, "--country", help="Country"),
    region: Optional[str] = typer.Option(None, "--region", help="Region"),
    authority: Optional[List[str]] = typer.Option(None, "--authority", "-a", help="Contracting authority (repeatable)"),
    publication_date: Optional[str] = typer.Option(None, "--published", help="Publication date (DD/MM/YYYY)"),
    end_date: Optional[str] = typer.Option(None, "--ends", help="Closing date (DD/MM/YYYY)"),
    email: str = typer.Option("", "--email", help="Contact email"),
    price: str = typer.Option("", "--price", help="Estimated value"),
    retendering: bool = typer.Option(False, "--retendering", help="Mark as a re-tender"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    document: Optional[List[Path]] = typer.Option(None, "--document", help="Attached document (up to 5)"),
    autofill: bool = typer.Option(False, "--autofill", help="Fill missing fields from the first document"),
    upload: bool = typer.Option(False, "--upload", help="Upload the documents once the tender is created"),
) -> None:
    """Create a tender.

    At least one --document is required. With --autofill the server reads
    the first document and its values fill every option left out.

    Examples:
        tenderadmin tenders add --document notice.pdf --autofill --upload
    """
    form = TenderForm(
        title=title,
        procurement_number=procurement_number,
        publication_date=publication_date,
        end_date=end_date,
        email=email,
        price=price,
        retendering=retendering,
        description=description,
        documents=list(document or []),
    )

    if subcategory and not category:
        raise typer.BadParameter("--subcategory needs --category", param_hint="--subcategory")
    if autofill and not form.documents:
        raise typer.BadParameter("--autofill needs a --document", param_hint="--autofill")

    async def _add() -> Tender:
        async with open_runtime() as rt:
            service = TendersService(rt.client)
            extracted = ExtractedTender()
            if autofill:
                extracted = await service.process_document(form.documents[0])
                form.fill_from(extracted)
            if not form.title.strip():
                err_console.print("[red]A title is required.[/red] Pass --title or use --autofill.")
                raise typer.Exit(1)

            categories = CategoriesService(rt.client)
            cat = await resolve_reference(categories, category, "Category")
            if cat is None and extracted.category:
                cat = await _lookup(categories, extracted.category)
            if cat is not None:
                options = form.select_category(cat.name, cat.id)
                if subcategory:
                    sub = resolve_option(subcategory, options)
                    if sub is None:
                        err_console.print(f"[red]Subcategory not found in {escape(cat.name)}:[/red] {escape(subcategory)}")
                        raise typer.Exit(1)
                    form.subcategory_id = sub.id
                elif extracted.sub_category:
                    sub = resolve_option(extracted.sub_category, options)
                    form.subcategory_id = sub.id if sub is not None else None

            form.contract_type_id = await _reference_or_extracted(
                ContractTypesService(rt.client), contract_type, extracted.contract_type, "Contract type"
            )
            form.procedure_id = await _reference_or_extracted(
                ProceduresService(rt.client), procedure, extracted.procedure, "Procedure"
            )
            form.notice_type_id = await _reference_or_extracted(
                NoticeTypesService(rt.client), notice_type, extracted.notice_type, "Notice type"
            )
            form.country_id = await _reference_or_extracted(
                CountriesService(rt.client), country, extracted.country, "Country"
            )
            form.region_id = await _reference_or_extracted(
                RegionsService(rt.client), region, extracted.region, "Region"
            )
            form.authority_ids = await _authority_ids(rt, authority)
            if not form.authority_ids and extracted.authorities:
                authorities = ContractingAuthoritiesService(rt.client)
                found = [await _lookup(authorities, name) for name in extracted.authorities]
                form.authority_ids = [a.id for a in found if a is not None]

            controller = FormController(rt.notifier, service.label)
            tender = await controller.submit(
                form,
                lambda: service.create(form.to_payload(rt.auth.current_user())),
                verb="Create",
                success_title="Tender Created",
                success_message=f'"{form.title.strip()}" has been created successfully.',
            )
            if upload and tender.id:
                result = await service.upload_files(form.documents[:MAX_DOCUMENTS], tender.id)
                rt.notifier.success("Documents Uploaded", f"{len(result.uploaded_files)} document(s) stored.")
            return tender

    tender = run(_add())
    if tender.id:
        console.print(f"[dim]New tender ID:[/dim] {tender.id}")


@app.command("extract")
def extract(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Tender document"),
    format: str = typer.Option("table", "--format", "-f", callback=check_format),
) -> None:
    """Show the tender fields the server reads out of a document."""

    async def _extract() -> ExtractedTender:
        async with open_runtime() as rt:
            return await TendersService(rt.client).process_document(path)

    extracted = run(_extract())
    if format != "table":
        print_rows([extracted], EXTRACTED_COLUMNS, title=escape(path.name), format=format)
        return
    print_record(
        f"Extracted from {escape(path.name)}",
        [(label, getter(extracted)) for _, label, getter in EXTRACTED_COLUMNS],
    )


@app.command("upload")
def upload_documents(
    tender_id: int = typer.Argument(..., help="Tender ID"),
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Documents to store (up to 5)"),
) -> None:
    """Upload documents for an existing tender."""
    if len(files) > MAX_DOCUMENTS:
        raise typer.BadParameter(f"At most {MAX_DOCUMENTS} documents", param_hint="FILES")

    async def _upload() -> UploadResult:
        async with open_runtime() as rt:
            return await TendersService(rt.client).upload_files(files, tender_id)

    result = run(_upload())
    print_rows(
        result.uploaded_files,
        [
            ("field", "Slot", lambda f: f.field_name),
            ("name", "Name", lambda f: f.name),
            ("size", "Size", lambda f: f.size),
        ],
        title=f"Uploaded to tender #{tender_id}",
        format="table",
    )


@app.command("edit")
def edit(
    tender_id: int = typer.Argument(..., help="Tender ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    procurement_number: Optional[str] = typer.Option(None, "--number"),
    category: Optional[str] = typer.Option(None, "--category"),
    contract_type: Optional[str] = typer.Option(None, "--contract-type"),
    procedure: Optional[str] = typer.Option(None, "--procedure"),
    notice_type: Optional[str] = typer.Option(None, "--notice-type"),
    country: Optional[str] = typer.Option(None, "--country"),
    region: Optional[str] = typer.Option(None, "--region"),
    authority: Optional[List[str]] = typer.Option(None, "--authority", "-a"),
    publication_date: Optional[str] = typer.Option(None, "--published"),
    expiry_date: Optional[str] = typer.Option(None, "--ends"),
    email: Optional[str] = typer.Option(None, "--email"),
    price: Optional[str] = typer.Option(None, "--price"),
    retendering: Optional[bool] = typer.Option(None, "--retendering/--no-retendering"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
) -> None:
    """Update fields of an existing tender; omitted options are kept."""

    async def _edit() -> Tender:
        async with open_runtime() as rt:
            service = TendersService(rt.client)
            form = TenderEditForm.from_tender(await service.get(tender_id))
            form.apply(
                title=title,
                procurement_number=procurement_number,
                description=description,
                email=email,
                price=price,
                publication_date=publication_date,
                expiry_date=expiry_date,
                retendering=retendering,
                category_id=await _reference_id(CategoriesService(rt.client), category, "Category"),
                contract_type_id=await _reference_id(ContractTypesService(rt.client), contract_type, "Contract type"),
                procedure_id=await _reference_id(ProceduresService(rt.client), procedure, "Procedure"),
                notice_type_id=await _reference_id(NoticeTypesService(rt.client), notice_type, "Notice type"),
                country_id=await _reference_id(CountriesService(rt.client), country, "Country"),
                region_id=await _reference_id(RegionsService(rt.client), region, "Region"),
                authority_ids=await _authority_ids(rt, authority) or None,
            )

            controller = FormController(rt.notifier, service.label)
            return await controller.submit(
                form,
                lambda: service.update(tender_id, form.to_payload()),
                verb="Update",
                success_title="Tender Updated",
                success_message=f"Tender #{tender_id} has been updated successfully.",
            )

    run(_edit())


@app.command("delete")
def delete(
    tender_id: int = typer.Argument(..., help="Tender ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a tender."""
    confirm_delete(f"tender #{tender_id}", yes)

    async def _delete() -> bool:
        async with open_runtime() as rt:
            service = TendersService(rt.client)
            controller = list_controller(rt, service.list, label="tenders", search_key=service.search_key)
            return await controller.delete(tender_id, service)

    if not run(_delete()):
        raise typer.Exit(1)


@app.command("documents")
def documents(
    tender_id: int = typer.Argument(..., help="Tender ID"),
    format: str = typer.Option("table", "--format", "-f", callback=check_format),
) -> None:
    """List the documents attached to a tender."""

    async def _documents() -> list:
        async with open_runtime() as rt:
            service = TendersService(rt.client)
            return service.documents(await service.get(tender_id))

    docs = run(_documents())
    if not docs and format == "table":
        console.print("[dim]This tender has no documents.[/dim]")
        return
    print_rows(
        docs,
        [
            ("name", "Name", lambda d: d.name),
            ("field", "Slot", lambda d: d.field),
            ("url", "Download path", lambda d: d.url),
        ],
        title=f"Documents of tender #{tender_id}",
        format=format,
    )


@app.command("download")
def download(
    tender_id: int = typer.Argument(..., help="Tender ID"),
    filename: str = typer.Argument(..., help="Stored document name"),
    output: Path = typer.Option(Path("."), "--output", "-o", help="File or directory to save to"),
) -> None:
    """Download one tender document."""

    async def _download() -> Path:
        async with open_runtime() as rt:
            return await TendersService(rt.client).download_file(tender_id, filename, output)

    path = run(_download())
    console.print(f"[green]OK[/green] Saved [cyan]{path}[/cyan]")
