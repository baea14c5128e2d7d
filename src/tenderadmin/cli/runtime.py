"""
Shared plumbing for CLI commands.

Builds the config, logging, auth context and API client for one command
invocation, and renders listings in the table/json/csv formats.
"""

from __future__ import annotations

import asyncio
import csv
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from tenderadmin.core.api.base import ApiError
from tenderadmin.core.api.client import ApiClient
from tenderadmin.core.auth.session import LOGIN_ROUTE, AuthContext, Navigator
from tenderadmin.core.auth.store import CredentialStore
from tenderadmin.core.config.loader import ConfigError, load_app_config
from tenderadmin.core.config.models import AppConfig
from tenderadmin.core.forms.base import FormValidationError
from tenderadmin.core.listing.controller import TIMEOUT_MESSAGE, ListController
from tenderadmin.core.logging import json_dumps, setup_logging
from tenderadmin.core.notify import Notifier
from tenderadmin.core.reference.resolve import resolve_option

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")

OUTPUT_FORMATS = ("table", "json", "csv")


@dataclass
class Runtime:
    config: AppConfig
    auth: AuthContext
    client: ApiClient
    notifier: Notifier


def load_config() -> AppConfig:
    try:
        return load_app_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _on_navigate(route: str) -> None:
    if route == LOGIN_ROUTE:
        err_console.print("[yellow]Session expired. Log in again with:[/yellow] tenderadmin auth login")


def build_auth(config: AppConfig, announce_login: bool = True) -> AuthContext:
    return AuthContext(
        CredentialStore(config.auth.session_file),
        Navigator(on_navigate=_on_navigate if announce_login else None),
        max_token_age_ms=config.auth.max_token_age_days * 24 * 60 * 60 * 1000,
    )


@asynccontextmanager
async def open_runtime(
    require_auth: bool = True,
    announce_login: bool = True,
) -> AsyncIterator[Runtime]:
    """Set up everything a command needs and close the client afterwards.

    Args:
        require_auth: Exit unless a valid session is stored
        announce_login: Tell the user to log in again when the session is dropped
    """
    config = load_config()
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    auth = build_auth(config, announce_login)

    if require_auth and not auth.is_authenticated():
        err_console.print("[red]Not logged in. Run:[/red] tenderadmin auth login")
        raise typer.Exit(1)

    client = ApiClient.from_config(config, auth)
    try:
        yield Runtime(config=config, auth=auth, client=client, notifier=Notifier(console=err_console))
    finally:
        await client.close()


def run(coro: Awaitable[T]) -> T:
    """Run a command coroutine, turning surfaced errors into exit code 1."""
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except FormValidationError as e:
        for field_name, message in e.errors.items():
            err_console.print(f"  [red]{field_name}:[/red] {escape(message)}")
        raise typer.Exit(1)
    except ApiError as e:
        if not e.reported:
            err_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)


def check_format(value: str) -> str:
    if value not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"Must be one of: {', '.join(OUTPUT_FORMATS)}")
    return value


# =============================================================================
# Rendering
# =============================================================================


Column = tuple[str, str, Callable[[Any], Any]]


def print_rows(
    rows: Sequence[Any],
    columns: Sequence[Column],
    *,
    title: str,
    format: str = "table",
) -> None:
    """Render rows as a rich table, JSON or CSV.

    Args:
        rows: Records to render
        columns: (key, header, getter) triples
        title: Table title
        format: table, json or csv
    """
    if format == "json":
        data = [{key: _plain(getter(row)) for key, _, getter in columns} for row in rows]
        console.print_json(json_dumps(data))
        return

    if format == "csv":
        writer = csv.writer(sys.stdout)
        writer.writerow([key for key, _, _ in columns])
        for row in rows:
            writer.writerow(["" if getter(row) is None else _plain(getter(row)) for _, _, getter in columns])
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    for index, (_, header, _) in enumerate(columns):
        if index == 0:
            table.add_column(header, style="dim", no_wrap=True)
        else:
            table.add_column(header, max_width=50)
    for row in rows:
        table.add_row(*[_cell(getter(row)) for _, _, getter in columns])
    console.print(table)


def _plain(value: Any) -> Any:
    return value.plain if isinstance(value, Text) else value


def _cell(value: Any) -> str | Text:
    if isinstance(value, Text):
        return value
    if value is None or value == "":
        return "[dim]-[/dim]"
    text = str(value)
    return escape((text[:47] + "...") if len(text) > 50 else text)


def print_listing(
    controller: ListController[Any],
    columns: Sequence[Column],
    *,
    title: str,
    format: str = "table",
) -> None:
    """Render the controller's rows followed by a pagination footer."""
    if controller.error:
        # Other failures were already reported through the notifier
        if controller.error == TIMEOUT_MESSAGE:
            err_console.print(f"[red]{controller.error}[/red]")
        raise typer.Exit(1)

    if controller.is_empty:
        if format == "table":
            console.print(f"[dim]No {controller.label} found matching criteria.[/dim]")
        else:
            print_rows([], columns, title=title, format=format)
        return

    print_rows(controller.items, columns, title=title, format=format)

    if format == "table" and controller.has_pagination:
        first, last = controller.showing
        pages = " ".join(
            f"[bold]{n}[/bold]" if n == controller.page else str(n)
            for n in controller.visible_pages
        )
        console.print(
            f"[dim]Showing {first}-{last} of {controller.total_items} "
            f"(page {controller.page}/{controller.total_pages})[/dim]  {pages}"
        )


def confirm_delete(what: str, yes: bool) -> None:
    if yes:
        return
    if not typer.confirm(f"Delete {what}? This cannot be undone."):
        console.print("[dim]Cancelled.[/dim]")
        raise typer.Exit(0)


def print_record(title: str, fields: Sequence[tuple[str, Any]]) -> None:
    """Render one record as a two-column table."""
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for label, value in fields:
        if isinstance(value, Text):
            table.add_row(label, value)
        else:
            table.add_row(label, "[dim]-[/dim]" if value is None or value == "" else escape(str(value)))
    console.print(table)


# =============================================================================
# Helpers shared by commands
# =============================================================================


def list_controller(
    rt: Runtime,
    fetch: Callable[[dict[str, Any]], Awaitable[Any]],
    *,
    label: str,
    limit: int | None = None,
    search_key: str = "search",
) -> ListController[Any]:
    return ListController(
        fetch,
        label=label,
        page_size=limit or rt.config.listing.page_size,
        debounce_ms=rt.config.listing.debounce_ms,
        search_key=search_key,
        notifier=rt.notifier,
    )


async def resolve_reference(service: Any, query: str | None, what: str) -> Any:
    """Turn an id or name typed by the user into a reference record.

    Returns None for an empty query; exits when nothing matches.
    """
    if query is None or not str(query).strip():
        return None
    match = resolve_option(query, await service.list_all())
    if match is None:
        err_console.print(f"[red]{what} not found:[/red] {escape(str(query))}")
        raise typer.Exit(1)
    return match
