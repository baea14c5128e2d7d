"""
TenderAdmin CLI - Main entry point.

A terminal-first administration console for a tender-listing service:
tenders, subscribers, reference data, invoices and email.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.panel import Panel
from rich.table import Table
from rich.traceback import install as install_rich_traceback

from tenderadmin import __app_name__, __version__

from .runtime import build_auth, console, load_config

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

# Create main app
app = typer.Typer(
    name=__app_name__,
    help="Terminal-first administration console for a tender-listing service",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """TenderAdmin - manage tenders and subscribers from the terminal."""
    pass


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import auth, email, invoice, reference, subscribers, tenders  # noqa: E402

app.add_typer(auth.app, name="auth", help="Log in and out of the admin API")
app.add_typer(tenders.app, name="tenders", help="Browse and manage tenders")
app.add_typer(subscribers.app, name="subscribers", help="Manage subscriber accounts")
app.add_typer(reference.app, name="reference", help="Manage reference data used by tenders")
app.add_typer(invoice.app, name="invoice", help="Generate pro-forma invoices")
app.add_typer(email.app, name="email", help="Send email to subscribers")


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Initialize TenderAdmin configuration.

    Creates the default configuration file and the local state, log and
    invoice directories.
    """
    app_config_path = Path("configs/app.yaml")
    if not app_config_path.exists() or force:
        _create_default_app_config(app_config_path)

    config = load_config()
    config.ensure_directories()

    console.print()
    console.print(Panel.fit(
        "[bold green]OK - TenderAdmin initialized successfully![/bold green]\n\n"
        "Created:\n"
        "  - [cyan]configs/app.yaml[/cyan] - Application configuration\n"
        f"  - [cyan]{config.data_dir}/[/cyan] - Session storage\n"
        f"  - [cyan]{config.invoice.output_dir}/[/cyan] - Generated invoices\n"
        "  - [cyan]logs/[/cyan] - Log files\n\n"
        "Next steps:\n"
        "  1. Point [yellow]api.base_url[/yellow] at your API (or set TENDERADMIN_API_URL)\n"
        "  2. Log in: [yellow]tenderadmin auth login[/yellow]\n"
        "  3. List tenders: [yellow]tenderadmin tenders list[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


def _create_default_app_config(path: Path) -> None:
    """Create default app.yaml configuration."""
    default_config = """\
# TenderAdmin Configuration
# Values may reference environment variables as ${VAR} or ${VAR:-default}

# Directory paths
config_dir: configs
data_dir: data

# REST API connection
api:
  base_url: ${TENDERADMIN_API_URL:-http://localhost:3000/api}
  timeout_seconds: 10
  mock_mode: false

# Stored session
auth:
  session_file: data/session.json
  max_token_age_days: 7

# List views
listing:
  page_size: 10
  debounce_ms: 500

# Pro-forma invoices
invoice:
  output_dir: invoices
  currency: EUR
  website: www.utender.eu

# Logging settings
logging:
  level: WARNING
  file: logs/tenderadmin.log
  json_format: true
  rich_console: true
"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config, encoding="utf-8")


# =============================================================================
# Status Command
# =============================================================================


@app.command()
def status() -> None:
    """Show configuration and session status."""
    from tenderadmin.core.auth.session import display_name
    from tenderadmin.core.config.loader import resolve_config_path

    config = load_config()
    config_path = resolve_config_path()
    auth = build_auth(config, announce_login=False)
    user = auth.current_user() if auth.is_authenticated() else None

    table = Table(title="TenderAdmin Status", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Config file", f"{config_path}" if config_path.exists() else f"{config_path} [dim](defaults)[/dim]")
    table.add_row("API URL", config.api.base_url)
    table.add_row("Mock API", "[yellow]on[/yellow]" if config.api.mock_mode else "off")
    table.add_row("Timeout", f"{config.api.timeout_seconds:g}s")
    table.add_row("Page size", str(config.listing.page_size))
    table.add_row("Invoices", str(config.invoice.output_dir))
    table.add_row(
        "Session",
        f"[green]{display_name(user)}[/green]" if user else "[dim]not logged in[/dim]",
    )
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
