"""
Authentication commands.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape

from tenderadmin.core.auth.service import AuthService
from tenderadmin.core.auth.session import display_name

from ..runtime import console, err_console, open_runtime, run

app = typer.Typer(
    help="Log in and out of the admin API",
    no_args_is_help=True,
)


@app.command("login")
def login(
    username: Optional[str] = typer.Option(
        None,
        "--username",
        "-u",
        help="Admin username (prompted if omitted)",
    ),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Password (prompted if omitted)",
    ),
) -> None:
    """Log in and store the session locally."""
    if not username:
        username = typer.prompt("Username")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    async def _login() -> dict:
        async with open_runtime(require_auth=False) as rt:
            return await AuthService(rt.client, rt.auth).login(username, password)

    user = run(_login())
    console.print(f"[green]OK[/green] Logged in as [bold]{escape(display_name(user))}[/bold]")


@app.command("logout")
def logout() -> None:
    """Forget the stored session."""

    async def _logout() -> None:
        async with open_runtime(require_auth=False, announce_login=False) as rt:
            AuthService(rt.client, rt.auth).logout()

    run(_logout())
    console.print("[green]OK[/green] Logged out")


@app.command("whoami")
def whoami() -> None:
    """Show the logged-in admin."""

    async def _whoami() -> dict | None:
        async with open_runtime(require_auth=False) as rt:
            if not rt.auth.is_authenticated():
                return None
            return rt.auth.current_user()

    user = run(_whoami())
    if not user:
        err_console.print("[red]Not logged in. Run:[/red] tenderadmin auth login")
        raise typer.Exit(1)
    console.print(f"[bold]{escape(display_name(user))}[/bold] ([cyan]{escape(str(user.get('username') or ''))}[/cyan])")
