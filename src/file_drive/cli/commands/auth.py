"""Login and logout commands."""

from typing import Optional

import typer
from rich.console import Console

from file_drive.cli.app import app
from file_drive.config import get_config
from file_drive.services.auth_service import AuthService
from file_drive.services.exceptions import AuthenticationError

console = Console()


@app.command()
def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    remember: bool = typer.Option(False, "--remember", "-r", help="Stay logged in"),
) -> None:
    """Log in to the drive."""
    auth = AuthService(get_config())
    try:
        session = auth.login(email, password, remember=remember)
    except AuthenticationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Logged in as {session.email}[/green]")
    if not remember:
        console.print("Session not saved; use --remember to stay logged in.")


@app.command()
def logout() -> None:
    """Forget a remembered login."""
    if AuthService(get_config()).logout():
        console.print("Logged out.")
    else:
        console.print("Not logged in.")


EMAIL_OPTION = typer.Option(
    None, "--email", "-e", help="Log in for this command only"
)
PASSWORD_OPTION = typer.Option(
    None, "--password", help="Log in for this command only"
)


def require_login(email: Optional[str] = None, password: Optional[str] = None) -> None:
    """Exit unless inline credentials are valid or a remembered login exists."""
    auth = AuthService(get_config())
    if email is not None or password is not None:
        try:
            auth.login(email or "", password or "")
        except AuthenticationError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        return

    if auth.current_session() is None:
        console.print("[red]Not logged in.[/red] Run: file-drive login --remember")
        raise typer.Exit(1)
