from typing import Optional

import logfire
import typer

from file_drive.config import get_config
from file_drive.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import file_drive

        config = get_config()
        typer.echo(f"file-drive version: {file_drive.__version__}")
        typer.echo(f"Home: {config.home}")
        raise typer.Exit()


app = typer.Typer(name="file-drive", no_args_is_help=True)


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """file-drive - keep files in a local, persistent drive."""

    if not version and ctx.invoked_subcommand is not None:
        config = get_config()
        setup_logging(log_file=config.log_path, level=config.log_level)
        logfire.configure(send_to_logfire="if-token-present", console=False)
