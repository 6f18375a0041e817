"""Console script for markbook_client."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer
from rich.console import Console
from rich.table import Table

from .client import MarkbookClient, create_client
from .errors import MarkbookBackupPendingError, MarkbookError, MarkbookNoBackupError
from .utils.logging import setup_logging

app = typer.Typer(help="Command line access to Markbook Online.")
console = Console()


def build_client(config_file: Path | None) -> MarkbookClient:
    return create_client(config_file=config_file)


def _run(ctx: typer.Context, operation: Callable[[MarkbookClient], Awaitable[Any]]) -> Any:
    """Run one async operation against a fresh client, reporting errors."""

    async def runner() -> Any:
        async with build_client(ctx.obj["config"]) as client:
            return await operation(client)

    try:
        return asyncio.run(runner())
    except MarkbookBackupPendingError:
        console.print("[yellow]The backup has not been produced yet. Try again later.[/yellow]")
        raise typer.Exit(code=1)
    except MarkbookNoBackupError:
        console.print("[yellow]No backup has been scheduled.[/yellow]")
        raise typer.Exit(code=1)
    except (MarkbookError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="YAML file with a 'markbook' section. Defaults to MARKBOOK_* env vars."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Markbook Online client."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {"config": config}


@app.command()
def markbooks(ctx: typer.Context):
    """List all markbooks."""
    response = _run(ctx, lambda client: client.markbook_list())

    table = Table(title=f"Markbooks - {response.school_name}")
    table.add_column("Key", justify="right")
    table.add_column("Name")
    table.add_column("Owner")
    table.add_column("Year")
    table.add_column("Course")
    for markbook in response.markbooks:
        table.add_row(str(markbook.key), markbook.name, markbook.owner, markbook.year, markbook.course)
    console.print(table)


@app.command()
def users(ctx: typer.Context):
    """List all users."""
    response = _run(ctx, lambda client: client.user_list())

    table = Table(title=f"Users - {response.school_name}")
    table.add_column("Key", justify="right")
    table.add_column("Name")
    table.add_column("Login")
    table.add_column("Email")
    for user in response.users:
        table.add_row(str(user.key), user.name, user.login_id, user.email)
    console.print(table)


@app.command()
def markbook(ctx: typer.Context, key: int = typer.Argument(..., help="Markbook key.")):
    """Show a markbook's students and rounded results."""
    response = _run(ctx, lambda client: client.get_markbook(key))

    table = Table(
        title=f"{response.markbook_name} ({response.markbook_year} {response.markbook_course})"
    )
    table.add_column("Student")
    table.add_column("SID")
    table.add_column("Class")
    for task in response.task_list:
        table.add_column(f"{task.name} /{task.maximum}", justify="right")

    for student in response.student_list:
        table.add_row(student.full_name, student.student_id, student.class_name, *student.rounded_results)
    console.print(table)


@app.command("schedule-backup")
def schedule_backup(
    ctx: typer.Context,
    matching: str = typer.Argument(..., help="Markbook name filter (at least 2 characters)."),
):
    """Schedule tonight's backup of matching markbooks."""
    _run(ctx, lambda client: client.schedule_backup(matching))
    console.print(f"[green]Backup scheduled for markbooks matching '{matching}'.[/green]")


@app.command("backup-url")
def backup_url(ctx: typer.Context):
    """Print the download URL of the latest backup."""
    response = _run(ctx, lambda client: client.get_backup_url())
    console.print(response.url)


if __name__ == "__main__":
    app()
