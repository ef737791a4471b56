"""Taskpad CLI - terminal front end for the personal task list."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .api.client import TaskpadClient
from .config import settings
from .models import CATEGORIES, DEFAULT_CATEGORY
from .offline.queue import OfflineQueue
from .offline.storage import OfflineStorageError, OfflineStore
from .ordering import FILTERS, SORTS, DragResult, DropKind
from .session import Session

load_dotenv()

app = typer.Typer(
    name="taskpad",
    help="Personal to-do list with offline support",
    no_args_is_help=True,
)
console = Console()

OwnerOption = typer.Option(None, "--owner", "-o", help="User id (default: TASKPAD_OWNER_ID)")


def _require_owner(owner: str | None) -> str:
    owner = owner or settings.owner_id
    if not owner:
        console.print("[red]No user id. Pass --owner or set TASKPAD_OWNER_ID.[/red]")
        raise typer.Exit(1)
    return owner


@asynccontextmanager
async def open_session(owner: str, online: bool = True):
    """Build a signed-in session against the configured API and offline buffer."""
    async with TaskpadClient(owner_id=owner) as client:
        queue = OfflineQueue(OfflineStore(), client)
        yield Session(client, queue, owner, online=online)


def _report(session: Session) -> None:
    state = session.state
    if state.warning:
        console.print(f"[yellow]{state.warning}[/yellow]")
    if state.error:
        console.print(f"[red]{state.error}[/red]")
        raise typer.Exit(1)


def _print_tasks(session: Session) -> None:
    state = session.state
    pending, completed = state.counts
    table = Table(title=f"Tasks ({pending} pending, {completed} completed)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="dim", max_width=24)
    table.add_column("Task", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Deadline", style="white")
    table.add_column("Status", style="green")

    for position, task in enumerate(state.visible, start=1):
        status = "completed" if task.is_completed else "pending"
        if task.is_local:
            status += " (local)"
        table.add_row(
            str(position),
            task.id[:24],
            f"{task.emoji} {task.text}",
            task.category,
            task.deadline or "-",
            status,
        )
    console.print(table)


@app.command("list")
def list_tasks(
    owner: str = OwnerOption,
    status_filter: str = typer.Option("all", "--filter", "-f", help=f"One of: {', '.join(FILTERS)}"),
    sort: str = typer.Option("manual", "--sort", "-s", help=f"One of: {', '.join(SORTS)}"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List tasks."""
    owner = _require_owner(owner)
    if status_filter not in FILTERS or sort not in SORTS:
        console.print("[red]Unknown filter or sort mode.[/red]")
        raise typer.Exit(1)

    async def _list() -> Session:
        async with open_session(owner) as session:
            session.set_filter(status_filter)
            session.set_sort(sort)
            await session.refresh()
            return session

    session = asyncio.run(_list())
    _report(session)
    if json_output:
        rows: list[dict[str, Any]] = [
            {
                "id": t.id,
                "text": t.text,
                "status": t.status,
                "deadline": t.deadline,
                "category": t.category,
                "order": t.order,
                "provenance": t.provenance.value,
            }
            for t in session.state.visible
        ]
        console.print_json(json.dumps(rows, default=str))
    else:
        _print_tasks(session)


@app.command("add")
def add_task(
    text: str = typer.Argument(..., help="Task text (max 100 characters)"),
    owner: str = OwnerOption,
    deadline: str = typer.Option("", "--deadline", "-d", help="Deadline, e.g. 2026-01-25"),
    category: str = typer.Option(
        DEFAULT_CATEGORY, "--category", "-c", help=f"One of: {', '.join(CATEGORIES)}"
    ),
    offline: bool = typer.Option(False, "--offline", help="Store locally and sync later"),
):
    """Add a task."""
    owner = _require_owner(owner)

    async def _add():
        async with open_session(owner, online=not offline) as session:
            await session.refresh()
            task = await session.add_task(text, deadline=deadline, category=category)
            return session, task

    session, task = asyncio.run(_add())
    _report(session)
    if task is None:
        raise typer.Exit(1)
    if task.is_local:
        console.print(f"[yellow]Saved offline ({task.id}). Run 'taskpad sync' when back online.[/yellow]")
    else:
        console.print(f"[green]Task created: {task.id}[/green]")


@app.command("toggle")
def toggle_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    owner: str = OwnerOption,
):
    """Mark a task completed, or pending again."""
    owner = _require_owner(owner)

    async def _toggle():
        async with open_session(owner) as session:
            await session.refresh()
            await session.toggle(task_id)
            return session

    session = asyncio.run(_toggle())
    _report(session)
    task = session.state.find(task_id)
    console.print(f"[green]Task is now {task.status if task else 'updated'}.[/green]")


@app.command("rm")
def remove_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    owner: str = OwnerOption,
):
    """Delete a task."""
    owner = _require_owner(owner)

    async def _remove():
        async with open_session(owner) as session:
            await session.refresh()
            await session.remove(task_id)
            return session

    session = asyncio.run(_remove())
    _report(session)
    console.print("[green]Task deleted.[/green]")


@app.command("move")
def move_task(
    source: int = typer.Argument(..., help="Current position (1-based, as shown by 'list')"),
    destination: int = typer.Argument(..., help="New position (1-based)"),
    owner: str = OwnerOption,
    status_filter: str = typer.Option("all", "--filter", "-f", help="Filter the list is shown with"),
):
    """Move a task within the manual order."""
    owner = _require_owner(owner)
    if status_filter not in FILTERS:
        console.print("[red]Unknown filter.[/red]")
        raise typer.Exit(1)

    async def _move():
        async with open_session(owner) as session:
            session.set_filter(status_filter)
            await session.refresh()
            visible = session.state.visible
            if not (1 <= source <= len(visible) and 1 <= destination <= len(visible)):
                return session, None
            outcome = await session.drop(DragResult(source - 1, destination - 1))
            return session, outcome

    session, outcome = asyncio.run(_move())
    if outcome is None:
        console.print("[red]Position out of range.[/red]")
        raise typer.Exit(1)
    _report(session)
    if outcome.kind is DropKind.REORDERED:
        _print_tasks(session)
    else:
        console.print("[dim]Nothing to move.[/dim]")


@app.command("sync")
def sync_offline(owner: str = OwnerOption):
    """Send tasks created offline to the server."""
    owner = _require_owner(owner)

    async def _sync():
        async with open_session(owner) as session:
            return session, await session.sync()

    session, report = asyncio.run(_sync())
    if not report.ok:
        console.print(f"[red]Sync failed: {report.error}. Offline tasks were kept.[/red]")
        raise typer.Exit(1)
    if not report.attempted:
        console.print("[dim]No offline tasks to sync.[/dim]")
    else:
        console.print(f"[green]Synced {report.synced} offline task(s).[/green]")


@app.command("queue")
def show_queue():
    """Show tasks waiting in the offline buffer."""
    try:
        entries = OfflineStore().all()
    except OfflineStorageError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Offline tasks ({len(entries)})")
    table.add_column("Local ID", style="dim")
    table.add_column("Task", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Deadline", style="white")
    for entry in entries:
        table.add_row(
            str(entry.get("localId")),
            entry.get("text", ""),
            entry.get("category") or DEFAULT_CATEGORY,
            entry.get("deadline") or "-",
        )
    console.print(table)


@app.command("serve")
def serve(
    port: int = typer.Option(3000, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the task API."""
    try:
        import uvicorn
    except ImportError:
        console.print("[red]Missing dependencies. Install with: pip install -e '.[server]'[/red]")
        raise typer.Exit(1)

    console.print(f"[bold cyan]Starting Task API at http://{host}:{port}[/bold cyan]")
    uvicorn.run("taskpad_api.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
