from __future__ import annotations
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.markdown import Markdown
from rich.markup import escape

from .config import load_settings
from .db import init_db
from .logging_setup import setup_logging
from .models import AccessLevel
from .tasks import parse, sort_for_display, summarize
from .services import (
    create_note, list_notes, get_note, edit_note, delete_note,
    add_task, set_task_completed, toggle_task, rename_task, delete_task,
    create_share_link, list_share_links, delete_share_link, note_stats,
)

app = typer.Typer(help="Tasknotes: notes with inline checklists")
console = Console()


@app.callback()
def _boot():
    settings = load_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    init_db()


def _fail(e: Exception):
    console.print(f"[red]Error[/]: {e}")
    raise typer.Exit(1)


def _progress(content: str) -> str:
    s = summarize(parse(content).tasks)
    return f"{s.completed}/{s.total}" if s.total else ""


@app.command()
def add(
    title: str = typer.Option(..., "--title", "-t"),
    content: str = typer.Option("", "--content", "-c"),
):
    try:
        n = create_note(title, content)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Created[/] #{n.id}: {escape(n.title)}")


@app.command("list")
def _list(
    search: Optional[str] = typer.Option(None, "--search"),
    sort: str = typer.Option("updated", "--sort", help="updated|created|title"),
):
    notes = list_notes(search=search, sort=sort)
    table = Table(title="Tasknotes")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Tasks", justify="right", style="magenta")
    table.add_column("Updated")
    for n in notes:
        table.add_row(
            str(n.id), escape(n.title), _progress(n.content),
            n.updated_at.isoformat(timespec="minutes"),
        )
    console.print(table)


@app.command()
def show(identifier: str):
    n = get_note(identifier)
    if not n:
        console.print(f"[red]Not found[/]: {identifier}")
        raise typer.Exit(1)
    console.rule(f"#{n.id} {escape(n.title)}")
    tasks, display = parse(n.content)
    console.print(Markdown(display or "_<empty>_"))
    if not tasks:
        return
    table = Table(show_header=True, box=None)
    table.add_column("")
    table.add_column("Task")
    table.add_column("ID", style="dim")
    for t in sort_for_display(tasks):
        mark = "[green]✓[/]" if t.completed else "☐"
        text = f"[strike dim]{escape(t.text)}[/]" if t.completed else escape(t.text)
        table.add_row(mark, text, t.id)
    console.print(table)
    s = summarize(tasks)
    console.print(f"[dim]{s.completed}/{s.total} completed ({s.percent}%)[/]")


@app.command()
def edit(
    identifier: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
):
    try:
        n = edit_note(identifier, title=title, content=content)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Updated[/] #{n.id}: {escape(n.title)}")


@app.command()
def delete(identifier: str):
    if not delete_note(identifier):
        _fail(ValueError(f"Note '{identifier}' not found"))
    console.print(f"[yellow]Deleted[/]: {identifier}")


@app.command("task-add")
def task_add(
    identifier: str,
    text: str,
    position: Optional[int] = typer.Option(None, "--at", min=0, help="character offset to insert at"),
):
    try:
        n, t = add_task(identifier, text, position=position)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Added task[/] {t.id} to #{n.id}: {escape(t.text)}")


@app.command("task-done")
def task_done(identifier: str, task_id: str):
    try:
        n = set_task_completed(identifier, task_id, True)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Done[/] {task_id} ({_progress(n.content)})")


@app.command("task-undo")
def task_undo(identifier: str, task_id: str):
    try:
        n = set_task_completed(identifier, task_id, False)
    except ValueError as e:
        _fail(e)
    console.print(f"[yellow]Reopened[/] {task_id} ({_progress(n.content)})")


@app.command("task-toggle")
def task_toggle(identifier: str, task_id: str):
    try:
        n = toggle_task(identifier, task_id)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Toggled[/] {task_id} ({_progress(n.content)})")


@app.command("task-rename")
def task_rename(identifier: str, task_id: str, text: str):
    try:
        rename_task(identifier, task_id, text)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Renamed[/] {task_id}: {escape(text)}")


@app.command("task-rm")
def task_rm(identifier: str, task_id: str):
    try:
        delete_task(identifier, task_id)
    except ValueError as e:
        _fail(e)
    console.print(f"[yellow]Removed task[/] {task_id}")


@app.command()
def share(
    identifier: str,
    access: AccessLevel = typer.Option(AccessLevel.viewer, "--access", "-a"),
):
    try:
        link = create_share_link(identifier, access)
    except ValueError as e:
        _fail(e)
    console.print(f"[green]Shared[/] #{link.note_id} as {link.access.value}: /s/{link.share_id}")


@app.command()
def shares(identifier: str):
    try:
        links = list_share_links(identifier)
    except ValueError as e:
        _fail(e)
    table = Table(title=f"Share links for {identifier}")
    table.add_column("Share ID", style="cyan")
    table.add_column("Access")
    table.add_column("Created")
    for link in links:
        table.add_row(link.share_id, link.access.value, link.created_at.isoformat(timespec="minutes"))
    console.print(table)


@app.command()
def unshare(share_id: str):
    try:
        delete_share_link(share_id)
    except ValueError as e:
        _fail(e)
    console.print(f"[yellow]Revoked[/] {share_id}")


@app.command()
def stats():
    st = note_stats()
    table = Table(title="Tasknotes stats", show_header=False)
    table.add_column("", style="bold")
    table.add_column("", justify="right")
    table.add_row("Notes", str(st.notes))
    table.add_row("Share links", str(st.share_links))
    table.add_row("Tasks", f"{st.completed_tasks}/{st.tasks} completed")
    console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
):
    import uvicorn

    settings = load_settings()
    uvicorn.run("tasknotes.app:app", host=host or settings.host, port=port or settings.port)


def main():
    app()


if __name__ == "__main__":
    main()
