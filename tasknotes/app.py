# tasknotes/app.py
from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Optional
from datetime import datetime
from html import escape
import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .config import load_settings
from .db import init_db
from .logging_setup import setup_logging
from .models import AccessLevel
from .render import render_page
from .tasks import parse, sort_for_display, summarize
from .services import (
    list_notes,
    create_note,
    get_note,
    edit_note,
    delete_note,
    note_tasks,
    add_task,
    set_task_completed,
    toggle_task,
    rename_task,
    delete_task,
    create_share_link,
    list_share_links,
    delete_share_link,
    get_shared_note,
    update_shared_note,
    toggle_shared_task,
    note_stats,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    init_db()
    logger.info("database ready at %s", settings.db_path)
    yield


app = FastAPI(title="Tasknotes API", lifespan=lifespan)

# ---------- Schemas ----------
class NoteCreate(BaseModel):
    title: str
    content: str = ""

class NoteEdit(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None

class NoteOut(BaseModel):
    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

class TaskOut(BaseModel):
    id: str
    text: str
    order: int
    completed: bool

class TaskCreate(BaseModel):
    text: str = Field(min_length=1)
    position: Optional[int] = Field(default=None, ge=0)

class TaskEdit(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None

class SummaryOut(BaseModel):
    total: int
    completed: int
    pending: int
    percent: int

class TasksOut(BaseModel):
    tasks: list[TaskOut]
    display_content: str
    summary: SummaryOut

class TaskCreated(BaseModel):
    note: NoteOut
    task: TaskOut

class ShareCreate(BaseModel):
    access: AccessLevel = AccessLevel.viewer

class ShareOut(BaseModel):
    share_id: str
    note_id: int
    access: AccessLevel
    created_at: datetime

class StatsOut(BaseModel):
    notes: int
    share_links: int
    tasks: int
    completed_tasks: int

class SharedNoteOut(NoteOut):
    access: AccessLevel

def _to_out(n) -> NoteOut:
    return NoteOut(
        id=n.id, title=n.title, content=n.content,
        created_at=n.created_at, updated_at=n.updated_at,
    )

def _task_out(t) -> TaskOut:
    return TaskOut(id=t.id, text=t.text, order=t.order, completed=t.completed)

def _tasks_out(parsed) -> TasksOut:
    s = summarize(parsed.tasks)
    return TasksOut(
        tasks=[_task_out(t) for t in sort_for_display(parsed.tasks)],
        display_content=parsed.display_content,
        summary=SummaryOut(total=s.total, completed=s.completed, pending=s.pending, percent=s.percent),
    )

def _share_out(link) -> ShareOut:
    return ShareOut(
        share_id=link.share_id, note_id=link.note_id,
        access=link.access, created_at=link.created_at,
    )

def _not_found(e: ValueError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))

# ---------- Notes ----------
@app.get("/api/notes", response_model=list[NoteOut])
def api_list_notes(
    search: Optional[str] = None,
    sort: str = Query("updated", pattern="^(updated|created|title)$"),
):
    return [_to_out(n) for n in list_notes(search=search, sort=sort)]

@app.post("/api/notes", response_model=NoteOut, status_code=201)
def api_create_note(payload: NoteCreate):
    try:
        n = create_note(payload.title, payload.content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_out(n)

@app.get("/api/notes/{identifier}", response_model=NoteOut)
def api_get_note(identifier: str):
    n = get_note(identifier)
    if not n:
        raise HTTPException(status_code=404, detail="Not found")
    return _to_out(n)

@app.patch("/api/notes/{identifier}", response_model=NoteOut)
def api_edit_note(identifier: str, payload: NoteEdit):
    if not get_note(identifier):
        raise HTTPException(status_code=404, detail="Not found")
    try:
        n = edit_note(identifier, title=payload.title, content=payload.content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_out(n)

@app.delete("/api/notes/{identifier}")
def api_delete_note(identifier: str):
    if not delete_note(identifier):
        raise HTTPException(status_code=404, detail="Not found")
    return {"ok": True}

# ---------- Tasks ----------
@app.get("/api/notes/{identifier}/tasks", response_model=TasksOut)
def api_list_tasks(identifier: str):
    try:
        return _tasks_out(note_tasks(identifier))
    except ValueError as e:
        raise _not_found(e)

@app.post("/api/notes/{identifier}/tasks", response_model=TaskCreated, status_code=201)
def api_add_task(identifier: str, payload: TaskCreate):
    try:
        n, t = add_task(identifier, payload.text, position=payload.position)
    except ValueError as e:
        raise _not_found(e)
    return TaskCreated(note=_to_out(n), task=_task_out(t))

@app.patch("/api/notes/{identifier}/tasks/{task_id}", response_model=NoteOut)
def api_edit_task(identifier: str, task_id: str, payload: TaskEdit):
    try:
        n = get_note(identifier)
        if not n:
            raise ValueError(f"Note '{identifier}' not found")
        if payload.text is not None:
            n = rename_task(n.id, task_id, payload.text)
        if payload.completed is not None:
            n = set_task_completed(n.id, task_id, payload.completed)
    except ValueError as e:
        raise _not_found(e)
    return _to_out(n)

@app.post("/api/notes/{identifier}/tasks/{task_id}/toggle", response_model=NoteOut)
def api_toggle_task(identifier: str, task_id: str):
    try:
        return _to_out(toggle_task(identifier, task_id))
    except ValueError as e:
        raise _not_found(e)

@app.delete("/api/notes/{identifier}/tasks/{task_id}", response_model=NoteOut)
def api_delete_task(identifier: str, task_id: str):
    try:
        return _to_out(delete_task(identifier, task_id))
    except ValueError as e:
        raise _not_found(e)

# ---------- Sharing ----------
@app.post("/api/notes/{identifier}/share", response_model=ShareOut, status_code=201)
def api_share(identifier: str, payload: ShareCreate):
    try:
        return _share_out(create_share_link(identifier, payload.access))
    except ValueError as e:
        raise _not_found(e)

@app.get("/api/notes/{identifier}/shares", response_model=list[ShareOut])
def api_list_shares(identifier: str):
    try:
        return [_share_out(link) for link in list_share_links(identifier)]
    except ValueError as e:
        raise _not_found(e)

@app.delete("/api/shares/{share_id}")
def api_delete_share(share_id: str):
    try:
        delete_share_link(share_id)
    except ValueError as e:
        raise _not_found(e)
    return {"ok": True}

@app.get("/api/public/notes/{share_id}", response_model=SharedNoteOut)
def api_get_shared(share_id: str):
    try:
        n, link = get_shared_note(share_id)
    except ValueError as e:
        raise _not_found(e)
    return SharedNoteOut(**_to_out(n).model_dump(), access=link.access)

@app.put("/api/public/notes/{share_id}", response_model=NoteOut)
def api_update_shared(share_id: str, payload: NoteEdit):
    try:
        get_shared_note(share_id)
    except ValueError as e:
        raise _not_found(e)
    try:
        n = update_shared_note(share_id, title=payload.title, content=payload.content)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_out(n)

@app.post("/api/public/notes/{share_id}/tasks/{task_id}/toggle", response_model=NoteOut)
def api_toggle_shared_task(share_id: str, task_id: str):
    try:
        return _to_out(toggle_shared_task(share_id, task_id))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise _not_found(e)

# ---------- Stats ----------
@app.get("/api/public/stats", response_model=StatsOut)
def api_stats():
    return StatsOut(**note_stats()._asdict())

# ---------- HTML views ----------
@app.get("/", response_class=HTMLResponse)
def index():
    items = []
    for n in list_notes():
        s = summarize(parse(n.content).tasks)
        progress = f" <small>{s.completed}/{s.total}</small>" if s.total else ""
        items.append(f'<li><a href="/notes/{n.id}">#{n.id} {escape(n.title)}</a>{progress}</li>')
    body = "<ul>" + "".join(items) + "</ul>" if items else "<p>no notes</p>"
    return HTMLResponse(content=(
        "<!doctype html><html><head><meta charset='utf-8'/><title>Tasknotes</title></head>"
        f"<body><h1>Tasknotes</h1>{body}</body></html>"
    ))

@app.get("/notes/{identifier}", response_class=HTMLResponse)
def view_note(identifier: str):
    n = get_note(identifier)
    if not n:
        raise HTTPException(status_code=404, detail="Not found")
    return HTMLResponse(content=render_page(n.title, n.content, toggle_base=f"/api/notes/{n.id}/tasks"))

@app.get("/s/{share_id}", response_class=HTMLResponse)
def view_shared(share_id: str):
    try:
        n, link = get_shared_note(share_id)
    except ValueError as e:
        raise _not_found(e)
    if link.can_edit:
        toggle_base = f"/api/public/notes/{share_id}/tasks"
        banner = "<p><em>Editor (can edit)</em></p>"
    else:
        toggle_base = None
        banner = "<p><em>Viewer (read only)</em></p>"
    return HTMLResponse(content=render_page(n.title, n.content, toggle_base=toggle_base, banner=banner))
