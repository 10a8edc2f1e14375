from __future__ import annotations
from typing import NamedTuple, Optional
from sqlmodel import func, select
import logging
import secrets

from . import tasks as taskmarkup
from .db import session_scope
from .models import AccessLevel, Note, ShareLink
from .tasks import ParsedContent, Task

logger = logging.getLogger(__name__)


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("Title is required")
    if len(title) > 255:
        raise ValueError("Title cannot exceed 255 characters")
    return title


# ---------- notes ----------

def create_note(title: str, content: str = "") -> Note:
    with session_scope() as s:
        note = Note(title=_clean_title(title), content=content or "")
        s.add(note)
        s.flush()  # get the ID assigned
        s.refresh(note)
        logger.info("created note #%s %r", note.id, note.title)
        return note


def list_notes(search: Optional[str] = None, sort: str = "updated") -> list[Note]:
    """
    Return notes, optionally filtered by a substring of title or content.
    - sort: updated|created|title
    """
    with session_scope() as s:
        stmt = select(Note)
        if search:
            like = f"%{search}%"
            stmt = stmt.where((Note.title.like(like)) | (Note.content.like(like)))

        if sort == "created":
            stmt = stmt.order_by(Note.created_at.desc())
        elif sort == "title":
            stmt = stmt.order_by(Note.title.asc())
        else:
            stmt = stmt.order_by(Note.updated_at.desc())

        return list(s.exec(stmt))


def _as_id(identifier: int | str) -> Optional[int]:
    if isinstance(identifier, int):
        return identifier
    s = str(identifier)
    # ASCII digits only; 18 keeps it inside SQLite's integer range
    if s.isascii() and s.isdecimal() and len(s) <= 18:
        return int(s)
    return None


def get_note(identifier: int | str) -> Optional[Note]:
    """Fetch by id (int or ASCII digit string) or exact title."""
    with session_scope() as s:
        note_id = _as_id(identifier)
        if note_id is not None:
            obj = s.get(Note, note_id)
            if obj:
                return obj
        stmt = select(Note).where(Note.title == str(identifier))
        return s.exec(stmt).first()


def _require_note(identifier: int | str) -> Note:
    note = get_note(identifier)
    if not note:
        raise ValueError(f"Note '{identifier}' not found")
    return note


def edit_note(
    identifier: int | str,
    *,
    title: Optional[str] = None,
    content: Optional[str] = None,
) -> Note:
    """Update fields and bump updated_at. Returns the updated note."""
    with session_scope() as s:
        note = s.merge(_require_note(identifier))
        if title is not None:
            note.title = _clean_title(title)
        if content is not None:
            note.content = content
        note.touch()
        s.add(note)
        s.flush()
        s.refresh(note)
        logger.info("updated note #%s", note.id)
        return note


def delete_note(identifier: int | str) -> bool:
    """Delete the note and its share links. Returns False if it did not exist."""
    with session_scope() as s:
        note = get_note(identifier)
        if not note:
            return False
        links = s.exec(select(ShareLink).where(ShareLink.note_id == note.id))
        for link in links:
            s.delete(link)
        s.delete(s.merge(note))
        logger.info("deleted note #%s", note.id)
        return True


# ---------- tasks ----------

def note_tasks(identifier: int | str) -> ParsedContent:
    return taskmarkup.parse(_require_note(identifier).content)


def _save_content(note: Note, content: str) -> Note:
    if content == note.content:
        return note
    return edit_note(note.id, content=content)


def add_task(identifier: int | str, text: str, position: Optional[int] = None) -> tuple[Note, Task]:
    note = _require_note(identifier)
    count = len(taskmarkup.parse(note.content).tasks)
    content, task = taskmarkup.create_task(note.content, count, text, position=position)
    note = _save_content(note, content)
    logger.info("note #%s: added task %s", note.id, task.id)
    return note, task


def set_task_completed(identifier: int | str, task_id: str, completed: bool) -> Note:
    note = _require_note(identifier)
    content = taskmarkup.set_completed(note.content, task_id, completed)
    if content == note.content:
        logger.debug("note #%s: task %s unchanged", note.id, task_id)
        return note
    logger.info("note #%s: task %s completed=%s", note.id, task_id, completed)
    return _save_content(note, content)


def toggle_task(identifier: int | str, task_id: str) -> Note:
    note = _require_note(identifier)
    task = taskmarkup.find_task(note.content, task_id)
    if task is None:
        logger.debug("note #%s: no task %s to toggle", note.id, task_id)
        return note
    return set_task_completed(note.id, task_id, not task.completed)


def rename_task(identifier: int | str, task_id: str, text: str) -> Note:
    note = _require_note(identifier)
    content = taskmarkup.set_text(note.content, task_id, text)
    if content == note.content:
        logger.debug("note #%s: task %s unchanged", note.id, task_id)
        return note
    logger.info("note #%s: renamed task %s", note.id, task_id)
    return _save_content(note, content)


def delete_task(identifier: int | str, task_id: str) -> Note:
    note = _require_note(identifier)
    content = taskmarkup.remove_task(note.content, task_id)
    if content == note.content:
        logger.debug("note #%s: no task %s to remove", note.id, task_id)
        return note
    logger.info("note #%s: removed task %s", note.id, task_id)
    return _save_content(note, content)


# ---------- share links ----------

def create_share_link(identifier: int | str, access: AccessLevel | str = AccessLevel.viewer) -> ShareLink:
    try:
        access = AccessLevel(access)
    except ValueError:
        raise ValueError(f"Unknown access level '{access}'") from None
    note = _require_note(identifier)
    with session_scope() as s:
        link = ShareLink(share_id=secrets.token_urlsafe(16), note_id=note.id, access=access)
        s.add(link)
        s.flush()
        s.refresh(link)
        logger.info("note #%s: shared as %s (%s)", note.id, link.share_id, access.value)
        return link


def list_share_links(identifier: int | str) -> list[ShareLink]:
    note = _require_note(identifier)
    with session_scope() as s:
        stmt = select(ShareLink).where(ShareLink.note_id == note.id).order_by(ShareLink.created_at.asc(), ShareLink.id.asc())
        return list(s.exec(stmt))


def _get_link(share_id: str) -> Optional[ShareLink]:
    with session_scope() as s:
        return s.exec(select(ShareLink).where(ShareLink.share_id == share_id)).first()


def delete_share_link(share_id: str) -> None:
    with session_scope() as s:
        link = s.exec(select(ShareLink).where(ShareLink.share_id == share_id)).first()
        if not link:
            raise ValueError("Share link not found")
        s.delete(link)
        logger.info("revoked share link %s", share_id)


def get_shared_note(share_id: str) -> tuple[Note, ShareLink]:
    link = _get_link(share_id)
    if not link:
        raise ValueError("Shared note not found")
    note = get_note(link.note_id)
    if not note:
        raise ValueError("Shared note not found")
    return note, link


def _editable_shared_note(share_id: str) -> Note:
    note, link = get_shared_note(share_id)
    if not link.can_edit:
        raise PermissionError("This share link is read-only")
    return note


def update_shared_note(
    share_id: str,
    *,
    title: Optional[str] = None,
    content: Optional[str] = None,
) -> Note:
    note = _editable_shared_note(share_id)
    return edit_note(note.id, title=title, content=content)


def toggle_shared_task(share_id: str, task_id: str) -> Note:
    note = _editable_shared_note(share_id)
    return toggle_task(note.id, task_id)


# ---------- stats ----------

class NoteStats(NamedTuple):
    notes: int
    share_links: int
    tasks: int
    completed_tasks: int


def note_stats() -> NoteStats:
    """Totals across every note; task counts come from parsing each note."""
    with session_scope() as s:
        notes = s.exec(select(func.count()).select_from(Note)).one()
        links = s.exec(select(func.count()).select_from(ShareLink)).one()
        contents = list(s.exec(select(Note.content)))
    summary = taskmarkup.summarize(t for c in contents for t in taskmarkup.parse(c).tasks)
    return NoteStats(
        notes=notes,
        share_links=links,
        tasks=summary.total,
        completed_tasks=summary.completed,
    )
