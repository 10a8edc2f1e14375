from __future__ import annotations
from datetime import datetime, UTC
from enum import Enum
from typing import Optional
from sqlmodel import Field, SQLModel


class AccessLevel(str, Enum):
    viewer = "viewer"
    editor = "editor"


class Note(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255, index=True)
    # free text with inline [TASK:...] tokens, see tasknotes/tasks.py
    content: str = ""

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)


class ShareLink(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    share_id: str = Field(index=True, unique=True)
    note_id: int = Field(foreign_key="note.id", index=True)
    access: AccessLevel = Field(default=AccessLevel.viewer)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def can_edit(self) -> bool:
        return self.access == AccessLevel.editor
