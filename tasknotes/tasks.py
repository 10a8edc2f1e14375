"""Inline task markup embedded in note content.

A task lives inside the note body as a token:

    [TASK:<id>:<text>:<order>:<flag>]

where <flag> is ``t`` (completed) or ``f`` (pending). The note content is the
only source of truth; every function here takes the whole document and
returns a new one. Malformed tokens are left alone, unknown ids are no-ops.

Colons and percent signs inside <text> are percent-encoded on write
(``:`` -> ``%3A``, ``%`` -> ``%25``). Only those two escapes are decoded on
read, so tokens written by older clients without escaping still parse.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple, Optional, Iterable
import random
import re
import string
import time


# order: 1-18 ASCII digits; anything else is not a token
TOKEN_RE = re.compile(r"\[TASK:([^:]*):([^:]*):([0-9]{1,18}):([tf])\]")
_BLANK_RUN_RE = re.compile(r"\n\n+")
_ESCAPE_RE = re.compile(r"%(25|3[aA])")

_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class Task:
    id: str
    text: str
    order: int
    completed: bool = False


class ParsedContent(NamedTuple):
    tasks: list[Task]
    display_content: str


class TaskSummary(NamedTuple):
    total: int
    completed: int

    @property
    def pending(self) -> int:
        return self.total - self.completed

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def percent(self) -> int:
        return round(self.ratio * 100)


# ---------- encoding ----------

def escape_text(text: str) -> str:
    return text.replace("%", "%25").replace(":", "%3A")


def unescape_text(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: "%" if m.group(1) == "25" else ":", text)


def format_token(task: Task) -> str:
    flag = "t" if task.completed else "f"
    return f"[TASK:{task.id}:{escape_text(task.text)}:{task.order}:{flag}]"


def _task_from_match(m: re.Match) -> Task:
    return Task(
        id=m.group(1),
        text=unescape_text(m.group(2)),
        order=int(m.group(3)),
        completed=m.group(4) == "t",
    )


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, rem = divmod(n, 36)
        out.append(_ALPHABET[rem])
    return "".join(reversed(out))


def generate_task_id(existing: Iterable[str] = ()) -> str:
    """Millisecond timestamp plus a random suffix, both base 36.

    Regenerates while the id collides with one in ``existing``.
    """
    taken = set(existing)
    while True:
        suffix = "".join(random.choices(_ALPHABET, k=8))
        task_id = _base36(int(time.time() * 1000)) + suffix
        if task_id not in taken:
            return task_id


# ---------- read ----------

def parse(document: str) -> ParsedContent:
    """Extract tasks (document order) and the content with tokens removed."""
    tasks = [_task_from_match(m) for m in TOKEN_RE.finditer(document)]
    display = TOKEN_RE.sub("", document)
    display = _BLANK_RUN_RE.sub("\n\n", display).strip()
    return ParsedContent(tasks, display)


def sort_for_display(tasks: Iterable[Task]) -> list[Task]:
    """Pending first, then completed; ascending ``order`` within each group.

    ``sorted`` is stable, so equal orders keep their parse position.
    """
    return sorted(tasks, key=lambda t: (t.completed, t.order))


def summarize(tasks: Iterable[Task]) -> TaskSummary:
    tasks = list(tasks)
    return TaskSummary(total=len(tasks), completed=sum(1 for t in tasks if t.completed))


def find_task(document: str, task_id: str) -> Optional[Task]:
    m = _find_token(document, task_id)
    return _task_from_match(m) if m else None


# ---------- write ----------

def _find_token(document: str, task_id: str) -> Optional[re.Match]:
    for m in TOKEN_RE.finditer(document):
        if m.group(1) == task_id:
            return m
    return None


def _splice_field(document: str, task_id: str, group: int, value: str) -> str:
    """Replace one field of the first matching token; other bytes stay as stored."""
    m = _find_token(document, task_id)
    if m is None:
        return document
    start, end = m.span(group)
    return document[:start] + value + document[end:]


def create_task(
    document: str,
    existing_task_count: int,
    text: str,
    position: Optional[int] = None,
) -> tuple[str, Task]:
    """Insert a new pending task and return ``(new_document, task)``.

    ``position=None`` appends on its own line at the end of the document.
    An integer position inserts at that offset, on its own line.
    """
    existing_ids = [m.group(1) for m in TOKEN_RE.finditer(document)]
    task = Task(
        id=generate_task_id(existing_ids),
        text=text,
        order=existing_task_count,
        completed=False,
    )
    token = format_token(task)

    if position is None:
        sep = "\n" if document and not document.endswith("\n") else ""
        return document + sep + token + "\n", task

    index = max(0, min(position, len(document)))
    if index == 0:
        inserted = token + "\n"
    else:
        inserted = "\n" + token + "\n"
    return document[:index] + inserted + document[index:], task


def set_completed(document: str, task_id: str, completed: bool) -> str:
    return _splice_field(document, task_id, 4, "t" if completed else "f")


def set_text(document: str, task_id: str, new_text: str) -> str:
    return _splice_field(document, task_id, 2, escape_text(new_text))


def remove_task(document: str, task_id: str) -> str:
    """Drop the token and at most one newline right after it."""
    m = _find_token(document, task_id)
    if m is None:
        return document
    end = m.end()
    if document[end:end + 1] == "\n":
        end += 1
    return document[: m.start()] + document[end:]
