"""Server-side HTML for a note's content and its checklist."""
from __future__ import annotations
from html import escape

from .tasks import Task, parse, sort_for_display, summarize


def _task_item(task: Task, editable: bool) -> str:
    state = "completed" if task.completed else "pending"
    checked = " checked" if task.completed else ""
    disabled = "" if editable else " disabled"
    return (
        f'<li class="task-item {state}" data-task-id="{escape(task.id)}">'
        f'<input type="checkbox"{checked}{disabled} /> '
        f'<span class="task-text">{escape(task.text)}</span></li>'
    )


def render_note_html(content: str, editable: bool = False) -> str:
    """Display text, then pending tasks, then completed tasks, then the summary."""
    tasks, display = parse(content or "")
    parts = []
    if display:
        parts.append(f'<div class="note-text">{escape(display).replace(chr(10), "<br />")}</div>')

    if tasks:
        ordered = sort_for_display(tasks)
        pending = [t for t in ordered if not t.completed]
        done = [t for t in ordered if t.completed]
        s = summarize(tasks)
        parts.append('<div class="tasks-section">')
        parts.append(f'<div class="tasks-header">Tasks ({s.pending} pending)</div>')
        if pending:
            parts.append('<ul class="tasks pending">' + "".join(_task_item(t, editable) for t in pending) + "</ul>")
        if done:
            parts.append('<ul class="tasks completed">' + "".join(_task_item(t, editable) for t in done) + "</ul>")
        parts.append(
            f'<div class="tasks-summary">{s.completed}/{s.total} completed ({s.percent}%)</div>'
        )
        parts.append("</div>")

    return "\n".join(parts)


_PAGE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>{title}</title>
<style>
  body {{ font-family: system-ui, sans-serif; max-width: 720px; margin: 2rem auto; color: #333; }}
  .note-text {{ margin-bottom: 16px; line-height: 1.6; }}
  .tasks-header {{ font-weight: 600; color: #555; border-bottom: 1px solid #eee; padding-bottom: 8px; }}
  .tasks {{ list-style: none; padding: 0; }}
  .task-item {{ margin: 8px 0; padding: 8px 12px; border: 1px solid #e0e0e0; border-radius: 6px; background: #f9f9f9; }}
  .task-item.completed .task-text {{ text-decoration: line-through; color: #888; }}
  .tasks-summary {{ font-size: 13px; color: #666; }}
</style>
</head>
<body>
  <h1>{title}</h1>
  {banner}
  {body}
{script}
</body>
</html>
"""

# Checkbox clicks POST to the toggle endpoint, then reload.
_TOGGLE_SCRIPT = """<script>
  document.querySelectorAll('.task-item input').forEach(function (box) {{
    box.addEventListener('change', async function () {{
      const id = box.closest('.task-item').dataset.taskId;
      const res = await fetch('{toggle_base}/' + encodeURIComponent(id) + '/toggle', {{method: 'POST'}});
      if (!res.ok) {{ box.checked = !box.checked; return; }}
      location.reload();
    }});
  }});
</script>"""


def render_page(title: str, content: str, toggle_base: str | None = None, banner: str = "") -> str:
    """Full HTML page. Checkboxes are live only when ``toggle_base`` is given."""
    editable = toggle_base is not None
    script = _TOGGLE_SCRIPT.format(toggle_base=toggle_base) if editable else ""
    return _PAGE.format(
        title=escape(title),
        banner=banner,
        body=render_note_html(content, editable=editable),
        script=script,
    )
