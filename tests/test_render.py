from tasknotes.render import render_note_html, render_page


CONTENT = "Intro line\n[TASK:a:Done thing:0:t]\n[TASK:b:<b>risky</b>:1:f]\n"


def test_pending_group_comes_before_completed():
    html = render_note_html(CONTENT)
    assert html.index('data-task-id="b"') < html.index('data-task-id="a"')
    assert '<ul class="tasks pending">' in html
    assert '<ul class="tasks completed">' in html
    assert "1/2 completed (50%)" in html


def test_text_and_display_content_are_escaped():
    html = render_note_html("a < b\nnext\n[TASK:x:<i>t</i>:0:f]")
    assert "a &lt; b<br />next" in html
    assert "&lt;i&gt;t&lt;/i&gt;" in html
    assert "<i>" not in html


def test_no_tasks_means_no_summary():
    html = render_note_html("just prose")
    assert "tasks-summary" not in html
    assert "just prose" in html


def test_page_checkboxes_live_only_with_toggle_base():
    read_only = render_page("Title", CONTENT)
    assert "disabled" in read_only
    assert "<script>" not in read_only

    live = render_page("Title", CONTENT, toggle_base="/api/notes/1/tasks")
    assert "disabled" not in live
    assert "/api/notes/1/tasks" in live
