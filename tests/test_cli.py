import pytest
from typer.testing import CliRunner

from tasknotes import cli
from tasknotes.cli import app
from tasknotes.services import get_note, note_tasks

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    # the runner's stderr is closed after each invoke
    monkeypatch.setattr(cli, "setup_logging", lambda **kw: None)


def test_add_task_flow(db):
    r = runner.invoke(app, ["add", "-t", "Chores", "-c", "Saturday"])
    assert r.exit_code == 0, r.output
    assert "Created" in r.output

    r = runner.invoke(app, ["task-add", "Chores", "Vacuum"])
    assert r.exit_code == 0, r.output
    task = note_tasks("Chores").tasks[0]
    assert task.text == "Vacuum"

    r = runner.invoke(app, ["task-done", "Chores", task.id])
    assert r.exit_code == 0, r.output
    assert note_tasks("Chores").tasks[0].completed is True

    r = runner.invoke(app, ["show", "Chores"])
    assert r.exit_code == 0, r.output
    assert "Vacuum" in r.output
    assert "1/1 completed (100%)" in r.output

    r = runner.invoke(app, ["task-rm", "Chores", task.id])
    assert r.exit_code == 0, r.output
    assert get_note("Chores").content == "Saturday\n"


def test_share_and_errors(db):
    runner.invoke(app, ["add", "-t", "Plan"])
    r = runner.invoke(app, ["share", "Plan", "--access", "editor"])
    assert r.exit_code == 0, r.output
    assert "editor" in r.output

    r = runner.invoke(app, ["task-add", "Missing", "x"])
    assert r.exit_code == 1
    assert "not found" in r.output

    r = runner.invoke(app, ["show", "Missing"])
    assert r.exit_code == 1


def test_titles_are_printed_literally(db):
    r = runner.invoke(app, ["add", "-t", "[bold]x"])
    assert r.exit_code == 0, r.output
    assert "[bold]x" in r.output

    for args in (["list"], ["show", "[bold]x"]):
        r = runner.invoke(app, args)
        assert r.exit_code == 0, r.output
        assert "[bold]x" in r.output


def test_stats(db):
    runner.invoke(app, ["add", "-t", "Plan", "-c", "[TASK:a:one:0:t]"])
    r = runner.invoke(app, ["stats"])
    assert r.exit_code == 0, r.output
    assert "1/1 completed" in r.output
