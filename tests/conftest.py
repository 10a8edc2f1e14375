import pytest

from tasknotes.db import init_db, reset_engine


@pytest.fixture()
def db(tmp_path, monkeypatch):
    monkeypatch.setenv("TASKNOTES_DB_PATH", str(tmp_path / "tasknotes.sqlite"))
    reset_engine()  # pick up the new path
    init_db()
    yield tmp_path / "tasknotes.sqlite"
    reset_engine()
