import pytest

from tasknotes.services import create_note, list_notes, get_note, edit_note, delete_note


def test_create_and_get_by_id_or_title(db):
    n = create_note("  hello ", "world")
    assert n.id is not None
    assert n.title == "hello"
    assert get_note(n.id).content == "world"
    assert get_note(str(n.id)).id == n.id
    assert get_note("hello").id == n.id
    assert get_note("missing") is None


def test_create_requires_title(db):
    with pytest.raises(ValueError):
        create_note("   ")
    with pytest.raises(ValueError):
        create_note("x" * 256)


def test_list_search_and_sorting(db):
    create_note("beta", "second body with keyword")
    create_note("alpha", "first body")
    create_note("gamma", "third body")

    assert {n.title for n in list_notes()} == {"alpha", "beta", "gamma"}
    assert [n.title for n in list_notes(search="keyword")] == ["beta"]
    assert [n.title for n in list_notes(sort="title")] == ["alpha", "beta", "gamma"]


def test_edit_updates_fields_and_timestamp(db):
    n = create_note("draft", "hello")
    updated = edit_note(n.id, title="final", content="world")
    assert updated.title == "final"
    assert updated.content == "world"
    assert updated.updated_at >= n.updated_at

    with pytest.raises(ValueError):
        edit_note(9999, title="nope")


def test_delete(db):
    n = create_note("temp")
    assert delete_note(n.id) is True
    assert get_note(n.id) is None
    assert delete_note(n.id) is False


def test_get_note_with_non_ascii_digits_falls_back_to_title(db):
    n = create_note("²")
    assert get_note("²").id == n.id
    assert get_note("٣") is None
    assert get_note("1" * 5000) is None


def test_note_stats(db):
    from tasknotes.services import create_share_link, note_stats

    a = create_note("a", "[TASK:x:one:0:t]\n[TASK:y:two:1:f]")
    create_note("b", "no tasks")
    create_share_link(a.id, "editor")
    st = note_stats()
    assert (st.notes, st.share_links, st.tasks, st.completed_tasks) == (2, 1, 2, 1)
