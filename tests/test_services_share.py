import pytest

from tasknotes.models import AccessLevel
from tasknotes.services import (
    create_note, delete_note, add_task, note_tasks, create_share_link,
    list_share_links, delete_share_link, get_shared_note, update_shared_note,
    toggle_shared_task,
)


def test_viewer_link_is_read_only(db):
    n = create_note("Shared", "hello")
    _, task = add_task(n.id, "Look")
    link = create_share_link(n.id)
    assert link.access == AccessLevel.viewer

    note, got = get_shared_note(link.share_id)
    assert note.id == n.id
    assert got.can_edit is False

    with pytest.raises(PermissionError):
        update_shared_note(link.share_id, content="changed")
    with pytest.raises(PermissionError):
        toggle_shared_task(link.share_id, task.id)
    assert note_tasks(n.id).tasks[0].completed is False


def test_editor_link_can_write(db):
    n = create_note("Team", "agenda")
    _, task = add_task(n.id, "Review")
    link = create_share_link(n.id, "editor")

    toggle_shared_task(link.share_id, task.id)
    assert note_tasks(n.id).tasks[0].completed is True

    updated = update_shared_note(link.share_id, title="Team notes")
    assert updated.title == "Team notes"


def test_list_and_revoke(db):
    n = create_note("Doc")
    a = create_share_link(n.id, AccessLevel.viewer)
    b = create_share_link(n.id, AccessLevel.editor)
    assert a.share_id != b.share_id
    assert [l.share_id for l in list_share_links(n.id)] == [a.share_id, b.share_id]

    delete_share_link(a.share_id)
    assert [l.share_id for l in list_share_links(n.id)] == [b.share_id]
    with pytest.raises(ValueError):
        get_shared_note(a.share_id)
    with pytest.raises(ValueError):
        delete_share_link(a.share_id)


def test_bad_access_and_deleted_note(db):
    n = create_note("Gone")
    with pytest.raises(ValueError):
        create_share_link(n.id, "owner")
    link = create_share_link(n.id)
    delete_note(n.id)
    with pytest.raises(ValueError):
        get_shared_note(link.share_id)
