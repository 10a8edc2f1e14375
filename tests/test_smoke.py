from sqlmodel import select

from tasknotes.db import get_session
from tasknotes.models import AccessLevel, Note, ShareLink


def test_create_note_and_share_link_rows(db):
    s = get_session()
    note = Note(title="hello", content="world [TASK:a:x:0:f]")
    s.add(note)
    s.commit()
    s.refresh(note)
    assert note.id is not None

    s.add(ShareLink(share_id="abc", note_id=note.id, access=AccessLevel.editor))
    s.commit()
    link = s.exec(select(ShareLink).where(ShareLink.share_id == "abc")).one()
    assert link.access == AccessLevel.editor
    assert link.can_edit is True
    s.close()
