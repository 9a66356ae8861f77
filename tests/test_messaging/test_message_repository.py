"""Tests for message repository."""

from cadence.messaging.types import NewMessage


def _msg(id: str, timestamp: str, chat_jid: str = "tg:100") -> NewMessage:
    return NewMessage(
        id=id,
        chat_jid=chat_jid,
        sender="scheduler",
        sender_name="Scheduler",
        content=f"content {id}",
        timestamp=timestamp,
    )


class TestMessageRepository:
    def test_store_and_read_back(self, db):
        db.message_repo.store_message(_msg("m1", "2024-01-01T00:00:00.000Z"))
        messages = db.message_repo.get_messages_since("tg:100", "")
        assert len(messages) == 1
        assert messages[0].content == "content m1"
        assert messages[0].is_from_me is False

    def test_duplicate_id_ignored(self, db):
        db.message_repo.store_message(_msg("m1", "2024-01-01T00:00:00.000Z"))
        db.message_repo.store_message(_msg("m1", "2024-01-02T00:00:00.000Z"))
        assert len(db.message_repo.get_messages_since("tg:100", "")) == 1

    def test_since_is_exclusive_and_ordered(self, db):
        db.message_repo.store_message(_msg("m2", "2024-01-03T00:00:00.000Z"))
        db.message_repo.store_message(_msg("m1", "2024-01-02T00:00:00.000Z"))
        db.message_repo.store_message(_msg("m0", "2024-01-01T00:00:00.000Z"))
        messages = db.message_repo.get_messages_since("tg:100", "2024-01-01T00:00:00.000Z")
        assert [m.id for m in messages] == ["m1", "m2"]

    def test_filters_by_chat(self, db):
        db.message_repo.store_message(_msg("m1", "2024-01-01T00:00:00.000Z", chat_jid="tg:200"))
        assert db.message_repo.get_messages_since("tg:100", "") == []
