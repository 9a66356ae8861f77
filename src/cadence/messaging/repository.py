"""Message DB operations."""

from __future__ import annotations

import sqlite3

from cadence.messaging.types import NewMessage


class MessageRepository:
    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def store_message(self, msg: NewMessage) -> None:
        self._db.execute(
            """INSERT OR IGNORE INTO messages
               (id, chat_jid, sender, sender_name, content, timestamp, is_from_me)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                msg.id,
                msg.chat_jid,
                msg.sender,
                msg.sender_name,
                msg.content,
                msg.timestamp,
                1 if msg.is_from_me else 0,
            ),
        )
        self._db.commit()

    def get_messages_since(self, chat_jid: str, since_timestamp: str) -> list[NewMessage]:
        """Get all messages for a chat since a timestamp."""
        rows = self._db.execute(
            """SELECT * FROM messages
               WHERE chat_jid = ? AND timestamp > ?
               ORDER BY timestamp""",
            (chat_jid, since_timestamp),
        ).fetchall()
        return [self._row_to_message(row) for row in rows]

    def _row_to_message(self, row: sqlite3.Row) -> NewMessage:
        return NewMessage(
            id=row["id"],
            chat_jid=row["chat_jid"],
            sender=row["sender"],
            sender_name=row["sender_name"],
            content=row["content"],
            timestamp=row["timestamp"],
            is_from_me=bool(row["is_from_me"]),
        )
