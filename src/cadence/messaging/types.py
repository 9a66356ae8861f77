"""Messaging domain types, Channel protocol and message store protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class NewMessage(BaseModel):
    id: str
    chat_jid: str
    sender: str
    sender_name: str
    content: str
    timestamp: str
    is_from_me: bool = False


@runtime_checkable
class Channel(Protocol):
    """One messaging platform. Owns a namespace of chat JIDs (e.g. ``tg:`` prefixed)."""

    name: str

    async def connect(self) -> None: ...
    async def send_message(self, jid: str, text: str) -> None: ...
    def is_connected(self) -> bool: ...
    def owns_jid(self, jid: str) -> bool: ...
    async def disconnect(self) -> None: ...
    async def set_typing(self, jid: str, is_typing: bool) -> None: ...


@runtime_checkable
class MessageStore(Protocol):
    def store_message(self, msg: NewMessage) -> None: ...
