"""Dispatch domain types: live delivery outcome and the queue protocol."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel


class DeliveryResult(BaseModel):
    """Outcome of an attempt to inject text into a running chat session.

    ``no_session`` is the expected case when nothing is running for the chat;
    ``failed`` means a session existed but the hand-off did not go through.
    """

    status: Literal["delivered", "no_session", "failed"]
    reason: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status == "delivered"

    @classmethod
    def ok(cls) -> DeliveryResult:
        return cls(status="delivered")

    @classmethod
    def no_session(cls) -> DeliveryResult:
        return cls(status="no_session")

    @classmethod
    def failed(cls, reason: str) -> DeliveryResult:
        return cls(status="failed", reason=reason)


@runtime_checkable
class DispatchQueue(Protocol):
    async def send_message(self, chat_jid: str, text: str) -> DeliveryResult: ...
    def enqueue_message_check(self, chat_jid: str) -> None: ...
