"""Per-chat dispatch queue with global concurrency limit using asyncio."""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Callable, Awaitable

from cadence.dispatch.transport import IpcTransport, session_dir_name
from cadence.dispatch.types import DeliveryResult
from cadence.infrastructure.config import MAX_CONCURRENT_SESSIONS
from cadence.infrastructure.logger import logger

MAX_RETRIES = 5
BASE_RETRY_S = 5.0


@dataclass
class ChatState:
    active: bool = False
    pending_messages: bool = False
    session: str | None = None
    retry_count: int = 0


class ChatQueue:
    """Routes text to live chat sessions and starts processing for chats with stored messages.

    At most ``max_concurrent`` chats are processed at once; further chats wait
    until a slot frees up.
    """

    def __init__(self, transport: IpcTransport | None = None, max_concurrent: int = MAX_CONCURRENT_SESSIONS) -> None:
        self._chats: dict[str, ChatState] = {}
        self._active_count = 0
        self._max_concurrent = max_concurrent
        self._waiting_chats: set[str] = set()
        self._process_messages_fn: Callable[[str], Awaitable[bool]] | None = None
        self._shutting_down = False
        self._transport = transport or IpcTransport()

    def _get_chat(self, chat_jid: str) -> ChatState:
        state = self._chats.get(chat_jid)
        if not state:
            state = ChatState()
            self._chats[chat_jid] = state
        return state

    def set_process_messages_fn(self, fn: Callable[[str], Awaitable[bool]]) -> None:
        self._process_messages_fn = fn

    def register_session(self, chat_jid: str, session: str | None = None) -> None:
        """Mark the chat's running session as able to take live messages."""
        state = self._get_chat(chat_jid)
        state.session = session or session_dir_name(chat_jid)

    def enqueue_message_check(self, chat_jid: str) -> None:
        if self._shutting_down:
            return

        state = self._get_chat(chat_jid)

        if state.active:
            state.pending_messages = True
            logger.debug("Session active, message queued", chat_jid=chat_jid)
            return

        if self._active_count >= self._max_concurrent:
            state.pending_messages = True
            self._waiting_chats.add(chat_jid)
            logger.debug("At concurrency limit, message queued", chat_jid=chat_jid, active=self._active_count)
            return

        self._start(chat_jid, "messages")

    async def send_message(self, chat_jid: str, text: str) -> DeliveryResult:
        state = self._get_chat(chat_jid)
        if not state.active or not state.session:
            return DeliveryResult.no_session()
        if self._transport.send_message(state.session, text):
            return DeliveryResult.ok()
        return DeliveryResult.failed("IPC write failed")

    def _start(self, chat_jid: str, reason: str) -> None:
        # Claim the slot before the task is scheduled so a second check cannot start a duplicate
        state = self._get_chat(chat_jid)
        state.active = True
        state.pending_messages = False
        self._active_count += 1
        asyncio.create_task(self._run_for_chat(chat_jid, reason))

    async def _run_for_chat(self, chat_jid: str, reason: str) -> None:
        state = self._get_chat(chat_jid)
        logger.debug("Starting session for chat", chat_jid=chat_jid, reason=reason, active=self._active_count)

        try:
            if self._process_messages_fn:
                success = await self._process_messages_fn(chat_jid)
                if success:
                    state.retry_count = 0
                else:
                    self._schedule_retry(chat_jid, state)
        except Exception:
            logger.exception("Error processing messages for chat", chat_jid=chat_jid)
            self._schedule_retry(chat_jid, state)
        finally:
            state.active = False
            state.session = None
            self._active_count -= 1
            self._drain_chat(chat_jid)

    def _schedule_retry(self, chat_jid: str, state: ChatState) -> None:
        state.retry_count += 1
        if state.retry_count > MAX_RETRIES:
            logger.error("Max retries exceeded, dropping messages", chat_jid=chat_jid, retry_count=state.retry_count)
            state.retry_count = 0
            return

        delay_s = BASE_RETRY_S * math.pow(2, state.retry_count - 1)
        logger.info("Scheduling retry with backoff", chat_jid=chat_jid, retry_count=state.retry_count, delay_s=delay_s)

        async def retry_later() -> None:
            await asyncio.sleep(delay_s)
            if not self._shutting_down:
                self.enqueue_message_check(chat_jid)

        asyncio.create_task(retry_later())

    def _drain_chat(self, chat_jid: str) -> None:
        if self._shutting_down:
            return

        state = self._get_chat(chat_jid)
        if state.pending_messages:
            self._start(chat_jid, "drain")
            return

        self._drain_waiting()

    def _drain_waiting(self) -> None:
        for next_jid in list(self._waiting_chats):
            if self._active_count >= self._max_concurrent:
                break

            self._waiting_chats.discard(next_jid)
            if self._get_chat(next_jid).pending_messages:
                self._start(next_jid, "drain")

    async def shutdown(self) -> None:
        self._shutting_down = True
        active = [jid for jid, state in self._chats.items() if state.active]
        logger.info("ChatQueue shutting down (sessions detached, not killed)", active_count=self._active_count, active_chats=active)
