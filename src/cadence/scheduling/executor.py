"""Run executor — injects one due task into its chat and records the outcome."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime
from typing import Callable

from cadence.dispatch.types import DeliveryResult, DispatchQueue
from cadence.infrastructure.config import (
    DELIVERY_TIMEOUT,
    MAX_SCHEDULE_FAILURES,
    SCHEDULER_SENDER,
    SCHEDULER_SENDER_NAME,
    TIMEZONE,
)
from cadence.infrastructure.logger import logger
from cadence.infrastructure.timeutil import to_iso, utc_now
from cadence.messaging.types import MessageStore, NewMessage
from cadence.scheduling.next_run import compute_next_run
from cadence.scheduling.types import ScheduledTask, TaskRunLog, TaskStore

RESULT_INJECTED = "injected"


def build_task_prompt(task: ScheduledTask) -> str:
    return f"[SCHEDULED TASK - id: {task.id}]\n\n{task.prompt}"


class TaskRunner:
    """Delivers a task's prompt live when a session is running, otherwise stores it and wakes the chat.

    ``delivery_timeout`` bounds the live attempt only for queues whose ``send_message``
    yields to the event loop. ``ChatQueue`` writes its IPC file without awaiting, so
    the write always finishes and a timeout can never leave both a live message and
    a stored copy behind.
    """

    def __init__(
        self,
        task_store: TaskStore,
        message_store: MessageStore,
        queue: DispatchQueue,
        timezone: str = TIMEZONE,
        delivery_timeout: float = DELIVERY_TIMEOUT,
        max_schedule_failures: int = MAX_SCHEDULE_FAILURES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._message_store = message_store
        self._queue = queue
        self._timezone = timezone
        self._delivery_timeout = delivery_timeout
        self._max_schedule_failures = max_schedule_failures
        self._clock = clock

    async def run(self, task: ScheduledTask) -> None:
        start_time = time.monotonic()
        logger.info("Running scheduled task", task_id=task.id, chat_jid=task.chat_jid)

        text = build_task_prompt(task)

        try:
            delivery = await self._deliver_live(task.chat_jid, text)
            if not delivery.delivered:
                self._store_fallback(task, text)
                self._queue.enqueue_message_check(task.chat_jid)
            logger.info(
                "Scheduled task injected",
                task_id=task.id,
                delivery=delivery.status,
                reason=delivery.reason,
            )
        except Exception as err:
            self._task_store.log_task_run(TaskRunLog(
                task_id=task.id,
                run_at=to_iso(self._clock()),
                duration_ms=int((time.monotonic() - start_time) * 1000),
                status="failure",
                error=str(err),
            ))
            raise

        self._task_store.log_task_run(TaskRunLog(
            task_id=task.id,
            run_at=to_iso(self._clock()),
            duration_ms=int((time.monotonic() - start_time) * 1000),
            status="success",
            result=RESULT_INJECTED,
        ))

        next_run = self._next_run(task)
        self._task_store.update_task_after_run(task.id, next_run, RESULT_INJECTED)

    async def _deliver_live(self, chat_jid: str, text: str) -> DeliveryResult:
        try:
            return await asyncio.wait_for(self._queue.send_message(chat_jid, text), self._delivery_timeout)
        except asyncio.TimeoutError:
            logger.warning("Live delivery timed out", chat_jid=chat_jid, timeout_s=self._delivery_timeout)
            return DeliveryResult.failed("timeout")

    def _store_fallback(self, task: ScheduledTask, text: str) -> None:
        now = self._clock()
        self._message_store.store_message(NewMessage(
            id=f"task-{task.id}-{int(now.timestamp() * 1000)}",
            chat_jid=task.chat_jid,
            sender=SCHEDULER_SENDER,
            sender_name=SCHEDULER_SENDER_NAME,
            content=text,
            timestamp=to_iso(now),
            is_from_me=False,
        ))

    def _next_run(self, task: ScheduledTask) -> str | None:
        try:
            return compute_next_run(task.schedule_type, task.schedule_value, self._clock(), self._timezone)
        except ValueError:
            failures = self._task_store.record_schedule_failure(task.id)
            if failures >= self._max_schedule_failures:
                self._task_store.update_task(task.id, status="paused")
                logger.error("Pausing task after repeated schedule failures", task_id=task.id, failures=failures)
            raise
