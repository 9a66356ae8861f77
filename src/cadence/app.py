"""Orchestrator class — composes services, wires subsystems."""

from __future__ import annotations

from typing import Callable, Awaitable

from cadence.dispatch.queue import ChatQueue
from cadence.dispatch.transport import IpcTransport
from cadence.infrastructure.config import SCHEDULER_POLL_INTERVAL, TIMEZONE
from cadence.infrastructure.database import AppDatabase, database
from cadence.infrastructure.logger import logger
from cadence.messaging.channel_registry import ChannelRegistry
from cadence.messaging.types import Channel
from cadence.scheduling.executor import TaskRunner
from cadence.scheduling.scheduler import TaskScheduler


class Orchestrator:
    """Composes all services and manages the application lifecycle.

    ``process_messages_fn`` is the conversation pipeline: the queue calls it
    with a chat JID whenever that chat has stored messages waiting.
    """

    def __init__(
        self,
        db: AppDatabase | None = None,
        transport: IpcTransport | None = None,
        process_messages_fn: Callable[[str], Awaitable[bool]] | None = None,
    ) -> None:
        self._db: AppDatabase = db or database
        self._channel_registry = ChannelRegistry()
        self._queue = ChatQueue(transport=transport or IpcTransport())
        if process_messages_fn:
            self._queue.set_process_messages_fn(process_messages_fn)
        self._scheduler: TaskScheduler | None = None

    @property
    def queue(self) -> ChatQueue:
        return self._queue

    @property
    def channels(self) -> ChannelRegistry:
        return self._channel_registry

    async def register_channel(self, channel: Channel) -> None:
        await channel.connect()
        self._channel_registry.register(channel)
        logger.info("Channel registered", channel=channel.name)

    async def start(self) -> None:
        """Initialize all services and start the scheduler."""
        logger.info("Starting cadence...", timezone=TIMEZONE)

        if not self._db.is_initialized:
            self._db.init()

        runner = TaskRunner(
            task_store=self._db.task_repo,
            message_store=self._db.message_repo,
            queue=self._queue,
        )
        self._scheduler = TaskScheduler(self._db.task_repo, runner, poll_interval=SCHEDULER_POLL_INTERVAL)
        self._scheduler.start()

        logger.info("cadence started successfully")

    async def shutdown(self) -> None:
        """Gracefully shut down all services."""
        logger.info("Shutting down cadence...")

        if self._scheduler:
            self._scheduler.stop()

        await self._queue.shutdown()
        await self._channel_registry.disconnect_all()
        self._db.close()

        logger.info("cadence shut down complete")
