"""Task scheduler — polls for due tasks and runs them one at a time."""

from __future__ import annotations

from cadence.infrastructure.config import SCHEDULER_POLL_INTERVAL
from cadence.infrastructure.logger import logger
from cadence.infrastructure.poll_loop import PollLoop
from cadence.scheduling.executor import TaskRunner
from cadence.scheduling.types import TaskStore


class TaskScheduler:
    """Owns one scheduler polling loop.

    Instances share no state, so several can coexist (e.g. in tests). Within a
    tick tasks run sequentially in the order the store returns them; an error
    ends the tick early and the remaining tasks, still due, are picked up on
    the next one.
    """

    def __init__(self, task_store: TaskStore, runner: TaskRunner, poll_interval: float = SCHEDULER_POLL_INTERVAL) -> None:
        self._task_store = task_store
        self._runner = runner
        self._loop = PollLoop("Scheduler", poll_interval, self.tick)

    @property
    def is_running(self) -> bool:
        return self._loop.is_running

    def start(self) -> None:
        self._loop.start()

    def stop(self) -> None:
        self._loop.stop()

    async def tick(self) -> None:
        due_tasks = self._task_store.get_due_tasks()
        if due_tasks:
            logger.info("Found due tasks", count=len(due_tasks))

        for task in due_tasks:
            # Re-read: the task may have been paused or removed since the due query
            current = self._task_store.get_task_by_id(task.id)
            if not current or current.status != "active":
                continue
            await self._runner.run(current)
