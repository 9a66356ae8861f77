"""Scheduling domain types and the task store protocol."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel

ScheduleType = Literal["cron", "interval", "once"]
TaskStatus = Literal["active", "paused", "completed"]


class ScheduledTask(BaseModel):
    id: str
    chat_jid: str
    prompt: str
    schedule_type: ScheduleType
    schedule_value: str
    next_run: str | None = None
    last_run: str | None = None
    last_result: str | None = None
    status: TaskStatus = "active"
    failure_count: int = 0
    created_at: str = ""


class TaskRunLog(BaseModel):
    task_id: str
    run_at: str
    duration_ms: int
    status: Literal["success", "failure"]
    result: str | None = None
    error: str | None = None


@runtime_checkable
class TaskStore(Protocol):
    def get_due_tasks(self) -> list[ScheduledTask]: ...
    def get_task_by_id(self, id: str) -> ScheduledTask | None: ...
    def update_task_after_run(self, id: str, next_run: str | None, last_result: str) -> None: ...
    def log_task_run(self, log: TaskRunLog) -> None: ...
    def record_schedule_failure(self, id: str) -> int: ...
    def update_task(self, id: str, **updates: str | None) -> None: ...
