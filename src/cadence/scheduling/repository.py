"""Scheduled task persistence and run logging."""

from __future__ import annotations

import sqlite3

from cadence.infrastructure.config import TIMEZONE
from cadence.infrastructure.timeutil import parse_iso, to_iso, utc_now
from cadence.scheduling.next_run import validate_schedule
from cadence.scheduling.types import ScheduledTask, TaskRunLog


class TaskRepository:
    def __init__(self, db: sqlite3.Connection, timezone: str = TIMEZONE) -> None:
        self._db = db
        self._timezone = timezone

    def create_task(self, task: ScheduledTask) -> None:
        """Insert a task, rejecting schedules that can never produce a next run.

        An unset next_run is filled with the schedule's first occurrence.
        """
        first_run = validate_schedule(task.schedule_type, task.schedule_value, utc_now(), self._timezone)
        # Stored timestamps must share one form for the due query to compare them as strings
        next_run = to_iso(parse_iso(task.next_run)) if task.next_run is not None else first_run
        self._db.execute(
            """INSERT INTO scheduled_tasks
               (id, chat_jid, prompt, schedule_type, schedule_value, next_run, status, failure_count, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                task.id, task.chat_jid, task.prompt, task.schedule_type, task.schedule_value,
                next_run, task.status, task.failure_count, task.created_at or to_iso(utc_now()),
            ),
        )
        self._db.commit()

    def get_task_by_id(self, id: str) -> ScheduledTask | None:
        row = self._db.execute("SELECT * FROM scheduled_tasks WHERE id = ?", (id,)).fetchone()
        if not row:
            return None
        return self._row_to_task(row)

    def get_all_tasks(self) -> list[ScheduledTask]:
        rows = self._db.execute("SELECT * FROM scheduled_tasks ORDER BY created_at DESC").fetchall()
        return [self._row_to_task(row) for row in rows]

    def update_task(self, id: str, **updates: str | None) -> None:
        fields: list[str] = []
        values: list[str | None] = []
        for key, value in updates.items():
            if value is not None:
                fields.append(f"{key} = ?")
                values.append(value)
        if not fields:
            return
        values.append(id)
        self._db.execute(f"UPDATE scheduled_tasks SET {', '.join(fields)} WHERE id = ?", values)
        self._db.commit()

    def get_due_tasks(self, now: str | None = None) -> list[ScheduledTask]:
        now = now or to_iso(utc_now())
        rows = self._db.execute(
            """SELECT * FROM scheduled_tasks
               WHERE status = 'active' AND next_run IS NOT NULL AND next_run <= ?
               ORDER BY next_run""",
            (now,),
        ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def update_task_after_run(self, id: str, next_run: str | None, last_result: str) -> None:
        now = to_iso(utc_now())
        self._db.execute(
            """UPDATE scheduled_tasks
               SET next_run = ?, last_run = ?, last_result = ?, failure_count = 0,
                   status = CASE WHEN ? IS NULL THEN 'completed' ELSE status END
               WHERE id = ?""",
            (next_run, now, last_result, next_run, id),
        )
        self._db.commit()

    def record_schedule_failure(self, id: str) -> int:
        """Bump the consecutive schedule failure counter and return its new value."""
        self._db.execute(
            "UPDATE scheduled_tasks SET failure_count = COALESCE(failure_count, 0) + 1 WHERE id = ?",
            (id,),
        )
        self._db.commit()
        row = self._db.execute("SELECT failure_count FROM scheduled_tasks WHERE id = ?", (id,)).fetchone()
        return row[0] if row else 0

    def log_task_run(self, log: TaskRunLog) -> None:
        self._db.execute(
            """INSERT INTO task_run_logs (task_id, run_at, duration_ms, status, result, error)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (log.task_id, log.run_at, log.duration_ms, log.status, log.result, log.error),
        )
        self._db.commit()

    def get_run_logs(self, task_id: str) -> list[TaskRunLog]:
        rows = self._db.execute(
            "SELECT * FROM task_run_logs WHERE task_id = ? ORDER BY id", (task_id,)
        ).fetchall()
        return [
            TaskRunLog(
                task_id=row["task_id"],
                run_at=row["run_at"],
                duration_ms=row["duration_ms"],
                status=row["status"],
                result=row["result"],
                error=row["error"],
            )
            for row in rows
        ]

    def _row_to_task(self, row: sqlite3.Row) -> ScheduledTask:
        return ScheduledTask(
            id=row["id"],
            chat_jid=row["chat_jid"],
            prompt=row["prompt"],
            schedule_type=row["schedule_type"],
            schedule_value=row["schedule_value"],
            next_run=row["next_run"],
            last_run=row["last_run"],
            last_result=row["last_result"],
            status=row["status"],
            failure_count=row["failure_count"] or 0,
            created_at=row["created_at"],
        )
