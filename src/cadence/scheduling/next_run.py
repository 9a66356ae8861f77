"""Next-run computation for cron, interval and one-shot schedules."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from croniter import croniter

from cadence.infrastructure.timeutil import to_iso


def _cron_next(schedule_value: str, now: datetime, timezone: str) -> datetime:
    # Timezone errors are configuration problems, not bad expressions
    local_now = now.astimezone(ZoneInfo(timezone))
    try:
        return croniter(schedule_value, local_now).get_next(datetime)
    except (ValueError, KeyError):
        raise ValueError(f"Invalid cron expression: {schedule_value}")


def _interval_next(schedule_value: str, now: datetime) -> datetime:
    try:
        ms = int(schedule_value)
        if ms <= 0:
            raise ValueError()
        return now + timedelta(milliseconds=ms)
    except (ValueError, TypeError, OverflowError):
        raise ValueError(f"Invalid interval: {schedule_value}")


def _once_at(schedule_value: str, timezone: str) -> datetime:
    try:
        scheduled = datetime.fromisoformat(schedule_value)
    except ValueError:
        raise ValueError(f"Invalid timestamp: {schedule_value}")
    if scheduled.tzinfo is None:
        scheduled = scheduled.replace(tzinfo=ZoneInfo(timezone))
    return scheduled


def compute_next_run(schedule_type: str, schedule_value: str, now: datetime, timezone: str) -> str | None:
    """Next fire time after a run at ``now``, or None when the task has no further occurrence.

    Cron expressions are evaluated in ``timezone`` and always land strictly after ``now``.
    Intervals are whole milliseconds added to ``now``. One-shot tasks never recur.
    """
    if schedule_type == "cron":
        return to_iso(_cron_next(schedule_value, now, timezone))
    if schedule_type == "interval":
        return to_iso(_interval_next(schedule_value, now))
    if schedule_type == "once":
        return None
    raise ValueError(f"Unknown schedule type: {schedule_type}")


def validate_schedule(schedule_type: str, schedule_value: str, now: datetime, timezone: str) -> str:
    """Validate a schedule at creation time and return its first next_run."""
    if schedule_type == "cron":
        return to_iso(_cron_next(schedule_value, now, timezone))
    if schedule_type == "interval":
        return to_iso(_interval_next(schedule_value, now))
    if schedule_type == "once":
        return to_iso(_once_at(schedule_value, timezone))
    raise ValueError(f"Unknown schedule type: {schedule_type}")
