"""Configuration constants, .env parsing, and scheduler settings."""

from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def read_env_file(keys: list[str]) -> dict[str, str]:
    """Parse .env file and return values for requested keys.

    Does NOT load into os.environ — callers decide what to do with values.
    """
    env_file = Path.cwd() / ".env"
    try:
        content = env_file.read_text()
    except OSError:
        return {}

    result: dict[str, str] = {}
    wanted = set(keys)

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        eq_idx = trimmed.find("=")
        if eq_idx == -1:
            continue
        key = trimmed[:eq_idx].strip()
        if key not in wanted:
            continue
        value = trimmed[eq_idx + 1 :].strip()
        if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
            value = value[1:-1]
        if value:
            result[key] = value

    return result


_ENV_KEYS = [
    "SCHEDULER_POLL_INTERVAL",
    "DELIVERY_TIMEOUT",
    "MAX_SCHEDULE_FAILURES",
    "MAX_CONCURRENT_SESSIONS",
]
_env_config = read_env_file(_ENV_KEYS)


def _setting(key: str, default: str) -> str:
    return os.environ.get(key) or _env_config.get(key, default)


SCHEDULER_POLL_INTERVAL: float = float(_setting("SCHEDULER_POLL_INTERVAL", "60"))  # seconds
DELIVERY_TIMEOUT: float = float(_setting("DELIVERY_TIMEOUT", "10"))  # seconds
MAX_SCHEDULE_FAILURES: int = max(1, int(_setting("MAX_SCHEDULE_FAILURES", "5")))
MAX_CONCURRENT_SESSIONS: int = max(1, int(_setting("MAX_CONCURRENT_SESSIONS", "5")))

# Identity stamped on messages the scheduler stores for a chat
SCHEDULER_SENDER: str = "scheduler"
SCHEDULER_SENDER_NAME: str = "Scheduler"

# Absolute paths
PROJECT_ROOT: Path = Path.cwd()
STORE_DIR: Path = (PROJECT_ROOT / "store").resolve()
DATA_DIR: Path = (PROJECT_ROOT / "data").resolve()
SESSIONS_DIR: Path = DATA_DIR / "sessions"


def _system_timezone() -> str:
    """Best-effort IANA name of the host timezone."""
    tz_file = Path("/etc/timezone")
    try:
        if tz_file.exists():
            return tz_file.read_text().strip()
        # /usr/share/zoneinfo/America/New_York -> America/New_York
        parts = Path("/etc/localtime").resolve().parts
    except OSError:
        return ""
    if "zoneinfo" in parts:
        return "/".join(parts[parts.index("zoneinfo") + 1 :])
    return ""


def resolve_timezone(tz: str | None = None) -> str:
    """Return a valid IANA timezone name, falling back to UTC."""
    tz = tz if tz is not None else (os.environ.get("TZ", "") or _system_timezone())
    if not tz:
        return "UTC"

    try:
        ZoneInfo(tz)
        return tz
    except (ZoneInfoNotFoundError, ValueError):
        return "UTC"


TIMEZONE: str = resolve_timezone()
