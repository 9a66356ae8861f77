"""File-based IPC write operations."""

from __future__ import annotations

import json
import random
import re
import string
import time
from pathlib import Path

from cadence.infrastructure.config import SESSIONS_DIR
from cadence.infrastructure.logger import logger

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def session_dir_name(chat_jid: str) -> str:
    """Filesystem-safe directory name for a chat JID (``tg:-100123`` -> ``tg_-100123``)."""
    return _UNSAFE.sub("_", chat_jid)


class IpcTransport:
    """Handles file-based IPC communication with running chat sessions.

    Writes message files to the session's input directory.
    Uses atomic write (tmp + rename) to prevent partial reads.
    """

    def __init__(self, base_dir: Path = SESSIONS_DIR) -> None:
        self._base_dir = base_dir

    def input_dir(self, session: str) -> Path:
        return self._base_dir / session / "input"

    def send_message(self, session: str, text: str) -> bool:
        """Write a message file for the session to read."""
        input_dir = self.input_dir(session)
        try:
            input_dir.mkdir(parents=True, exist_ok=True)
            rand = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
            filename = f"{int(time.time() * 1000)}-{rand}.json"
            filepath = input_dir / filename
            temp_path = filepath.with_suffix(".json.tmp")
            temp_path.write_text(json.dumps({"type": "message", "text": text}))
            temp_path.rename(filepath)
            return True
        except OSError as err:
            logger.warning("Failed to send message via IPC", error=str(err), session=session)
            return False

