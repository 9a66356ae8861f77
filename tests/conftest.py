import pytest

from cadence.dispatch.types import DeliveryResult
from cadence.infrastructure.database import AppDatabase


@pytest.fixture
def db() -> AppDatabase:
    """Create an in-memory database for testing."""
    app_db = AppDatabase()
    app_db._init_test()
    return app_db


class FakeQueue:
    """Records delivery attempts and wake-ups instead of talking to sessions."""

    def __init__(self, live: bool = False) -> None:
        self.live = live
        self.sent: list[tuple[str, str]] = []
        self.checks: list[str] = []
        self.fail_once: set[str] = set()

    async def send_message(self, chat_jid: str, text: str) -> DeliveryResult:
        self.sent.append((chat_jid, text))
        if chat_jid in self.fail_once:
            self.fail_once.discard(chat_jid)
            raise RuntimeError(f"queue unavailable for {chat_jid}")
        return DeliveryResult.ok() if self.live else DeliveryResult.no_session()

    def enqueue_message_check(self, chat_jid: str) -> None:
        self.checks.append(chat_jid)


@pytest.fixture
def fake_queue() -> FakeQueue:
    return FakeQueue()
