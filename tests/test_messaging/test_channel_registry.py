"""Tests for channel registry."""

import pytest

from cadence.messaging.channel_registry import ChannelRegistry
from cadence.messaging.types import Channel


class FakeChannel:
    def __init__(self, name: str, prefix: str, connected: bool = True, fail_disconnect: bool = False) -> None:
        self.name = name
        self._prefix = prefix
        self._connected = connected
        self._fail_disconnect = fail_disconnect
        self.sent: list[tuple[str, str]] = []

    async def connect(self) -> None:
        self._connected = True

    async def send_message(self, jid: str, text: str) -> None:
        self.sent.append((jid, text))

    def is_connected(self) -> bool:
        return self._connected

    def owns_jid(self, jid: str) -> bool:
        return jid.startswith(self._prefix)

    async def disconnect(self) -> None:
        if self._fail_disconnect:
            raise ConnectionError("already gone")
        self._connected = False

    async def set_typing(self, jid: str, is_typing: bool) -> None:
        pass


class TestChannelRegistry:
    def test_fake_satisfies_protocol(self):
        assert isinstance(FakeChannel("telegram", "tg:"), Channel)

    def test_register_duplicate_name(self):
        registry = ChannelRegistry()
        registry.register(FakeChannel("telegram", "tg:"))
        with pytest.raises(ValueError, match="already registered"):
            registry.register(FakeChannel("telegram", "tg:"))

    def test_find_by_jid(self):
        registry = ChannelRegistry()
        telegram = FakeChannel("telegram", "tg:")
        registry.register(telegram)
        registry.register(FakeChannel("discord", "dc:"))
        assert registry.find_by_jid("tg:100") is telegram
        assert registry.find_by_jid("wa:100") is None

    def test_find_connected_by_jid(self):
        registry = ChannelRegistry()
        registry.register(FakeChannel("telegram", "tg:", connected=False))
        assert registry.find_by_jid("tg:100") is not None
        assert registry.find_connected_by_jid("tg:100") is None

    @pytest.mark.asyncio
    async def test_disconnect_all_continues_after_error(self):
        registry = ChannelRegistry()
        broken = FakeChannel("discord", "dc:", fail_disconnect=True)
        telegram = FakeChannel("telegram", "tg:")
        registry.register(broken)
        registry.register(telegram)

        await registry.disconnect_all()
        assert not telegram.is_connected()
        assert len(registry.get_all()) == 2
