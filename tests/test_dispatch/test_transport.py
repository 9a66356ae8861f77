"""Tests for the file-based IPC transport."""

import json

from cadence.dispatch.transport import IpcTransport, session_dir_name


class TestSessionDirName:
    def test_replaces_unsafe_characters(self):
        assert session_dir_name("tg:-100123") == "tg_-100123"
        assert session_dir_name("1203@g.us") == "1203_g.us"


class TestIpcTransport:
    def test_send_message_writes_json(self, tmp_path):
        transport = IpcTransport(tmp_path)
        assert transport.send_message("tg_100", "hello") is True

        files = list(transport.input_dir("tg_100").glob("*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text()) == {"type": "message", "text": "hello"}
        assert list(transport.input_dir("tg_100").glob("*.tmp")) == []

    def test_send_message_returns_false_on_error(self, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory")
        transport = IpcTransport(blocker)
        assert transport.send_message("tg_100", "hello") is False

