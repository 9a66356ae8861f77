"""Tests for configuration."""

from cadence.infrastructure.config import read_env_file, resolve_timezone


class TestReadEnvFile:
    def test_reads_env_values(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("KEY1=value1\nKEY2=value2\n")
        monkeypatch.chdir(tmp_path)

        assert read_env_file(["KEY1", "KEY2"]) == {"KEY1": "value1", "KEY2": "value2"}

    def test_strips_quotes(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text('KEY1="quoted"\nKEY2=\'single\'\n')
        monkeypatch.chdir(tmp_path)

        result = read_env_file(["KEY1", "KEY2"])
        assert result["KEY1"] == "quoted"
        assert result["KEY2"] == "single"

    def test_skips_comments_and_blank_lines(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("# comment\n\nKEY1=value1\n\n")
        monkeypatch.chdir(tmp_path)

        assert read_env_file(["KEY1"]) == {"KEY1": "value1"}

    def test_only_requested_keys(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("KEY1=value1\nKEY2=value2\n")
        monkeypatch.chdir(tmp_path)

        assert "KEY2" not in read_env_file(["KEY1"])

    def test_missing_file_returns_empty(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert read_env_file(["KEY1"]) == {}

    def test_empty_values_skipped(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("KEY1=\n")
        monkeypatch.chdir(tmp_path)

        assert "KEY1" not in read_env_file(["KEY1"])


class TestResolveTimezone:
    def test_valid_name_kept(self):
        assert resolve_timezone("Europe/Berlin") == "Europe/Berlin"

    def test_unknown_name_falls_back_to_utc(self):
        assert resolve_timezone("Mars/Olympus_Mons") == "UTC"

    def test_empty_falls_back_to_utc(self):
        assert resolve_timezone("") == "UTC"

    def test_reads_tz_env(self, monkeypatch):
        monkeypatch.setenv("TZ", "Asia/Tokyo")
        assert resolve_timezone() == "Asia/Tokyo"
