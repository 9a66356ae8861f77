"""Tests for timestamp helpers."""

from datetime import datetime, timedelta, timezone

from cadence.infrastructure.timeutil import parse_iso, to_iso


class TestToIso:
    def test_utc_millisecond_form(self):
        assert to_iso(datetime(2024, 1, 1, 9, 0, 0, 123456, tzinfo=timezone.utc)) == "2024-01-01T09:00:00.123Z"

    def test_converts_offsets_to_utc(self):
        dt = datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso(dt) == "2024-01-01T07:00:00.000Z"

    def test_naive_treated_as_utc(self):
        assert to_iso(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"


class TestParseIso:
    def test_z_suffix(self):
        assert parse_iso("2024-01-01T07:00:00.000Z") == datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)

    def test_naive_as_utc(self):
        assert parse_iso("2024-01-01T07:00:00").tzinfo is not None
