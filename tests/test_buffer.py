"""Tests for the client log buffer."""

from datetime import date, datetime, timezone

import pytest

import dockmon.buffer
from dockmon.buffer import LogBuffer, classify_level, format_timestamp
from dockmon.models import LogEvent


@pytest.fixture
def buffer():
    buf = LogBuffer("web-1")
    for line in ["Server started", "GET /health 200", "ERROR database down", "get /users 200"]:
        buf.append(LogEvent.log(line, "web-1"))
    return buf


def test_only_log_events_are_stored(buffer):
    assert not buffer.append(LogEvent.connected("web-1"))
    assert not buffer.append(LogEvent.disconnected())
    assert len(buffer) == 4


def test_error_event_sets_last_error(buffer):
    assert not buffer.append(LogEvent.error("Log stream error: reset"))
    assert buffer.last_error == "Log stream error: reset"
    assert len(buffer) == 4


def test_search_is_case_insensitive(buffer):
    assert [e.data for e in buffer.search("GET")] == ["GET /health 200", "get /users 200"]
    assert buffer.search("") == buffer.events
    assert buffer.search("nothing") == []


def test_buffer_is_append_only_in_order(buffer):
    buffer.append(LogEvent.log("last", "web-1"))
    assert buffer.events[-1].data == "last"
    assert buffer.events[0].data == "Server started"


def test_clear_resets_lines_and_error(buffer):
    buffer.append(LogEvent.error("oops"))
    buffer.clear()
    assert len(buffer) == 0
    assert buffer.last_error is None


def test_export_text(buffer):
    lines = buffer.export_text().split("\n")
    assert len(lines) == 4
    assert lines[2].startswith("[")
    assert lines[2].endswith("] ERROR database down")


def test_export_filename(buffer):
    assert buffer.export_filename(date(2024, 5, 1)) == "web-1-logs-2024-05-01.txt"


@pytest.mark.parametrize("text,level", [
    ("ERROR failed", "error"),
    ("stderr output", "error"),
    ("WARNING disk", "warning"),
    ("info: ready", "info"),
    ("DEBUG cache hit", "debug"),
    ("listening on :80", "default"),
    ("info: 0 errors", "error"),
])
def test_classify_level(text, level):
    assert classify_level(text) == level


def test_format_timestamp_falls_back_to_raw():
    assert format_timestamp("not a time") == "not a time"
    assert len(format_timestamp("2024-05-01T10:00:00.000Z")) == 19


class LateEveningUTC(datetime):
    """Clock pinned to 23:30 UTC, already the next day east of Greenwich."""

    @classmethod
    def now(cls, tz=None):
        moment = datetime(2024, 5, 1, 23, 30, tzinfo=timezone.utc)
        return moment.astimezone(tz) if tz else moment.replace(tzinfo=None)


def test_export_filename_uses_utc_date(buffer, monkeypatch):
    monkeypatch.setattr(dockmon.buffer, "datetime", LateEveningUTC)
    assert buffer.export_filename() == "web-1-logs-2024-05-01.txt"
