"""Tests for wire models."""

import pytest
from pydantic import ValidationError

from dockmon.models import ClientCommand, Container, LogEvent

from conftest import raw_container


def test_container_from_runtime_strips_leading_separator():
    raw = raw_container("abc", "web-1")
    raw["Names"] = ["/web-1", "/alias"]
    raw["State"] = "Running"

    container = Container.from_runtime(raw)

    assert container.name == "web-1"
    assert container.state == "running"
    assert container.image == "nginx:latest"
    assert container.created == 1700000000


@pytest.mark.parametrize("event,message", [
    (LogEvent.authenticated(), {"type": "authenticated"}),
    (LogEvent.connected("web-1"), {"type": "connected", "containerName": "web-1"}),
    (LogEvent.disconnected(), {"type": "disconnected"}),
    (LogEvent.error("boom"), {"type": "error", "message": "boom"}),
])
def test_control_messages(event, message):
    assert event.to_message() == message


def test_log_message_shape():
    message = LogEvent.log("hello", "web-1").to_message()

    assert set(message) == {"type", "data", "timestamp", "containerName"}
    assert message["type"] == "log"
    assert message["data"] == "hello"
    assert message["containerName"] == "web-1"
    assert message["timestamp"].endswith("Z")


def test_event_from_message():
    event = LogEvent.from_message({"type": "log", "data": "x", "timestamp": "2024-01-01T00:00:00Z", "containerName": "db"})
    assert event.kind == "log"
    assert event.container_name == "db"
    assert event.timestamp == "2024-01-01T00:00:00Z"


def test_client_command_parsing():
    command = ClientCommand.model_validate_json('{"action": "start", "containerName": "web-1"}')
    assert command.container_name == "web-1"


@pytest.mark.parametrize("raw", [
    '{"action": "start"}',
    '{"action": "restart", "containerName": "web-1"}',
    '{"containerName": "web-1"}',
    'not json',
])
def test_client_command_rejects_bad_input(raw):
    with pytest.raises(ValidationError):
        ClientCommand.model_validate_json(raw)
