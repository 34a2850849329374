"""
Client-side log buffer.

Holds the events a client received for the container it follows and offers
the operations of the log view: search, level colouring and export.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from .models import LogEvent


def classify_level(text: str) -> str:
    """
    Guess the level of a log line from its text.

    The checks run in priority order, so a line mentioning both ``error`` and
    ``info`` is an error line.
    """
    lower = text.lower()
    if "err" in lower:
        return "error"
    if "warn" in lower:
        return "warning"
    if "info" in lower:
        return "info"
    if "debug" in lower:
        return "debug"
    return "default"


def format_timestamp(timestamp: str) -> str:
    """Render an ISO-8601 UTC timestamp in local time."""
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class LogBuffer:
    """Append-only store of the events received for one container."""

    def __init__(self, container_name: str = ""):
        self.container_name = container_name
        self._events: List[LogEvent] = []
        self.last_error: Optional[str] = None

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> List[LogEvent]:
        return list(self._events)

    def append(self, event: LogEvent) -> bool:
        """
        Record an event from the server.

        Only ``log`` events are stored; ``error`` events set ``last_error``.

        Returns:
            bool: True if the event was stored
        """
        if event.kind == "error":
            self.last_error = event.message or "Unknown error"
            return False
        if event.kind != "log":
            return False
        self._events.append(event)
        return True

    def clear(self) -> None:
        self._events = []
        self.last_error = None

    def search(self, term: str) -> List[LogEvent]:
        """Events whose text contains ``term``, ignoring case."""
        if not term:
            return self.events
        needle = term.lower()
        return [event for event in self._events if needle in (event.data or "").lower()]

    def export_text(self) -> str:
        """All stored lines as ``[local time] text``, one per line."""
        return "\n".join(
            f"[{format_timestamp(event.timestamp)}] {event.data or event.message or ''}"
            for event in self._events
        )

    def export_filename(self, day: Optional[date] = None) -> str:
        day = day or datetime.now(timezone.utc).date()
        return f"{self.container_name}-logs-{day.isoformat()}.txt"
