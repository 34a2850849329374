"""
Bookkeeping of open WebSocket sessions.

Sessions never share state with each other; this registry only counts them
for the connection limit and the health endpoint, and closes whatever is
left at shutdown.
"""

import logging
from typing import Set

from .session import Session

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks open sessions and enforces the connection limit."""

    def __init__(self, max_connections: int = 100):
        """
        Initialize the session manager.

        Args:
            max_connections: Maximum number of concurrent sessions
        """
        self.max_connections = max_connections
        self._sessions: Set[Session] = set()

    def add_session(self, session: Session) -> None:
        """
        Register a newly accepted session.

        Args:
            session: The session to add
        """
        self._sessions.add(session)
        logger.info(f"Client connected for log monitoring. Total sessions: {len(self._sessions)}")

    def remove_session(self, session: Session) -> None:
        """
        Forget a session after its connection closed.

        Args:
            session: The session to remove
        """
        if session in self._sessions:
            self._sessions.remove(session)
            logger.info(f"Client disconnected. Total sessions: {len(self._sessions)}")

    def get_session_count(self) -> int:
        return len(self._sessions)

    def is_connection_limit_reached(self) -> bool:
        """
        Check if the connection limit has been reached.

        Returns:
            bool: True if no further session may be accepted
        """
        return len(self._sessions) >= self.max_connections

    async def close_all(self) -> None:
        """Release every remaining attachment, used at shutdown."""
        for session in list(self._sessions):
            await session.close()
            self.remove_session(session)
