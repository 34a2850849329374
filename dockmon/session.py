"""
Per-connection session state machine.

A ``Session`` owns everything one WebSocket needs: whether it has
authenticated, which container it follows, and the handle of that
attachment. It knows nothing about the transport beyond a coroutine that
sends one JSON-able dict, so it can be driven directly in tests.

States::

    UNAUTHENTICATED --authenticate--> IDLE --start--> STREAMING
    STREAMING --stop / source ended--> IDLE
    any --close--> CLOSED
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from .auth import TokenAuthority
from .directory import ContainerDirectory
from .errors import AuthError, DockmonError, ProtocolError
from .gateway import LogSourceHandle, StreamGateway
from .models import ClientCommand, LogEvent

logger = logging.getLogger(__name__)

MessageSender = Callable[[Dict[str, Any]], Awaitable[None]]


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    IDLE = "idle"
    STREAMING = "streaming"
    CLOSED = "closed"


def parse_command(raw: str) -> ClientCommand:
    """
    Parse one client message.

    Raises:
        ProtocolError: If the text is not JSON or not a known command
    """
    try:
        return ClientCommand.model_validate_json(raw)
    except ValidationError as e:
        raise ProtocolError() from e


class Session:
    """State of one duplex client connection."""

    def __init__(
        self,
        directory: ContainerDirectory,
        gateway: StreamGateway,
        authority: TokenAuthority,
        send: MessageSender
    ):
        self.directory = directory
        self.gateway = gateway
        self.authority = authority
        self._send = send
        self._send_lock = asyncio.Lock()

        self.authenticated = False
        self.claims: Optional[Dict[str, Any]] = None
        self.container_name: Optional[str] = None
        self.handle: Optional[LogSourceHandle] = None
        self.closed = False

    @property
    def state(self) -> SessionState:
        if self.closed:
            return SessionState.CLOSED
        if not self.authenticated:
            return SessionState.UNAUTHENTICATED
        if self.handle is not None and self.handle.active:
            return SessionState.STREAMING
        return SessionState.IDLE

    @property
    def user(self) -> Optional[str]:
        return self.claims.get("username") if self.claims else None

    async def send(self, event: LogEvent) -> None:
        """Deliver one event; the receive loop and the log pump share this."""
        if self.closed:
            return
        async with self._send_lock:
            await self._send(event.to_message())

    async def handle_message(self, raw: str) -> None:
        """
        Apply one client message.

        Raises:
            AuthError: After reporting a failed authentication; the caller
                closes the connection
        """
        try:
            command = parse_command(raw)
        except ProtocolError as e:
            logger.warning(f"Rejected malformed message: {raw[:200]!r}")
            await self.send(LogEvent.error(e.message))
            return

        if command.action == "authenticate":
            await self.authenticate(command.token)
        elif not self.authenticated:
            await self.send(LogEvent.error("WebSocket not authenticated"))
        elif command.action == "start":
            await self.start(command.container_name)
        else:
            await self.stop()

    async def authenticate(self, token: Optional[str]) -> None:
        try:
            self.claims = self.authority.verify(token)
        except AuthError as e:
            self.authenticated = False
            self.claims = None
            logger.warning(f"WebSocket authentication failed: {e.message}")
            await self.send(LogEvent.error(f"Authentication failed: {e.message}"))
            raise

        self.authenticated = True
        logger.info(f"WebSocket authenticated as '{self.user}'")
        await self.send(LogEvent.authenticated())

    async def start(self, container_name: str) -> None:
        """Follow ``container_name``, replacing any current attachment."""
        await self._release()

        try:
            container = await self.directory.resolve(container_name)
            handle = await self.gateway.attach(container, self.send)
        except DockmonError as e:
            await self.send(LogEvent.error(e.message))
            return

        self.handle = handle
        self.container_name = container_name
        await self.send(LogEvent.connected(container_name))

    async def stop(self) -> None:
        await self._release()
        await self.send(LogEvent.disconnected())

    async def close(self) -> None:
        """Release the attachment when the connection goes away."""
        try:
            await self._release()
        finally:
            self.closed = True

    async def _release(self) -> None:
        handle, self.handle = self.handle, None
        self.container_name = None
        await self.gateway.detach(handle)
