"""
Terminal client for a Dockmon server.

Logs in over HTTP, then follows one container over the WebSocket protocol
and hands every received event to a callback.
"""

import json
import logging
from typing import Any, Callable, Dict, Optional

import httpx
import websockets

from .errors import AuthError, DockmonError
from .models import LogEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[LogEvent], None]


def websocket_url(server: str) -> str:
    """Map ``http(s)://host`` to the server's ``ws(s)://host/ws`` endpoint."""
    base = server.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return f"{base}/ws"


class DockmonClient:
    """Client for the Dockmon HTTP and WebSocket API."""

    def __init__(self, server: str, timeout: float = 10.0):
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.token: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def login(self, username: str, password: str) -> str:
        """
        Obtain a token.

        Raises:
            AuthError: If the server rejects the credentials
        """
        async with httpx.AsyncClient(base_url=self.server, timeout=self.timeout) as client:
            response = await client.post("/api/login", json={"username": username, "password": password})
        if response.status_code == 401:
            raise AuthError(response.json().get("error", "Login failed"))
        response.raise_for_status()
        self.token = response.json()["token"]
        return self.token

    async def list_containers(self, include_all: bool = False) -> Dict[str, Any]:
        """Fetch the filtered container snapshot."""
        async with httpx.AsyncClient(base_url=self.server, timeout=self.timeout) as client:
            response = await client.get(
                "/api/containers",
                params={"all": str(include_all).lower()},
                headers=self._headers()
            )
        if response.status_code == 401:
            raise AuthError(response.json().get("error", "Not authenticated"))
        if response.status_code >= 400:
            raise DockmonError(response.json().get("error", f"HTTP error {response.status_code}"))
        return response.json()

    async def follow(self, container_name: str, on_event: EventCallback) -> None:
        """
        Stream logs of ``container_name`` until the server ends the stream.

        Every event, including errors, is passed to ``on_event``.

        Raises:
            AuthError: If the WebSocket rejects the token
            DockmonError: If the container cannot be attached
        """
        async with websockets.connect(websocket_url(self.server)) as ws:
            await ws.send(json.dumps({"action": "authenticate", "token": self.token}))
            await ws.send(json.dumps({"action": "start", "containerName": container_name}))

            authenticated = False
            connected = False
            try:
                async for raw in ws:
                    event = LogEvent.from_message(json.loads(raw))
                    on_event(event)

                    if event.kind == "authenticated":
                        authenticated = True
                    elif event.kind == "connected":
                        connected = True
                    elif event.kind == "disconnected":
                        return
                    elif event.kind == "error":
                        if not authenticated:
                            raise AuthError(event.message or "Authentication failed")
                        if not connected:
                            raise DockmonError(event.message or f"Could not follow {container_name}")
                        return
            except websockets.exceptions.ConnectionClosedError as e:
                logger.warning(f"Connection to {self.server} closed: {e}")
