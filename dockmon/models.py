"""
Pydantic models for the Dockmon service.

This module defines the wire messages exchanged over the WebSocket, the
container snapshot returned by the runtime, and the REST request/response
bodies.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_timestamp() -> str:
    """Current wall-clock time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Container(BaseModel):
    """Read-only snapshot of one container as reported by the runtime."""

    id: str = Field(..., description="Opaque runtime identifier")
    name: str = Field(..., description="First alias with the leading '/' stripped")
    image: str = Field(default="", description="Image the container runs")
    status: str = Field(default="", description="Human readable status, e.g. 'Up 3 hours'")
    state: str = Field(default="", description="Lower-cased state, e.g. running, exited")
    created: int = Field(default=0, description="Creation time in epoch seconds")

    @classmethod
    def from_runtime(cls, raw: Dict[str, Any]) -> "Container":
        """Build a container from a ``/containers/json`` entry."""
        names = raw.get("Names") or [""]
        return cls(
            id=raw.get("Id", ""),
            name=names[0].replace("/", "", 1),
            image=raw.get("Image", ""),
            status=raw.get("Status", ""),
            state=(raw.get("State") or "").lower(),
            created=raw.get("Created", 0)
        )


EventKind = Literal["log", "error", "connected", "disconnected", "authenticated"]


class LogEvent(BaseModel):
    """One message sent from the server to a WebSocket client."""

    kind: EventKind
    data: Optional[str] = None
    message: Optional[str] = None
    timestamp: str = Field(default_factory=utc_timestamp)
    container_name: Optional[str] = None

    @classmethod
    def log(cls, data: str, container_name: str) -> "LogEvent":
        return cls(kind="log", data=data, container_name=container_name)

    @classmethod
    def error(cls, message: str) -> "LogEvent":
        return cls(kind="error", message=message)

    @classmethod
    def connected(cls, container_name: str) -> "LogEvent":
        return cls(kind="connected", container_name=container_name)

    @classmethod
    def disconnected(cls) -> "LogEvent":
        return cls(kind="disconnected")

    @classmethod
    def authenticated(cls) -> "LogEvent":
        return cls(kind="authenticated")

    @classmethod
    def from_message(cls, payload: Dict[str, Any]) -> "LogEvent":
        """Rebuild an event from its wire form."""
        return cls(
            kind=payload["type"],
            data=payload.get("data"),
            message=payload.get("message"),
            timestamp=payload.get("timestamp") or utc_timestamp(),
            container_name=payload.get("containerName")
        )

    def to_message(self) -> Dict[str, Any]:
        """Wire form of the event."""
        if self.kind == "log":
            return {
                "type": "log",
                "data": self.data,
                "timestamp": self.timestamp,
                "containerName": self.container_name
            }
        if self.kind == "error":
            return {"type": "error", "message": self.message}
        if self.kind == "connected":
            return {"type": "connected", "containerName": self.container_name}
        return {"type": self.kind}


class ClientCommand(BaseModel):
    """A message sent by a WebSocket client."""

    model_config = ConfigDict(populate_by_name=True)

    action: Literal["authenticate", "start", "stop"]
    token: Optional[str] = None
    container_name: Optional[str] = Field(default=None, alias="containerName")

    @model_validator(mode="after")
    def _check_arguments(self) -> "ClientCommand":
        if self.action == "start" and not self.container_name:
            raise ValueError("start requires containerName")
        return self


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    username: str
    password: str


class LoginResponse(BaseModel):
    """Token issued after a successful login."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    user: str
    expires_in: int = Field(..., alias="expiresIn")


class ContainerListResponse(BaseModel):
    """Filtered container snapshot plus the filters that produced it."""

    model_config = ConfigDict(populate_by_name=True)

    containers: List[Container] = Field(..., description="Containers that passed the filters")
    filter: str = Field(..., description="Name allow-list, or 'all'")
    state_filter: str = Field(..., alias="stateFilter", description="State allow-list, or 'all'")
    total: int = Field(..., description="Containers reported by the runtime")
    filtered: int = Field(..., description="Containers returned after filtering")


class HealthResponse(BaseModel):
    """Model for health check responses."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="Health status of the service")
    timestamp: str = Field(..., description="ISO format timestamp of the health check")
    docker: str = Field(..., description="connected or unavailable")
    active_sessions: int = Field(..., alias="activeSessions", description="Open WebSocket sessions")
