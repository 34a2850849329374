"""Pytest configuration and shared fixtures."""

import asyncio
import os
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("AUTH_USERNAME", "admin")
os.environ.setdefault("AUTH_PASSWORD", "s3cret")
os.environ.setdefault("DOCKMON_LOG_LEVEL", "warning")

from dockmon.api import create_app  # noqa: E402
from dockmon.auth import TokenAuthority  # noqa: E402
from dockmon.config import AuthConfig, Config  # noqa: E402
from dockmon.errors import RuntimeUnavailableError, SourceError  # noqa: E402


def frame(payload: bytes, stream: int = 1) -> bytes:
    """One runtime write: 8-byte header, payload and trailing newline."""
    return bytes([stream, 0, 0, 0]) + len(payload).to_bytes(4, "big") + payload + b"\n"


def raw_container(container_id: str, name: str, state: str = "running", image: str = "nginx:latest") -> dict:
    """A ``/containers/json`` entry."""
    return {
        "Id": container_id,
        "Names": [f"/{name}"],
        "Image": image,
        "Status": "Up 2 hours" if state == "running" else "Exited (0) 1 hour ago",
        "State": state,
        "Created": 1700000000,
    }


class FakeLogStream:
    """Follow stream that yields canned chunks, then stays open until closed."""

    def __init__(self, container_id: str, chunks: List[bytes], error: Optional[str] = None, hold_open: bool = True):
        self.container_id = container_id
        self._chunks = chunks
        self._error = error
        self._hold_open = hold_open
        self.closed = False

    async def chunks(self):
        for chunk in self._chunks:
            yield chunk
            await asyncio.sleep(0)
        if self._error:
            raise SourceError(self._error)
        if self._hold_open:
            await asyncio.sleep(3600)

    async def aclose(self) -> None:
        self.closed = True


class FakeRuntime:
    """In-memory stand-in for ``DockerRuntime``."""

    def __init__(
        self,
        containers: List[dict],
        logs: Optional[Dict[str, List[bytes]]] = None,
        errors: Optional[Dict[str, str]] = None,
        hold_open: bool = True,
        available: bool = True
    ):
        self.containers = containers
        self.log_chunks = logs or {}
        self.errors = errors or {}
        self.hold_open = hold_open
        self.available = available
        self.streams: List[FakeLogStream] = []
        self.log_requests: List[dict] = []

    async def ping(self) -> bool:
        return self.available

    async def ensure_available(self) -> None:
        if not self.available:
            raise RuntimeUnavailableError()

    async def list_containers(self, include_all: bool = False) -> List[dict]:
        await self.ensure_available()
        return [dict(c) for c in self.containers if include_all or c["State"] == "running"]

    async def get_container(self, container_id: str) -> dict:
        await self.ensure_available()
        return next(dict(c) for c in self.containers if c["Id"] == container_id)

    async def logs(self, container_id: str, **options) -> FakeLogStream:
        await self.ensure_available()
        self.log_requests.append({"container_id": container_id, **options})
        stream = FakeLogStream(
            container_id,
            self.log_chunks.get(container_id, []),
            error=self.errors.get(container_id),
            hold_open=self.hold_open
        )
        self.streams.append(stream)
        return stream

    async def aclose(self) -> None:
        pass


@pytest.fixture
def containers() -> List[dict]:
    return [
        raw_container("aaa111", "web-1"),
        raw_container("bbb222", "web-worker"),
        raw_container("ccc333", "db"),
        raw_container("ddd444", "old-job", state="exited"),
    ]


@pytest.fixture
def runtime(containers) -> FakeRuntime:
    return FakeRuntime(
        containers,
        logs={
            "aaa111": [frame(b"hello"), frame(b"ERROR: boom")],
            "bbb222": [frame(b"worker ready")],
        }
    )


@pytest.fixture
def app_config(monkeypatch: pytest.MonkeyPatch) -> Config:
    """Configuration built from a clean environment."""
    for name in ("MONITORED_CONTAINERS", "MONITORED_STATES", "DOCKER_SOCKET_PATH", "DOCKER_HOST"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AUTH_USERNAME", "admin")
    monkeypatch.setenv("AUTH_PASSWORD", "s3cret")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    return Config()


@pytest.fixture
def authority() -> TokenAuthority:
    return TokenAuthority(AuthConfig(username="admin", password="s3cret", secret="test-secret", token_ttl=3600))


@pytest.fixture
def token(authority: TokenAuthority) -> str:
    return authority.issue("admin")


@pytest.fixture
def client(app_config: Config, runtime: FakeRuntime) -> TestClient:
    """FastAPI test client over the fake runtime."""
    return TestClient(create_app(app_config, runtime=runtime))


@pytest.fixture
def auth_headers(client: TestClient) -> dict:
    response = client.post("/api/login", json={"username": "admin", "password": "s3cret"})
    return {"Authorization": f"Bearer {response.json()['token']}"}

