"""
Configuration management for the Dockmon service.

All settings are read once from environment variables at import time and
grouped into small dataclasses. Nothing here is reloaded while the process
runs.
"""

import logging
import os
import secrets
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_UNIX_SOCKET = "/var/run/docker.sock"
DEFAULT_WINDOWS_HOST = "tcp://localhost:2375"


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "info"
    access_log: bool = False


@dataclass
class DockerConfig:
    """Where and how to reach the container runtime."""

    url: str = f"unix://{DEFAULT_UNIX_SOCKET}"
    timeout: float = 10.0

    @property
    def socket_path(self) -> Optional[str]:
        """Unix socket path, or None for TCP endpoints."""
        if self.url.startswith("unix://"):
            return self.url[len("unix://"):]
        return None

    @property
    def base_url(self) -> str:
        """HTTP base URL to use for API requests."""
        if self.socket_path is not None:
            return "http://docker"
        return self.url.replace("tcp://", "http://", 1)


@dataclass(frozen=True)
class FilterConfig:
    """Name and state allow-lists; None means match everything."""

    names: Optional[Tuple[str, ...]] = None
    states: Optional[Tuple[str, ...]] = None

    def describe_names(self) -> str:
        return ", ".join(self.names) if self.names else "all"

    def describe_states(self) -> str:
        return ", ".join(self.states) if self.states else "all"


@dataclass
class AuthConfig:
    """Credentials and token signing settings."""

    username: str = "admin"
    password: str = "admin"
    secret: str = ""
    token_ttl: int = 86400

    def __post_init__(self):
        if not self.secret:
            self.secret = secrets.token_urlsafe(32)


@dataclass
class StreamConfig:
    """Configuration for log streaming over WebSocket."""

    tail: int = 100
    max_connections: int = 100
    reconnect_delay: int = 3000  # milliseconds


def parse_allow_list(raw: Optional[str], lower: bool = False) -> Optional[Tuple[str, ...]]:
    """
    Parse a comma separated allow-list.

    An unset value, an empty string or the word ``all`` mean "no filter" and
    yield None.
    """
    if raw is None or raw.strip() == "" or raw.strip().lower() == "all":
        return None
    entries = [entry.strip() for entry in raw.split(",")]
    entries = [entry.lower() if lower else entry for entry in entries if entry]
    return tuple(entries) or None


def default_docker_url() -> str:
    """Resolve the runtime endpoint from the environment or the platform default."""
    socket_path = os.getenv("DOCKER_SOCKET_PATH")
    if socket_path:
        return f"unix://{socket_path}"

    docker_host = os.getenv("DOCKER_HOST")
    if docker_host:
        return docker_host

    if sys.platform == "win32":
        return DEFAULT_WINDOWS_HOST
    return f"unix://{DEFAULT_UNIX_SOCKET}"


class Config:
    """Main configuration class for the Dockmon service."""

    def __init__(self):
        self.server = ServerConfig(
            host=os.getenv("DOCKMON_HOST", "0.0.0.0"),
            port=int(os.getenv("DOCKMON_PORT", os.getenv("PORT", "3001"))),
            log_level=os.getenv("DOCKMON_LOG_LEVEL", "info").lower(),
            access_log=os.getenv("DOCKMON_ACCESS_LOG", "false").lower() == "true"
        )

        self.docker = DockerConfig(
            url=default_docker_url(),
            timeout=float(os.getenv("DOCKMON_DOCKER_TIMEOUT", "10"))
        )

        self.filters = FilterConfig(
            names=parse_allow_list(os.getenv("MONITORED_CONTAINERS")),
            states=parse_allow_list(os.getenv("MONITORED_STATES"), lower=True)
        )

        self.auth = self._load_auth_config()

        self.stream = StreamConfig(
            tail=int(os.getenv("DOCKMON_LOG_TAIL", "100")),
            max_connections=int(os.getenv("DOCKMON_MAX_WS_CONNECTIONS", "100")),
            reconnect_delay=int(os.getenv("DOCKMON_RECONNECT_DELAY", "3000"))
        )

    def _load_auth_config(self) -> AuthConfig:
        """Load credentials, warning when insecure defaults are in use."""
        username = os.getenv("AUTH_USERNAME")
        password = os.getenv("AUTH_PASSWORD")
        secret = os.getenv("JWT_SECRET", "")

        if not username or not password:
            logger.warning("AUTH_USERNAME/AUTH_PASSWORD not set, using default credentials")
        if not secret:
            logger.warning("JWT_SECRET not set, tokens will not survive a restart")

        return AuthConfig(
            username=username or "admin",
            password=password or "admin",
            secret=secret,
            token_ttl=int(os.getenv("JWT_EXPIRES_IN", "86400"))
        )


# Global configuration instance
config = Config()
