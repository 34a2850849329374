"""
Client for the Docker Engine API.

Talks HTTP to the daemon over its unix socket (or a TCP endpoint) with
httpx. Only the four calls the service needs are exposed: ping, list,
inspect and a streamed logs request that keeps the multiplexing headers in
the returned bytes.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from .config import DockerConfig
from .errors import DockmonError, NotFoundError, RuntimeUnavailableError, SourceError

logger = logging.getLogger(__name__)


class LogStream:
    """An open follow stream of raw log bytes for one container."""

    def __init__(self, container_id: str, response: httpx.Response):
        self.container_id = container_id
        self._response = response
        self._closed = False

    async def chunks(self) -> AsyncIterator[bytes]:
        """
        Yield raw chunks as the runtime sends them.

        Raises:
            SourceError: If the stream breaks while reading
        """
        try:
            async for chunk in self._response.aiter_raw():
                yield chunk
        except httpx.HTTPError as e:
            raise SourceError(str(e) or e.__class__.__name__) from e

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Close the underlying HTTP response; safe to call twice."""
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()


class DockerRuntime:
    """Async Docker Engine API client."""

    def __init__(self, docker_config: DockerConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Create the client.

        Args:
            docker_config: Endpoint and timeout settings
            transport: Optional transport override, used by tests
        """
        self.config = docker_config
        if transport is None and docker_config.socket_path is not None:
            transport = httpx.AsyncHTTPTransport(uds=docker_config.socket_path)

        self._client = httpx.AsyncClient(
            base_url=docker_config.base_url,
            transport=transport,
            timeout=httpx.Timeout(docker_config.timeout)
        )
        self.available = False

    async def ping(self) -> bool:
        """Check that the daemon answers and remember the result."""
        try:
            response = await self._client.get("/_ping")
            self.available = response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Docker connection failed: {e}")
            self.available = False

        if self.available:
            logger.info("Docker connection established successfully")
        return self.available

    async def ensure_available(self) -> None:
        """
        Re-check the daemon if it was unreachable.

        Raises:
            RuntimeUnavailableError: If the daemon still does not answer
        """
        if not self.available and not await self.ping():
            raise RuntimeUnavailableError()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        await self.ensure_available()
        try:
            response = await self._client.get(path, params=params)
        except httpx.TransportError as e:
            self.available = False
            logger.error(f"Docker request {path} failed: {e}")
            raise RuntimeUnavailableError() from e

        if response.status_code == 404:
            raise NotFoundError(f"Docker object not found: {path}")
        if response.status_code >= 400:
            logger.error(f"Docker request {path} returned {response.status_code}: {response.text}")
            raise DockmonError(f"Docker API request failed with status {response.status_code}")
        return response.json()

    async def list_containers(self, include_all: bool = False) -> List[Dict[str, Any]]:
        """List containers in runtime order; running ones only unless ``include_all``."""
        return await self._get_json("/containers/json", params={"all": "1" if include_all else "0"})

    async def get_container(self, container_id: str) -> Dict[str, Any]:
        """Inspect a single container."""
        return await self._get_json(f"/containers/{container_id}/json")

    async def logs(
        self,
        container_id: str,
        follow: bool = True,
        stdout: bool = True,
        stderr: bool = True,
        timestamps: bool = True,
        tail: int = 100
    ) -> LogStream:
        """
        Open a streamed logs request.

        The response is returned unread; the caller iterates ``chunks()`` and
        must ``aclose()`` the stream.

        Raises:
            NotFoundError: If the container does not exist
            RuntimeUnavailableError: If the daemon cannot be reached
        """
        await self.ensure_available()
        params = {
            "follow": int(follow),
            "stdout": int(stdout),
            "stderr": int(stderr),
            "timestamps": int(timestamps),
            "tail": str(tail)
        }
        request = self._client.build_request(
            "GET",
            f"/containers/{container_id}/logs",
            params=params,
            timeout=httpx.Timeout(self.config.timeout, read=None)
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.TransportError as e:
            self.available = False
            logger.error(f"Opening log stream for {container_id} failed: {e}")
            raise RuntimeUnavailableError() from e

        if response.status_code != 200:
            await response.aread()
            await response.aclose()
            if response.status_code == 404:
                raise NotFoundError(f"Container '{container_id}' not found")
            raise SourceError(f"Docker returned {response.status_code}: {response.text}")

        return LogStream(container_id, response)

    async def aclose(self) -> None:
        await self._client.aclose()
