"""
Container directory: which containers can be monitored.

Listing applies the configured name and state allow-lists. Resolving a name
for streaming ignores them and requires an exact match.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import FilterConfig
from .errors import NotFoundError
from .models import Container
from .runtime import DockerRuntime

logger = logging.getLogger(__name__)


def name_matches(name: str, allow: Optional[Sequence[str]]) -> bool:
    """Symmetric substring match of a container name against an allow-list."""
    if not allow:
        return True
    return any(entry in name or name in entry for entry in allow)


def state_matches(state: str, allow: Optional[Sequence[str]]) -> bool:
    """Exact match of the lower-cased state against an allow-list."""
    if not allow:
        return True
    return state.lower() in allow


@dataclass
class ContainerSnapshot:
    """Result of one filtered directory query."""

    containers: List[Container]
    filters: FilterConfig
    total: int

    @property
    def filtered(self) -> int:
        return len(self.containers)


class ContainerDirectory:
    """Read-only view of the runtime's containers."""

    def __init__(self, runtime: DockerRuntime, filters: FilterConfig):
        self.runtime = runtime
        self.filters = filters

    def apply_filters(self, containers: List[Container]) -> List[Container]:
        return [
            container for container in containers
            if name_matches(container.name, self.filters.names)
            and state_matches(container.state, self.filters.states)
        ]

    async def snapshot(self, include_all: bool = False) -> ContainerSnapshot:
        """
        Query the runtime and filter the result.

        Args:
            include_all: Include stopped containers as well as running ones

        Returns:
            ContainerSnapshot: Filtered containers and the unfiltered total
        """
        raw = await self.runtime.list_containers(include_all=include_all)
        containers = [Container.from_runtime(item) for item in raw]
        return ContainerSnapshot(
            containers=self.apply_filters(containers),
            filters=self.filters,
            total=len(containers)
        )

    async def list(self, include_all: bool = False) -> List[Container]:
        """Filtered containers only."""
        return (await self.snapshot(include_all=include_all)).containers

    async def resolve(self, name: str) -> Container:
        """
        Find the first running container whose name equals ``name``.

        Raises:
            NotFoundError: If no container has that exact name
        """
        raw = await self.runtime.list_containers()
        for item in raw:
            container = Container.from_runtime(item)
            if container.name == name:
                return container
        logger.info(f"Container lookup failed for '{name}'")
        raise NotFoundError(f"Container '{name}' not found")
