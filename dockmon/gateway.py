"""
Binding of a session to a runtime log source.

``attach`` opens the container's follow stream and starts one task that
decodes chunks and forwards the resulting events in order. ``detach``
cancels that task, waits for it to finish and closes the stream, so nothing
from the old attachment can be sent after it returns.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .errors import SourceError
from .frames import FrameDemuxer
from .models import Container, LogEvent
from .runtime import DockerRuntime, LogStream

logger = logging.getLogger(__name__)

EventSender = Callable[[LogEvent], Awaitable[None]]


class LogSourceHandle:
    """A live attachment to one container's log stream."""

    def __init__(self, container: Container, stream: LogStream):
        self.container = container
        self.stream = stream
        self.task: Optional[asyncio.Task] = None
        self.detached = False

    @property
    def active(self) -> bool:
        """True while the pump task is still forwarding events."""
        return not self.detached and self.task is not None and not self.task.done()


class StreamGateway:
    """Attaches sessions to container log streams."""

    def __init__(self, runtime: DockerRuntime, tail: int = 100):
        self.runtime = runtime
        self.tail = tail

    async def attach(self, container: Container, send: EventSender) -> LogSourceHandle:
        """
        Open the log stream of ``container`` and start forwarding it.

        The stream is opened before returning, so lookup and connection
        failures are raised here rather than inside the pump.

        Args:
            container: Container to follow
            send: Coroutine function delivering one event to the client

        Returns:
            LogSourceHandle: Handle to pass to ``detach``
        """
        stream = await self.runtime.logs(
            container.id,
            follow=True,
            stdout=True,
            stderr=True,
            timestamps=True,
            tail=self.tail
        )
        handle = LogSourceHandle(container, stream)
        handle.task = asyncio.create_task(self._pump(handle, send), name=f"logs:{container.name}")
        logger.info(f"Attached to logs of {container.name} ({container.id[:12]})")
        return handle

    async def _pump(self, handle: LogSourceHandle, send: EventSender) -> None:
        try:
            await self._forward(handle, send)
        except Exception as e:
            logger.error(f"Forwarding logs of {handle.container.name} failed: {e}")
        finally:
            await handle.stream.aclose()

    async def _forward(self, handle: LogSourceHandle, send: EventSender) -> None:
        demuxer = FrameDemuxer(handle.container.name)
        try:
            async for chunk in handle.stream.chunks():
                for event in demuxer.feed(chunk):
                    await send(event)
        except SourceError as e:
            logger.error(f"Log stream error for {handle.container.name}: {e.message}")
            await send(LogEvent.error(f"Log stream error: {e.message}"))
            return

        logger.info(f"Log stream of {handle.container.name} ended")
        await send(LogEvent.disconnected())

    async def detach(self, handle: Optional[LogSourceHandle]) -> None:
        """Stop forwarding and release the stream. Safe to call repeatedly or with None."""
        if handle is None or handle.detached:
            return
        handle.detached = True

        if handle.task is not None:
            if not handle.task.done():
                handle.task.cancel()
            await asyncio.wait([handle.task])

        await handle.stream.aclose()
        logger.info(f"Detached from logs of {handle.container.name}")
