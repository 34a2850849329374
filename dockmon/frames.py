"""
Decoding of the runtime's multiplexed log stream.

Docker prefixes every write on a non-TTY container's combined stdout/stderr
stream with an 8-byte header (stream id, three zero bytes, big-endian
payload length). Lines are recovered with a simple heuristic instead of a
length-prefixed parser:

* split the chunk on newlines,
* drop blank segments and segments of 8 bytes or fewer,
* strip the first 8 bytes of what remains.

Frames split across two chunks are not reassembled, and a header whose
length bytes contain ``0x0a`` splits its own line. Clients depend on the
lines this produces, so the heuristic is kept as is.
"""

from typing import List

from .models import LogEvent

HEADER_SIZE = 8


def split_lines(chunk: bytes) -> List[str]:
    """
    Turn one raw chunk into log lines.

    Args:
        chunk: Bytes as read from the runtime log stream

    Returns:
        List[str]: Lines in stream order with the header bytes removed
    """
    lines = []
    for segment in chunk.split(b"\n"):
        if len(segment) <= HEADER_SIZE or not segment.strip():
            continue
        lines.append(segment[HEADER_SIZE:].decode("utf-8", errors="replace"))
    return lines


class FrameDemuxer:
    """Turns raw chunks for one container into ``log`` events."""

    def __init__(self, container_name: str):
        self.container_name = container_name

    def feed(self, chunk: bytes) -> List[LogEvent]:
        """Decode a chunk, stamping each line with the receipt time."""
        return [LogEvent.log(line, self.container_name) for line in split_lines(chunk)]
