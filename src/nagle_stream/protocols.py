"""Shared protocol definitions for the buffering layer.

DuplexStreamProtocol
    The underlying byte stream a wrapper decorates. Matches
    AsyncioStreamAdapter and test mocks.

FlushErrorHandler
    Callback receiving failures from timer-triggered flushes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .errors import AsyncFlushError


class DuplexStreamProtocol(Protocol):
    """Bidirectional byte stream with partial-write reporting.

    - ``write()`` may accept fewer bytes than offered and returns the count.
    - ``read()`` returns at most *n* bytes (all available when *n* is -1).
    - ``close()`` rejects further reads and writes with the stream's own error.
    """

    async def read(self, n: int = -1) -> bytes:
        """Read up to *n* bytes."""
        ...

    async def write(self, data: bytes) -> int:
        """Write data, returning the number of bytes accepted."""
        ...

    async def close(self) -> None:
        """Close the stream."""
        ...


class FlushErrorHandler(Protocol):
    """Receives background flush failures."""

    def __call__(self, error: AsyncFlushError) -> None:
        """Handle a failed timer-triggered flush."""
        ...
