"""
Adapters from asyncio streams to the duplex stream interface.

asyncio splits a connection into a StreamReader and a StreamWriter, and
StreamWriter.write() buffers without reporting a count. The wrapper needs a
single object whose ``write()`` awaits delivery and reports accepted bytes.
This module bridges the two.
"""

from __future__ import annotations

import asyncio


class AsyncioStreamAdapter:
    """
    Duplex stream over an asyncio reader/writer pair.

    - ``write()`` waits for drain(), then hands data to the transport.
      The transport keeps everything it is given, so the full length is
      reported.
    - ``read(n)`` delegates to the reader.
    - ``close()`` closes the writer and waits for the transport to finish.

    After close, reads and writes raise ``ConnectionError``.
    """

    __slots__ = ("_reader", "_writer", "_closed")

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Initialize the adapter over an open connection."""
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, n: int = -1) -> bytes:
        """Read up to *n* bytes from the connection."""
        if self._closed:
            raise ConnectionError("Stream is closed")
        return await self._reader.read(n)

    async def write(self, data: bytes) -> int:
        """Wait until the transport has room, then hand it the data."""
        if self._closed:
            raise ConnectionError("Stream is closed")

        # Nothing reaches the transport before drain() returns. A write
        # cancelled while waiting has sent nothing.
        await self._writer.drain()
        self._writer.write(data)
        return len(data)

    async def close(self) -> None:
        """Close the connection."""
        if self._closed:
            raise ConnectionError("Stream is closed")
        self._closed = True
        self._writer.close()
        await self._writer.wait_closed()
