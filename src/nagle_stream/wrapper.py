"""
Write-coalescing stream wrapper.

Small writes are accumulated in memory and sent to the underlying stream in
larger chunks, in the spirit of Nagle's algorithm. A flush happens when:

1. The buffer reaches the configured threshold (inside the triggering write).
2. The flush timer fires ``flush_timeout_secs`` after the last buffered write.
3. The caller flushes explicitly or closes the wrapper.

Concurrency
-----------

One lock serializes every mutation of the buffer, the closed flag and the
timer. A single background task per wrapper owns timer-triggered flushes::

    write() ----+                      +--> stream.write()
    flush() ----+--> lock --> buffer --+
    close() ----+                      +--> stream.close()
                         ^
    _flush_loop() -------+  (on timer fire)

Reads bypass the lock and go straight to the underlying stream.

Ordering
--------

Bytes reach the underlying stream in the order ``write()`` accepted them.
A partial underlying write keeps the unsent tail at the front of the buffer,
so later bytes can never overtake it.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from types import TracebackType

from . import metrics
from .config import NagleConfig
from .errors import AsyncFlushError, ClosedError, NagleError
from .protocols import DuplexStreamProtocol, FlushErrorHandler
from .timer import FlushTimer

logger = logging.getLogger(__name__)


class FlushReason(StrEnum):
    """What triggered a flush. Used as the metrics label."""

    SIZE = "size"
    TIMER = "timer"
    EXPLICIT = "explicit"
    CLOSE = "close"


class NagleWrapper:
    """
    Buffers writes to a duplex stream and flushes them in batches.

    Must be created inside a running event loop: construction starts the
    background flush task.

    Usage:
        wrapper = NagleWrapper(stream, NagleConfig(buffer_size=1024))
        await wrapper.write(b"small")
        await wrapper.write(b"writes")
        await wrapper.close()
    """

    __slots__ = (
        "_stream",
        "_config",
        "_buffer",
        "_lock",
        "_timer",
        "_closed",
        "_on_flush_error",
        "_flush_task",
    )

    def __init__(
        self,
        stream: DuplexStreamProtocol,
        config: NagleConfig | None = None,
        *,
        on_flush_error: FlushErrorHandler | None = None,
    ) -> None:
        """
        Wrap a stream and start the background flush task.

        Args:
            stream: Underlying stream. Owned by the wrapper from now on.
            config: Threshold and timeout. Defaults to ``NagleConfig()``.
            on_flush_error: Called with failures of timer-triggered flushes.
        """
        self._stream = stream
        self._config = config if config is not None else NagleConfig()
        self._buffer = bytearray()
        self._lock = asyncio.Lock()
        self._timer = FlushTimer()
        self._closed = False
        self._on_flush_error = on_flush_error
        self._flush_task: asyncio.Task[None] = asyncio.create_task(self._flush_loop())

        logger.debug(
            "Wrapper created: buffer_size=%d flush_timeout=%.3fs",
            self._config.buffer_size,
            self._config.flush_timeout_secs,
        )

    @property
    def config(self) -> NagleConfig:
        """Threshold and timeout this wrapper was built with."""
        return self._config

    @property
    def closed(self) -> bool:
        """True once close() has succeeded."""
        return self._closed

    @property
    def running(self) -> bool:
        """True while the background flush task is alive."""
        return not self._flush_task.done()

    @property
    def buffered(self) -> int:
        """Bytes accepted by write() but not yet sent."""
        return len(self._buffer)

    async def write(self, data: bytes) -> int:
        """
        Buffer data, flushing at once if the threshold is reached.

        Args:
            data: Bytes to send.

        Returns:
            ``len(data)`` when the data was only buffered. When the write
            triggered a flush, the number of bytes that flush transferred.

        Raises:
            ClosedError: If the wrapper is closed. Nothing is buffered.
            Exception: Whatever the underlying stream raised during a
                threshold flush. The bytes stay buffered.
        """
        async with self._lock:
            if self._closed:
                raise ClosedError()

            if not data:
                return 0

            self._buffer += data

            if len(self._buffer) >= self._config.buffer_size:
                return await self._flush_locked(FlushReason.SIZE)

            # Restart the delay so bursts of small writes keep coalescing.
            self._timer.arm(self._config.flush_timeout_secs)
            return len(data)

    async def read(self, n: int = -1) -> bytes:
        """
        Read from the underlying stream.

        Not serialized against writes. A read already in flight when close()
        runs sees whatever the underlying stream does on close.

        Raises:
            ClosedError: If the wrapper is closed.
        """
        if self._closed:
            raise ClosedError()
        return await self._stream.read(n)

    async def flush(self) -> int:
        """
        Send everything buffered now instead of waiting for the timer.

        Returns:
            Bytes transferred. Zero when nothing was buffered.

        Raises:
            ClosedError: If the wrapper is closed.
        """
        async with self._lock:
            if self._closed:
                raise ClosedError()
            return await self._flush_locked(FlushReason.EXPLICIT)

    async def close(self) -> None:
        """
        Flush remaining data, then close the underlying stream.

        If the final flush fails, the wrapper stays open and the error is
        raised, so close() can be retried. Once the flush succeeds the wrapper
        is closed for good, even if closing the underlying stream then fails.

        Raises:
            ClosedError: If the wrapper was already closed.
        """
        try:
            async with self._lock:
                if self._closed:
                    raise ClosedError()

                await self._drain_locked()

                self._closed = True
                self._timer.wake()
                logger.debug("Wrapper closed, closing underlying stream")

                await self._stream.close()
        finally:
            # The flush task exits on its next wake-up once it sees the flag.
            if self._closed and not self._flush_task.done():
                await self._flush_task

    async def __aenter__(self) -> NagleWrapper:
        """Return self for use as an async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the wrapper unless it was closed inside the block."""
        if not self._closed:
            await self.close()

    async def _drain_locked(self) -> None:
        """Flush until the buffer is empty. Caller holds the lock."""
        while self._buffer:
            if await self._flush_locked(FlushReason.CLOSE) == 0:
                raise NagleError(
                    f"Underlying stream accepted no bytes, {len(self._buffer)} bytes unsent"
                )

    async def _flush_locked(self, reason: FlushReason) -> int:
        """
        Offer the whole buffer to the underlying stream once.

        Caller holds the lock.

        Only the accepted prefix leaves the buffer. An unsent tail re-arms
        the timer so it is retried even if no further write arrives.
        """
        if not self._buffer:
            return 0

        pending = bytes(self._buffer)
        try:
            written = await self._stream.write(pending)
        except Exception:
            metrics.flush_errors.labels(reason=reason).inc()
            raise

        if not isinstance(written, int) or not 0 <= written <= len(pending):
            metrics.flush_errors.labels(reason=reason).inc()
            raise NagleError(
                f"Underlying stream reported {written!r} bytes written for {len(pending)} offered"
            )

        del self._buffer[:written]

        if written:
            metrics.flushes.labels(reason=reason).inc()
            metrics.bytes_flushed.inc(written)
            metrics.flush_size.observe(written)

        if self._buffer:
            metrics.partial_writes.inc()
            logger.debug(
                "Partial %s flush: %d of %d bytes accepted", reason, written, len(pending)
            )
            self._timer.arm(self._config.flush_timeout_secs)
        else:
            logger.debug("%s flush: %d bytes", reason.capitalize(), written)
            self._timer.stop()

        return written

    async def _flush_loop(self) -> None:
        """Background task performing timer-triggered flushes."""
        while True:
            await self._timer.wait()

            async with self._lock:
                if self._closed:
                    return

                # A write re-armed the timer after this fire. The new arming
                # owns the next flush.
                if self._timer.armed or not self._buffer:
                    continue

                try:
                    await self._flush_locked(FlushReason.TIMER)
                except Exception as e:
                    self._report_flush_error(e)

    def _report_flush_error(self, cause: Exception) -> None:
        """Surface a background flush failure through logging and the callback."""
        error = AsyncFlushError(cause, pending=len(self._buffer))
        logger.warning("Background flush failed with %d bytes pending: %s", error.pending, cause)

        if self._on_flush_error is None:
            return

        try:
            self._on_flush_error(error)
        except Exception as e:
            logger.warning("Flush error handler raised: %s", e)


def wrap(
    stream: DuplexStreamProtocol,
    buffer_size: int,
    flush_timeout: float,
    *,
    on_flush_error: FlushErrorHandler | None = None,
) -> NagleWrapper:
    """
    Wrap a stream with write coalescing.

    Args:
        stream: Underlying duplex stream.
        buffer_size: Byte threshold for an immediate flush. Must be positive.
        flush_timeout: Seconds buffered data may wait. Must be positive.
        on_flush_error: Called with failures of timer-triggered flushes.

    Raises:
        pydantic.ValidationError: If buffer_size or flush_timeout is not positive.
    """
    config = NagleConfig(buffer_size=buffer_size, flush_timeout_secs=flush_timeout)
    return NagleWrapper(stream, config, on_flush_error=on_flush_error)
