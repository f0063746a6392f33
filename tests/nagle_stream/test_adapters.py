"""Tests for the asyncio stream adapter."""

from __future__ import annotations

import asyncio

import pytest

from nagle_stream import AsyncioStreamAdapter, wrap
from tests.nagle_stream.helpers import MockStreamWriter


def _make_adapter() -> tuple[AsyncioStreamAdapter, asyncio.StreamReader, MockStreamWriter]:
    reader = asyncio.StreamReader()
    writer = MockStreamWriter()
    adapter = AsyncioStreamAdapter(reader, writer)  # type: ignore[arg-type]
    return adapter, reader, writer


class TestAsyncioStreamAdapter:
    """Tests for AsyncioStreamAdapter."""

    @pytest.mark.asyncio
    async def test_write_drains_and_reports_length(self) -> None:
        """Writes reach the transport, are drained, and report full length."""
        adapter, _, writer = _make_adapter()

        assert await adapter.write(b"payload") == 7

        assert bytes(writer.transport_data) == b"payload"
        assert writer.drains == 1

    @pytest.mark.asyncio
    async def test_read_delegates_to_reader(self) -> None:
        """Reads return what the reader has received."""
        adapter, reader, _ = _make_adapter()
        reader.feed_data(b"incoming")

        assert await adapter.read(2) == b"in"
        assert await adapter.read(100) == b"coming"

    @pytest.mark.asyncio
    async def test_close_waits_for_transport(self) -> None:
        """Closing closes the writer and waits for it."""
        adapter, _, writer = _make_adapter()

        await adapter.close()

        assert writer.closed is True
        assert writer.wait_closed_called is True

    @pytest.mark.asyncio
    async def test_operations_after_close_raise(self) -> None:
        """The adapter rejects everything after close."""
        adapter, _, _ = _make_adapter()
        await adapter.close()

        with pytest.raises(ConnectionError):
            await adapter.write(b"x")
        with pytest.raises(ConnectionError):
            await adapter.read(1)
        with pytest.raises(ConnectionError):
            await adapter.close()

    @pytest.mark.asyncio
    async def test_wrapped_adapter_coalesces_writes(self) -> None:
        """Small writes through a wrapper reach the transport as one chunk."""
        adapter, _, writer = _make_adapter()
        wrapper = wrap(adapter, 1024, 10.0)

        for part in (b"GET ", b"/ ", b"HTTP/1.1\r\n", b"\r\n"):
            await wrapper.write(part)
        assert writer.drains == 0

        await wrapper.close()

        assert bytes(writer.transport_data) == b"GET / HTTP/1.1\r\n\r\n"
        assert writer.drains == 1
        assert writer.closed is True

    @pytest.mark.asyncio
    async def test_cancelled_flush_sends_nothing(self) -> None:
        """A write cancelled during backpressure is sent exactly once later."""
        adapter, _, writer = _make_adapter()
        writer.drain_gate = asyncio.Event()
        wrapper = wrap(adapter, 10, 10.0)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(wrapper.write(b"0123456789"), 0.02)

        assert bytes(writer.transport_data) == b""
        assert wrapper.buffered == 10

        writer.drain_gate.set()
        await wrapper.close()

        assert bytes(writer.transport_data) == b"0123456789"
