"""
Shared pytest fixtures for buffering wrapper tests.

Provides mock streams and a wrapper factory.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio

from nagle_stream import NagleWrapper, wrap
from nagle_stream.protocols import FlushErrorHandler
from tests.nagle_stream.helpers import BUFFER_SIZE, FLUSH_TIMEOUT, MockStream


@pytest.fixture
def mock_stream() -> MockStream:
    """Fresh mock stream."""
    return MockStream()


@pytest_asyncio.fixture
async def make_wrapper(
    mock_stream: MockStream,
) -> AsyncIterator[Callable[..., NagleWrapper]]:
    """
    Factory fixture for wrappers over the shared mock stream.

    Wrappers still open at teardown are closed once injected failures are cleared.
    """
    created: list[NagleWrapper] = []

    def _make(
        buffer_size: int = BUFFER_SIZE,
        flush_timeout: float = FLUSH_TIMEOUT,
        on_flush_error: FlushErrorHandler | None = None,
    ) -> NagleWrapper:
        wrapper = wrap(mock_stream, buffer_size, flush_timeout, on_flush_error=on_flush_error)
        created.append(wrapper)
        return wrapper

    yield _make

    mock_stream.write_error = None
    mock_stream.close_error = None
    mock_stream.max_accept = None
    mock_stream.accept_limits.clear()

    for wrapper in created:
        if not wrapper.closed:
            # A stream closed by the test rejects the final close; the wrapper still retires.
            with contextlib.suppress(ConnectionError):
                await wrapper.close()
