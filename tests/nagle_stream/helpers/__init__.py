"""Test helpers for nagle_stream unit tests."""

from __future__ import annotations

from .mocks import MockStream, MockStreamWriter

BUFFER_SIZE = 10
"""Threshold used by most tests."""

FLUSH_TIMEOUT = 0.05
"""Flush timeout used by timing tests (50ms)."""

SETTLE = 0.1
"""Wait comfortably longer than FLUSH_TIMEOUT."""


__all__ = [
    # Mocks
    "MockStream",
    "MockStreamWriter",
    # Constants
    "BUFFER_SIZE",
    "FLUSH_TIMEOUT",
    "SETTLE",
]
