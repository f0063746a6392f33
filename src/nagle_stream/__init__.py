"""
Write coalescing for asyncio byte streams.

Wraps a bidirectional stream and batches small writes into larger ones,
bounded by a size threshold and a flush timeout (Nagle-style buffering).

Architecture:
    caller
        -> NagleWrapper (buffer + lock + FlushTimer + background flush task)
    underlying stream (DuplexStreamProtocol, e.g. AsyncioStreamAdapter)

Components:
    - wrapper: NagleWrapper and the wrap() constructor
    - timer: re-armable single-shot flush timer
    - config: NagleConfig and defaults
    - adapters: asyncio StreamReader/StreamWriter bridge
    - metrics: prometheus_client flush metrics
"""

from .adapters import AsyncioStreamAdapter
from .config import DEFAULT_BUFFER_SIZE, DEFAULT_FLUSH_TIMEOUT_SECS, NagleConfig
from .errors import AsyncFlushError, ClosedError, NagleError
from .metrics import REGISTRY, generate_metrics
from .protocols import DuplexStreamProtocol, FlushErrorHandler
from .timer import FlushTimer
from .wrapper import FlushReason, NagleWrapper, wrap

__all__ = [
    # Wrapper
    "NagleWrapper",
    "FlushReason",
    "wrap",
    # Configuration
    "NagleConfig",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_FLUSH_TIMEOUT_SECS",
    # Errors
    "NagleError",
    "ClosedError",
    "AsyncFlushError",
    # Timer
    "FlushTimer",
    # Streams
    "AsyncioStreamAdapter",
    "DuplexStreamProtocol",
    "FlushErrorHandler",
    # Metrics
    "REGISTRY",
    "generate_metrics",
]
