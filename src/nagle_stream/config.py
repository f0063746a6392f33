"""
Write Coalescing Configuration

Defaults and runtime configuration for the buffering wrapper.

The two knobs trade throughput against latency:

- buffer_size: bytes accumulated before an immediate flush.
- flush_timeout_secs: how long buffered bytes may wait for more data.
"""

from typing import Final

from pydantic import PositiveFloat, PositiveInt

from .types import StrictBaseModel

DEFAULT_BUFFER_SIZE: Final = 1460
"""Flush threshold in bytes. One TCP MSS on a 1500 byte Ethernet MTU."""

DEFAULT_FLUSH_TIMEOUT_SECS: Final = 0.2
"""Maximum wait before buffered bytes are sent. Matches the classic delayed-ACK bound."""


class NagleConfig(StrictBaseModel):
    """Runtime configuration for a buffering wrapper."""

    buffer_size: PositiveInt = DEFAULT_BUFFER_SIZE
    """Buffered byte count that triggers an immediate flush."""

    flush_timeout_secs: PositiveFloat = DEFAULT_FLUSH_TIMEOUT_SECS
    """Seconds since the last buffered write before a timed flush."""
