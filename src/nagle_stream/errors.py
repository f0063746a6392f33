"""Exceptions raised by the buffering wrapper.

Errors coming from the underlying stream are never wrapped on synchronous
paths. They reach the caller of ``write``, ``flush``, ``read`` or ``close``
exactly as the stream raised them.
"""

from __future__ import annotations


class NagleError(Exception):
    """Base class for buffering wrapper errors."""


class ClosedError(NagleError):
    """Raised on any operation issued after the wrapper was closed."""

    def __init__(self, message: str = "Wrapper is closed") -> None:
        """Initialize with a default message."""
        super().__init__(message)


class AsyncFlushError(NagleError):
    """
    A timer-triggered flush failed.

    The write that buffered these bytes already returned successfully, so
    there is no caller to raise into. Instances are logged and handed to the
    wrapper's ``on_flush_error`` callback instead.
    """

    def __init__(self, cause: BaseException, pending: int) -> None:
        """Record the underlying failure and the bytes still buffered."""
        super().__init__(f"Background flush failed with {pending} bytes pending: {cause!r}")
        self.cause = cause
        self.pending = pending
        self.__cause__ = cause
