"""
Re-armable single-shot flush timer.

Each arming fires at most once. Re-arming cancels the pending arming and
discards a fire the consumer has not picked up yet, so a stale arming can
never trigger a flush on behalf of a newer one.

The timer never runs callbacks itself. A consumer task awaits ``wait()``
and decides what a fire means.
"""

from __future__ import annotations

import asyncio


class FlushTimer:
    """Single-shot timer driven by the running event loop."""

    __slots__ = ("_loop", "_handle", "_fired")

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Bind to the given loop, or the running loop when omitted."""
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._handle: asyncio.TimerHandle | None = None
        self._fired = asyncio.Event()

    @property
    def armed(self) -> bool:
        """True while an arming is pending and has not fired."""
        return self._handle is not None

    def arm(self, delay: float) -> None:
        """Fire once after *delay* seconds, replacing any pending arming."""
        self.stop()
        self._handle = self._loop.call_later(delay, self._fire)

    def stop(self) -> bool:
        """
        Disarm the timer.

        Cancels the pending arming and drops an unconsumed fire.

        Returns:
            True if an arming was pending.
        """
        pending = self._handle is not None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._fired.clear()
        return pending

    def wake(self) -> None:
        """Fire immediately, cancelling any pending arming."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._fired.set()

    async def wait(self) -> None:
        """Wait for the next fire and consume it."""
        await self._fired.wait()
        self._fired.clear()

    def _fire(self) -> None:
        self._handle = None
        self._fired.set()
