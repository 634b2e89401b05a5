# src/signalfan/scheduling.py
"""Scheduler abstraction for deferred callbacks.

The link-click handler defers navigation by a short delay so that
fire-and-forget analytics calls have time to leave the process. This
module abstracts the timer so that behaviour is deterministic in tests.

Production code uses ThreadingScheduler (the default).
Tests inject ManualScheduler to control time advancement.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol


class ScheduledCall(Protocol):
    """Handle for a one-shot deferred callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. No-op if it already ran."""
        ...

    @property
    def done(self) -> bool:
        """True once the callback ran or was cancelled."""
        ...


class Scheduler(Protocol):
    """Runs a callback once after a delay.

    Implementations:
    - ThreadingScheduler: threading.Timer per call (production)
    - ManualScheduler: runs due callbacks when advanced (testing)
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Schedule ``callback`` to run once after ``delay`` seconds.

        Each call schedules an independent timer.
        """
        ...


class _TimerCall:
    """ScheduledCall backed by a daemon threading.Timer."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self._finished = threading.Event()

        def run() -> None:
            try:
                callback()
            finally:
                self._finished.set()

        self._timer = threading.Timer(delay, run)
        self._timer.daemon = True

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        self._timer.cancel()
        self._finished.set()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the callback ran or was cancelled."""
        return self._finished.wait(timeout)


class ThreadingScheduler:
    """Production scheduler using one threading.Timer per call.

    Timers are daemon threads so a pending navigation never keeps the
    interpreter alive at exit.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> _TimerCall:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        call = _TimerCall(delay, callback)
        call.start()
        return call


class _ManualCall:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.ran = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def done(self) -> bool:
        return self.cancelled or self.ran


class ManualScheduler:
    """Controllable scheduler for deterministic testing.

    Callbacks run synchronously inside advance(), in due-time order
    (scheduling order breaks ties).

    Example:
        scheduler = ManualScheduler()
        handler = dispatcher.get_link_click_event_handler("cta", redirect_delay=0.05)
        handler(click)

        scheduler.advance(0.04)  # nothing yet
        scheduler.advance(0.02)  # navigation runs
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._calls: list[_ManualCall] = []

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of callbacks scheduled but not yet run or cancelled."""
        return sum(1 for call in self._calls if not call.done)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualCall:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        call = _ManualCall(self._now + delay, callback)
        self._calls.append(call)
        return call

    def advance(self, seconds: float) -> None:
        """Advance time and run every callback that has become due.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._now += seconds
        due = sorted(
            (call for call in self._calls if not call.done and call.due <= self._now),
            key=lambda call: call.due,
        )
        for call in due:
            # An earlier callback may have cancelled this one
            if call.done:
                continue
            call.ran = True
            call.callback()
        self._calls = [call for call in self._calls if not call.done]
