"""
Module: timing.tickers

Purpose:
    Periodic tick sources for the countdown. The countdown only depends on
    the Ticker protocol, so a host can drive it from a background thread,
    an event-loop timer (see gui.qt_ticker) or by hand.

Key Classes:
    - Ticker: Protocol (start(callback) / stop())
    - ThreadTicker: Daemon thread with drift-free scheduling
    - ManualTicker: Ticks only when fire() is called

Dependencies:
    - threading (std)
    - time (std)

Used By:
    - timing.countdown.CountdownTimer
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Ticker(Protocol):
    """Anything that calls a callback periodically until stopped."""

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class ThreadTicker:
    """
    Tick source running on its own daemon thread.

    Deadlines are computed from a monotonic clock so ticks do not drift
    when the callback takes time. A callback that raises stops the ticker
    with a logged warning; the exception never leaves the thread.

    Usage:
        ticker = ThreadTicker(interval=1.0)
        ticker.start(on_tick)
        ...
        ticker.stop()
    """

    def __init__(self, interval: float = 1.0, name: str = "countdown-ticker"):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive: {interval}")
        self.interval = interval
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self, callback: TickCallback) -> None:
        if self._thread is not None:
            raise RuntimeError("ThreadTicker cannot be restarted")
        self._thread = threading.Thread(
            target=self._run, args=(callback,), name=self._name, daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking. Safe to call from inside the callback."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def _run(self, callback: TickCallback) -> None:
        deadline = time.monotonic() + self.interval
        while not self._stop_event.wait(max(0.0, deadline - time.monotonic())):
            try:
                callback()
            except Exception as e:
                logger.warning(f"Tick callback failed, stopping ticker: {e}")
                self._stop_event.set()
                break
            deadline += self.interval


class ManualTicker:
    """
    Ticker that only ticks when told to.

    Used by hosts that already own a clock, and by tests.
    """

    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None
        self.stopped = False

    def start(self, callback: TickCallback) -> None:
        self._callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True

    def fire(self, times: int = 1) -> None:
        """Deliver up to `times` ticks; ticks after stop() are dropped."""
        for _ in range(times):
            if self._callback is None or self.stopped:
                return
            self._callback()
