"""
Module: timing.countdown

Purpose:
    One-shot countdown for a timed attempt. Emits tick(remaining_seconds)
    once per tick and exactly one expired notification when the time runs
    out. Cancellable, never restartable: a new timer is built per attempt.

Key Classes:
    - CountdownTimer: The countdown state machine

Key Functions:
    - format_remaining: "HH:MM:SS" display string

Dependencies:
    - threading (std)
    - .tickers

Used By:
    - session.attempt_session.AttemptSession
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from .tickers import ThreadTicker, Ticker

logger = logging.getLogger(__name__)

# Remaining time below which the display switches to a warning state
DEFAULT_WARNING_SECONDS = 300


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    def __str__(self) -> str:
        return self.value


def format_remaining(seconds: int) -> str:
    """
    Format a remaining-time value for display.

    Example:
        >>> format_remaining(3725)
        '01:02:05'
    """
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class CountdownTimer:
    """
    Countdown driven by a Ticker.

    Each tick decrements the remaining time by one second and notifies
    on_tick. When the remaining time reaches zero the timer stops its
    ticker and notifies on_expired exactly once. Listener failures are
    logged and never propagate: a failing on_tick stops further tick
    notifications but the countdown keeps running so expiry still fires.

    Notifications are delivered without holding the timer lock. A
    notification already being delivered when cancel() is called may
    complete; none start afterwards.

    Attributes:
        duration_seconds: Length of the countdown
        remaining_seconds: Seconds left
        state: IDLE, RUNNING, CANCELLED or EXPIRED

    Example:
        >>> ticker = ManualTicker()
        >>> timer = CountdownTimer(2, ticker=ticker, on_expired=lambda: print("done"))
        >>> timer.start()
        >>> ticker.fire(2)
        done
    """

    def __init__(
        self,
        duration_seconds: int,
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expired: Optional[Callable[[], None]] = None,
        ticker: Optional[Ticker] = None,
        warning_seconds: int = DEFAULT_WARNING_SECONDS,
    ):
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds cannot be negative: {duration_seconds}")
        self.duration_seconds = duration_seconds
        self.warning_seconds = warning_seconds
        self._remaining = duration_seconds
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._ticker: Ticker = ticker or ThreadTicker()
        self._state = TimerState.IDLE
        self._tick_delivery_enabled = True
        self._lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def remaining_seconds(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def state(self) -> TimerState:
        with self._lock:
            return self._state

    @property
    def is_warning(self) -> bool:
        """True once less than warning_seconds remain."""
        return self.remaining_seconds < self.warning_seconds

    @property
    def display(self) -> str:
        return format_remaining(self.remaining_seconds)

    # ─────────────────────────────────────────────────────────────────────────
    # Control
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """
        Start counting down.

        A zero-length countdown expires immediately.

        Raises:
            RuntimeError: If the timer was already started, cancelled or expired
        """
        with self._lock:
            if self._state is not TimerState.IDLE:
                raise RuntimeError(f"CountdownTimer cannot be restarted (state={self._state})")
            self._state = TimerState.RUNNING
            expire_now = self._remaining <= 0
            if expire_now:
                self._state = TimerState.EXPIRED

        if expire_now:
            logger.info("Countdown started with no time remaining; expiring immediately")
            self._notify_expired()
            return

        logger.debug(f"Countdown started: {self.duration_seconds}s")
        self._ticker.start(self._tick)

    def cancel(self) -> None:
        """Stop ticking and suppress further notifications. Idempotent."""
        with self._lock:
            if self._state in (TimerState.CANCELLED, TimerState.EXPIRED):
                return
            self._state = TimerState.CANCELLED
        self._ticker.stop()
        logger.debug(f"Countdown cancelled with {self.remaining_seconds}s remaining")

    # ─────────────────────────────────────────────────────────────────────────
    # Tick handling
    # ─────────────────────────────────────────────────────────────────────────

    def _tick(self) -> None:
        with self._lock:
            if self._state is not TimerState.RUNNING:
                return
            self._remaining = max(0, self._remaining - 1)
            remaining = self._remaining
            expired = remaining == 0
            if expired:
                self._state = TimerState.EXPIRED

        self._notify_tick(remaining)
        if expired:
            self._ticker.stop()
            logger.info("Countdown expired")
            self._notify_expired()

    def _notify_tick(self, remaining: int) -> None:
        if self._on_tick is None or not self._tick_delivery_enabled:
            return
        try:
            self._on_tick(remaining)
        except Exception as e:
            self._tick_delivery_enabled = False
            logger.warning(f"Tick listener failed; no further ticks will be delivered: {e}")

    def _notify_expired(self) -> None:
        if self._on_expired is None:
            return
        try:
            self._on_expired()
        except Exception as e:
            logger.warning(f"Expiry listener failed: {e}")
