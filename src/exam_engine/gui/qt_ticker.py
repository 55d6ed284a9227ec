"""
Module: gui.qt_ticker

Purpose:
    Ticker driven by a QTimer, for hosts that already run a Qt event loop.
    Ticks are delivered on the thread that owns the timer, so countdown
    callbacks can touch widgets directly.

Key Classes:
    - QtTicker

Dependencies:
    - PySide6 (gui extra)

Used By:
    - Qt host windows (passed to AttemptSession / AttemptRegistry)
"""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtTicker:
    """QTimer-backed implementation of the Ticker protocol."""

    def __init__(self, interval: float = 1.0, parent: Optional[QObject] = None):
        self.interval = interval
        self._timer = QTimer(parent)
        self._timer.setInterval(int(interval * 1000))
        self._callback: Optional[Callable[[], None]] = None

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self, callback: Callable[[], None]) -> None:
        if self._callback is not None:
            raise RuntimeError("QtTicker cannot be restarted")
        self._callback = callback
        self._timer.timeout.connect(callback)
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
