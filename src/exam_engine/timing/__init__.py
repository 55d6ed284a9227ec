"""Countdown timer and the tick sources that drive it."""

from .countdown import CountdownTimer, TimerState, format_remaining
from .tickers import Ticker, ThreadTicker, ManualTicker

__all__ = [
    "CountdownTimer",
    "TimerState",
    "format_remaining",
    "Ticker",
    "ThreadTicker",
    "ManualTicker",
]
