"""
Unit Tests for CountdownTimer

Ticks are driven by ManualTicker except where real-time behaviour is the
point of the test.
"""

import threading

import pytest

from exam_engine.timing import CountdownTimer, ManualTicker, ThreadTicker, TimerState, format_remaining


class Recorder:
    def __init__(self):
        self.ticks = []
        self.expired = 0

    def on_tick(self, remaining):
        self.ticks.append(remaining)

    def on_expired(self):
        self.expired += 1


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def ticker():
    return ManualTicker()


def _timer(seconds, recorder, ticker, **kwargs):
    return CountdownTimer(
        seconds, on_tick=recorder.on_tick, on_expired=recorder.on_expired, ticker=ticker, **kwargs
    )


class TestFormatRemaining:
    
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "00:00:00"), (59, "00:00:59"), (60, "00:01:00"), (3725, "01:02:05")],
    )
    def test_format_when_seconds_then_hh_mm_ss(self, seconds, expected):
        assert format_remaining(seconds) == expected


class TestCountdownTimer:
    
    # ─────────────────────────────────────────────────────────────────────────
    # Ticking
    # ─────────────────────────────────────────────────────────────────────────
    
    def test_tick_when_running_then_decrements_and_notifies(self, recorder, ticker):
        timer = _timer(60, recorder, ticker)
        timer.start()
        
        ticker.fire(3)
        
        assert recorder.ticks == [59, 58, 57]
        assert timer.remaining_seconds == 57
        assert timer.display == "00:00:57"
    
    def test_expiry_when_one_minute_elapses_then_fires_exactly_once(self, recorder, ticker):
        timer = _timer(60, recorder, ticker)
        timer.start()
        
        ticker.fire(60)
        
        assert recorder.expired == 1
        assert recorder.ticks[-1] == 0
        assert len(recorder.ticks) == 60
        assert timer.state is TimerState.EXPIRED
        assert ticker.stopped
    
    def test_expiry_when_extra_ticks_arrive_then_ignored(self, recorder, ticker):
        timer = _timer(2, recorder, ticker)
        timer.start()
        ticker.fire(2)
        
        # A late tick from a ticker that did not stop in time
        timer._tick()
        
        assert recorder.ticks == [1, 0]
        assert recorder.expired == 1
    
    def test_start_when_zero_duration_then_expires_immediately(self, recorder, ticker):
        timer = _timer(0, recorder, ticker)
        timer.start()
        assert recorder.expired == 1
        assert timer.state is TimerState.EXPIRED
    
    def test_is_warning_when_below_threshold_then_true(self, recorder, ticker):
        timer = _timer(10, recorder, ticker, warning_seconds=5)
        timer.start()
        ticker.fire(5)
        assert timer.is_warning is False
        ticker.fire(1)
        assert timer.is_warning is True
    
    # ─────────────────────────────────────────────────────────────────────────
    # Cancellation and restart
    # ─────────────────────────────────────────────────────────────────────────
    
    def test_cancel_when_running_then_no_further_notifications(self, recorder, ticker):
        timer = _timer(5, recorder, ticker)
        timer.start()
        ticker.fire(2)
        
        timer.cancel()
        timer._tick()
        
        assert recorder.ticks == [4, 3]
        assert recorder.expired == 0
        assert timer.state is TimerState.CANCELLED
    
    def test_cancel_when_called_twice_then_idempotent(self, recorder, ticker):
        timer = _timer(5, recorder, ticker)
        timer.start()
        timer.cancel()
        timer.cancel()
        assert timer.state is TimerState.CANCELLED
    
    def test_start_when_cancelled_then_raises(self, recorder, ticker):
        timer = _timer(5, recorder, ticker)
        timer.start()
        timer.cancel()
        with pytest.raises(RuntimeError, match="cannot be restarted"):
            timer.start()
    
    def test_init_when_negative_duration_then_raises(self, recorder, ticker):
        with pytest.raises(ValueError):
            _timer(-1, recorder, ticker)
    
    # ─────────────────────────────────────────────────────────────────────────
    # Listener faults
    # ─────────────────────────────────────────────────────────────────────────
    
    def test_tick_listener_when_raises_then_ticks_stop_but_expiry_fires(self, ticker):
        calls = []
        expired = []
        
        def bad_tick(remaining):
            calls.append(remaining)
            raise RuntimeError("display gone")
        
        timer = CountdownTimer(3, on_tick=bad_tick, on_expired=lambda: expired.append(True), ticker=ticker)
        timer.start()
        ticker.fire(3)
        
        assert calls == [2]
        assert expired == [True]
    
    def test_expiry_listener_when_raises_then_swallowed(self, ticker):
        def boom():
            raise RuntimeError("boom")
        
        timer = CountdownTimer(1, on_expired=boom, ticker=ticker)
        timer.start()
        ticker.fire()
        
        assert timer.state is TimerState.EXPIRED


class TestCountdownWithThreadTicker:
    
    def test_expiry_when_real_ticks_then_fires_once_and_ticks_stop(self, recorder):
        done = threading.Event()
        ticks_after_expiry = []
        
        def on_expired():
            recorder.on_expired()
            done.set()
        
        def on_tick(remaining):
            if done.is_set():
                ticks_after_expiry.append(remaining)
            recorder.on_tick(remaining)
        
        timer = CountdownTimer(
            3, on_tick=on_tick, on_expired=on_expired, ticker=ThreadTicker(interval=0.02)
        )
        timer.start()
        
        assert done.wait(timeout=5)
        # Give a stray tick a chance to arrive
        threading.Event().wait(0.1)
        
        assert recorder.ticks == [2, 1, 0]
        assert recorder.expired == 1
        assert ticks_after_expiry == []
