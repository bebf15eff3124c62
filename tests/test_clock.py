"""Tests for the tick sources."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from breathebubble.clock import FrameClock, PhaseClock, SecondTicker


class TestPhaseClock:
    def test_dispatches_to_all_subscribers(self) -> None:
        clock = PhaseClock()
        first, second = MagicMock(), MagicMock()
        clock.on_tick(first)
        clock.on_tick(second)
        assert clock.advance(0.5)
        first.assert_called_once_with(0.5)
        second.assert_called_once_with(0.5)

    def test_non_positive_delta_dropped(self) -> None:
        clock = PhaseClock()
        callback = MagicMock()
        clock.on_tick(callback)
        assert not clock.advance(0.0)
        assert not clock.advance(-1.0)
        callback.assert_not_called()
        assert clock.dropped_ticks == 2

    def test_reentrant_tick_dropped(self) -> None:
        clock = PhaseClock()
        seen: list[float] = []

        def callback(delta: float) -> None:
            seen.append(delta)
            assert not clock.advance(1.0)

        clock.on_tick(callback)
        assert clock.advance(0.25)
        assert seen == [0.25]
        assert clock.dropped_ticks == 1

    def test_unsubscribe(self) -> None:
        clock = PhaseClock()
        callback = MagicMock()
        unsubscribe = clock.on_tick(callback)
        unsubscribe()
        unsubscribe()
        clock.advance(1.0)
        callback.assert_not_called()

    def test_dispatch_flag_cleared_after_error(self) -> None:
        clock = PhaseClock()
        clock.on_tick(MagicMock(side_effect=RuntimeError("boom")))
        with pytest.raises(RuntimeError):
            clock.advance(1.0)
        clock._callbacks.clear()
        assert clock.advance(1.0)


class TestFrameClock:
    def test_first_frame_is_nominal(self) -> None:
        clock = FrameClock(frame_rate=20, now=MagicMock(return_value=100.0))
        assert clock.frame_interval == pytest.approx(0.05)
        assert clock.pump() == pytest.approx(0.05)

    def test_measures_elapsed_time(self) -> None:
        times = iter([10.0, 10.5, 11.25])
        clock = FrameClock(now=lambda: next(times))
        received: list[float] = []
        clock.on_tick(received.append)
        clock.pump()
        clock.pump()
        clock.pump()
        assert received[1:] == [pytest.approx(0.5), pytest.approx(0.75)]

    def test_resync_skips_gap(self) -> None:
        times = iter([0.0, 600.0])
        clock = FrameClock(frame_rate=10, now=lambda: next(times))
        clock.pump()
        clock.resync()
        assert clock.pump() == pytest.approx(0.1)

    def test_sleep_uses_frame_interval(self) -> None:
        clock = FrameClock(frame_rate=25)
        with patch("breathebubble.clock.time.sleep") as mock_sleep:
            clock.sleep_until_next_frame()
        mock_sleep.assert_called_once_with(pytest.approx(0.04))


class TestSecondTicker:
    def test_fires_once_per_second(self) -> None:
        on_second = MagicMock()
        ticker = SecondTicker(on_second)
        for _ in range(4):
            ticker(0.25)
        assert on_second.call_count == 1

    def test_large_delta_fires_each_second(self) -> None:
        on_second = MagicMock()
        ticker = SecondTicker(on_second)
        ticker(3.5)
        assert on_second.call_count == 3
        ticker(0.5)
        assert on_second.call_count == 4

    def test_reset_discards_partial_second(self) -> None:
        on_second = MagicMock()
        ticker = SecondTicker(on_second)
        ticker(0.9)
        ticker.reset()
        ticker(0.5)
        on_second.assert_not_called()
