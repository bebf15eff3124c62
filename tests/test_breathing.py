"""Tests for the breathing phase state machine."""

from __future__ import annotations

import math
from unittest.mock import MagicMock

import pytest

from breathebubble.breathing import BreathingSession
from breathebubble.models import BreathPhase

EPS = 1e-3


def _run(session: BreathingSession, seconds: int, step: float = 1.0) -> None:
    for _ in range(int(seconds / step)):
        session.tick(step)


class TestControls:
    def test_initial_state(self) -> None:
        session = BreathingSession()
        assert session.phase is BreathPhase.IDLE
        assert not session.is_active
        assert session.cycle_count == 0
        assert session.elapsed_time == 0.0

    def test_start_enters_inhale(self) -> None:
        session = BreathingSession()
        session.start()
        assert session.phase is BreathPhase.INHALE
        assert session.is_active

    def test_start_while_paused_keeps_progress(self) -> None:
        session = BreathingSession()
        session.start()
        session.tick(2.0)
        session.pause()
        session.start()
        assert session.phase is BreathPhase.INHALE
        assert session.elapsed_time == pytest.approx(2.0)

    def test_toggle_from_idle_starts(self) -> None:
        session = BreathingSession()
        session.toggle()
        assert session.phase is BreathPhase.INHALE
        assert session.is_active

    def test_toggle_flips_active(self) -> None:
        session = BreathingSession()
        session.start()
        session.toggle()
        assert not session.is_active
        session.toggle()
        assert session.is_active

    def test_toggle_from_completed_restarts(self) -> None:
        session = BreathingSession(total_cycles=1)
        session.start()
        _run(session, 18)
        assert session.phase is BreathPhase.COMPLETED
        session.toggle()
        assert session.phase is BreathPhase.INHALE
        assert session.cycle_count == 0
        assert session.is_active

    def test_reset(self) -> None:
        session = BreathingSession()
        session.start()
        _run(session, 20)
        session.reset()
        assert session.phase is BreathPhase.IDLE
        assert not session.is_active
        assert session.cycle_count == 0
        assert session.elapsed_time == 0.0

    def test_configure(self) -> None:
        session = BreathingSession()
        session.configure(total_cycles=7, include_hold_empty=True)
        assert session.total_cycles == 7
        assert session.include_hold_empty


class TestTick:
    def test_ignored_when_idle(self) -> None:
        session = BreathingSession()
        session.tick(10.0)
        assert session.phase is BreathPhase.IDLE
        assert session.elapsed_time == 0.0

    def test_ignored_when_paused(self) -> None:
        session = BreathingSession()
        session.start()
        session.pause()
        session.tick(10.0)
        assert session.phase is BreathPhase.INHALE
        assert session.elapsed_time == 0.0

    def test_partial_ticks_accumulate(self) -> None:
        session = BreathingSession()
        session.start()
        session.tick(2.0)
        session.tick(1.9)
        assert session.phase is BreathPhase.INHALE
        session.tick(0.2)
        assert session.phase is BreathPhase.HOLD_FULL
        assert session.elapsed_time == 0.0

    @pytest.mark.parametrize(
        ("hold_empty", "expected"),
        [
            (False, [BreathPhase.HOLD_FULL, BreathPhase.EXHALE, BreathPhase.INHALE]),
            (True, [BreathPhase.HOLD_FULL, BreathPhase.EXHALE, BreathPhase.HOLD_EMPTY, BreathPhase.INHALE]),
        ],
    )
    def test_each_phase_transitions_exactly_once(self, hold_empty: bool, expected: list) -> None:
        session = BreathingSession(total_cycles=4, include_hold_empty=hold_empty)
        session.start()
        for phase in expected:
            session.tick(session.phase_duration + EPS)
            assert session.phase is phase

    def test_large_tick_advances_one_phase(self) -> None:
        session = BreathingSession()
        session.start()
        session.tick(100.0)
        assert session.phase is BreathPhase.HOLD_FULL
        assert 0.0 <= session.elapsed_time <= session.phase_duration

    def test_elapsed_stays_within_phase(self) -> None:
        session = BreathingSession()
        session.start()
        for _ in range(200):
            session.tick(0.37)
            assert 0.0 <= session.elapsed_time <= max(session.phase_duration, 0.0)
            assert session.cycle_count <= session.total_cycles


class TestCycles:
    def test_four_cycles_in_72_seconds(self) -> None:
        on_complete = MagicMock()
        session = BreathingSession(total_cycles=4, on_complete=on_complete)
        session.start()
        _run(session, 71)
        assert session.phase is not BreathPhase.COMPLETED
        session.tick(1.0)
        assert session.phase is BreathPhase.COMPLETED
        assert session.cycle_count == 4
        assert not session.is_active
        on_complete.assert_called_once()

    def test_finer_ticks_same_result(self) -> None:
        session = BreathingSession(total_cycles=4)
        session.start()
        _run(session, 72, step=0.5)
        assert session.phase is BreathPhase.COMPLETED
        assert session.cycle_count == 4

    def test_hold_empty_adds_four_seconds_per_cycle(self) -> None:
        session = BreathingSession(total_cycles=2, include_hold_empty=True)
        session.start()
        _run(session, 43)
        assert session.phase is BreathPhase.HOLD_EMPTY
        session.tick(1.0)
        assert session.phase is BreathPhase.COMPLETED
        assert session.cycle_count == 2

    def test_cycle_counted_on_return_to_inhale(self) -> None:
        session = BreathingSession(total_cycles=4)
        session.start()
        _run(session, 18)
        assert session.phase is BreathPhase.INHALE
        assert session.cycle_count == 1

    def test_disabling_hold_empty_applies_at_next_transition(self) -> None:
        session = BreathingSession(total_cycles=4, include_hold_empty=True)
        session.start()
        _run(session, 18)
        assert session.phase is BreathPhase.HOLD_EMPTY
        session.include_hold_empty = False
        assert session.phase is BreathPhase.HOLD_EMPTY
        _run(session, 4)
        assert session.phase is BreathPhase.INHALE
        _run(session, 18)
        assert session.phase is BreathPhase.INHALE
        assert session.cycle_count == 2

    def test_ticks_after_completion_ignored(self) -> None:
        on_complete = MagicMock()
        session = BreathingSession(total_cycles=1, on_complete=on_complete)
        session.start()
        _run(session, 30)
        assert session.phase is BreathPhase.COMPLETED
        assert session.cycle_count == 1
        on_complete.assert_called_once()


class TestExpansion:
    def test_idle_and_completed(self) -> None:
        session = BreathingSession(total_cycles=1)
        assert session.expansion() == pytest.approx(0.1)
        session.start()
        _run(session, 18)
        assert session.expansion() == pytest.approx(0.1)

    def test_inhale_eases_out(self) -> None:
        session = BreathingSession()
        session.start()
        assert session.expansion() == pytest.approx(0.0)
        session.tick(2.0)
        assert session.expansion() == pytest.approx(math.sin(math.pi / 4))

    def test_hold_full_is_full(self) -> None:
        session = BreathingSession()
        session.start()
        _run(session, 4)
        assert session.expansion() == pytest.approx(1.0)

    def test_exhale_eases_in(self) -> None:
        session = BreathingSession()
        session.start()
        _run(session, 10)
        assert session.phase is BreathPhase.EXHALE
        assert session.expansion() == pytest.approx(1.0)
        session.tick(4.0)
        assert session.expansion() == pytest.approx(1.0 - math.sin(math.pi / 4))

    def test_hold_empty_is_empty(self) -> None:
        session = BreathingSession(include_hold_empty=True)
        session.start()
        _run(session, 18)
        assert session.expansion() == pytest.approx(0.0)

    def test_progress(self) -> None:
        session = BreathingSession()
        assert session.progress == 0.0
        session.start()
        session.tick(1.0)
        assert session.progress == pytest.approx(0.25)
