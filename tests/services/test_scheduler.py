"""Tests for the cycle scheduler state machine.

Covers the full transition sequence, cancellation in every phase (both
programmatic and through real signal delivery), degraded cycles when the
interface cannot be disabled, fatal restoration failures, notifier
isolation and single-instance exclusion.
"""

from __future__ import annotations

import os
import signal
import subprocess
from unittest.mock import patch

import pytest

from focus_timer.models.config_models import RunConfig
from focus_timer.models.cycle import (
    CycleState,
    OutcomeKind,
    Phase,
    ResourceState,
    SchedulerState,
)
from focus_timer.models.exceptions import AlreadyRunningError, RestorationError
from focus_timer.services.guard import CancellationGuard
from focus_timer.services.lock import SingleInstanceLock
from focus_timer.services.power_switch import TemplateSwitch
from focus_timer.services.progress import ProgressReporter
from focus_timer.services.scheduler import CycleScheduler
from focus_timer.services.state_controller import ExternalStateController


def _strip_ticks(events: list[str]) -> list[str]:
    return [e for e in events if e != "tick"]


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


class TestCompletedRun:
    def test_transition_sequence_for_two_cycles(self, make_harness):
        """focus=2, rest=1, cycles=2 produces the documented sequence."""
        h = make_harness(focus=2, rest=1, cycles=2)

        outcome = h.scheduler.run()

        assert outcome.kind is OutcomeKind.COMPLETED_ALL_CYCLES
        assert h.events == [
            "disable", "tick", "tick",
            "enable", "tick", "notify",
            "disable", "tick", "tick",
            "enable", "tick", "notify",
            "enable",  # guard's final restoration
        ]
        assert h.scheduler.state is SchedulerState.COMPLETED

    @pytest.mark.parametrize("cycles", [1, 2, 3, 5])
    def test_disable_and_enable_counts(self, make_harness, cycles):
        """n cycles: exactly n disables and n + 1 enables."""
        h = make_harness(focus=1, rest=1, cycles=cycles)

        h.scheduler.run()

        assert h.switch.count(ResourceState.DISABLED) == cycles
        assert h.switch.count(ResourceState.ENABLED) == cycles + 1
        assert h.switch.state is ResourceState.ENABLED

    def test_one_tick_per_second(self, make_harness):
        h = make_harness(focus=3, rest=2, cycles=2)

        h.scheduler.run()

        assert h.events.count("tick") == (3 + 2) * 2

    def test_notifies_once_per_cycle(self, make_harness, events, recording_notifier_cls):
        notifier = recording_notifier_cls(events)
        h = make_harness(cycles=3, notifier=notifier)

        h.scheduler.run()

        assert [m for _, m in notifier.messages] == [
            "Cycle 1 finished!",
            "Cycle 2 finished!",
            "Cycle 3 finished!",
        ]

    def test_lock_released_after_completion(self, make_harness, tmp_path):
        h = make_harness()

        h.scheduler.run()

        assert not (tmp_path / "focus_timer.lock").exists()
        assert not h.guard.active

    def test_run_only_once(self, make_harness):
        h = make_harness(cycles=1)
        h.scheduler.run()

        with pytest.raises(RuntimeError):
            h.scheduler.run()

    def test_cycle_counter_never_decreases(self, make_harness):
        seen = []

        h = make_harness(focus=1, rest=1, cycles=3)
        original_tick = h.scheduler.listener.tick

        def record(cycle, event):
            seen.append(cycle.current_cycle)
            original_tick(cycle, event)

        h.scheduler.listener.tick = record
        h.scheduler.run()

        assert seen == sorted(seen)
        assert max(seen) == 3


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    @pytest.mark.parametrize("cycle", [1, 2, 3])
    def test_cancel_during_focus(self, make_harness, cycle):
        """Cancelling in Focusing(k) yields CancelledAtCycle(k, Focusing)."""
        focus, rest = 3, 2
        ticks_before = (cycle - 1) * (focus + rest)
        holder = {}

        def on_tick(n):
            if n == ticks_before + 2:
                holder["h"].guard.cancel()

        h = make_harness(focus=focus, rest=rest, cycles=3, on_tick=on_tick)
        holder["h"] = h

        outcome = h.scheduler.run()

        assert outcome.cancelled
        assert (outcome.cycle, outcome.phase) == (cycle, Phase.FOCUSING)
        assert h.scheduler.state is SchedulerState.CANCELLED
        # One restoration sequence, issued by the guard after the last disable
        assert _strip_ticks(h.events)[-2:] == ["disable", "enable"]
        assert h.switch.count(ResourceState.DISABLED) == cycle

    def test_interrupt_during_first_rest(self, make_harness):
        """focus=5, rest=5, cycles=3: SIGINT in the rest of cycle 1."""

        def on_tick(n):
            if n == 5 + 2:
                signal.raise_signal(signal.SIGINT)

        h = make_harness(focus=5, rest=5, cycles=3, on_tick=on_tick)

        outcome = h.scheduler.run()

        assert outcome.cancelled
        assert (outcome.cycle, outcome.phase) == (1, Phase.RESTING)
        assert _strip_ticks(h.events) == ["disable", "enable", "enable"]
        assert h.switch.count(ResourceState.DISABLED) == 1
        assert h.guard.received_signal is signal.SIGINT

    def test_sigterm_is_a_cancellation(self, make_harness):
        def on_tick(n):
            if n == 1:
                os.kill(os.getpid(), signal.SIGTERM)

        h = make_harness(focus=5, rest=5, cycles=1, on_tick=on_tick)

        outcome = h.scheduler.run()

        assert outcome.cancelled
        assert outcome.phase is Phase.FOCUSING
        assert h.switch.state is ResourceState.ENABLED

    def test_stops_ticking_after_cancellation(self, make_harness):
        holder = {}

        def on_tick(n):
            if n == 2:
                holder["h"].guard.cancel()

        h = make_harness(focus=100, rest=100, cycles=1, on_tick=on_tick)
        holder["h"] = h

        h.scheduler.run()

        assert h.events.count("tick") == 2

    def test_signal_handlers_restored(self, make_harness):
        before = signal.getsignal(signal.SIGINT)
        h = make_harness(cycles=1)

        h.scheduler.run()

        assert signal.getsignal(signal.SIGINT) is before

    def test_no_notification_for_cancelled_cycle(self, make_harness):
        holder = {}

        def on_tick(n):
            if n == 3:
                holder["h"].guard.cancel()

        h = make_harness(focus=2, rest=2, cycles=2, on_tick=on_tick)
        holder["h"] = h

        h.scheduler.run()

        assert "notify" not in h.events


# ---------------------------------------------------------------------------
# External action failures
# ---------------------------------------------------------------------------


class TestExternalFailures:
    def test_disable_failure_degrades_cycle(self, make_harness):
        """A failed disable skips that focus period but the run continues."""
        h = make_harness(focus=2, rest=1, cycles=2, fail_disable=1)

        outcome = h.scheduler.run()

        assert outcome.completed
        assert outcome.degraded
        assert len(outcome.warnings) == 1
        assert "Cycle 1" in outcome.warnings[0]
        assert h.events == [
            "disable",  # fails, focus skipped
            "enable", "tick", "notify",
            "disable", "tick", "tick",
            "enable", "tick", "notify",
            "enable",
        ]

    def test_enable_failure_is_retried(self, make_harness):
        h = make_harness(focus=1, rest=1, cycles=1, fail_enable=2)

        outcome = h.scheduler.run()

        assert outcome.completed
        assert _strip_ticks(h.events) == [
            "disable", "enable", "enable", "enable", "notify", "enable",
        ]

    def test_enable_failure_exhausted_is_fatal(self, make_harness):
        h = make_harness(focus=1, rest=1, cycles=2, fail_enable=-1)

        with pytest.raises(RestorationError) as exc_info:
            h.scheduler.run()

        assert "may still be disabled" in str(exc_info.value)
        # 3 scheduler attempts, then 3 guard attempts
        assert h.switch.count(ResourceState.ENABLED) == 6
        assert h.switch.count(ResourceState.DISABLED) == 1
        assert not h.lock.path.exists()

    def test_guard_restores_after_unexpected_error(self, make_harness):
        h = make_harness(focus=3, rest=1, cycles=1)

        def boom(cycle, event):
            raise ValueError("display crashed")

        h.scheduler.listener.tick = boom

        with pytest.raises(ValueError):
            h.scheduler.run()

        assert _strip_ticks(h.events) == ["disable", "enable"]
        assert h.switch.state is ResourceState.ENABLED

    def test_notifier_failure_does_not_change_state(
        self, make_harness, events, recording_notifier_cls
    ):
        notifier = recording_notifier_cls(events, raises=True)
        h = make_harness(cycles=2, notifier=notifier)

        outcome = h.scheduler.run()

        assert outcome.completed
        assert h.switch.count(ResourceState.DISABLED) == 2

    def test_notifier_nonzero_status_ignored(
        self, make_harness, events, recording_notifier_cls
    ):
        notifier = recording_notifier_cls(events, status=1)
        h = make_harness(cycles=1, notifier=notifier)

        assert h.scheduler.run().completed


# ---------------------------------------------------------------------------
# Single instance
# ---------------------------------------------------------------------------


class TestSingleInstance:
    def test_second_instance_refused_without_side_effects(self, make_harness, tmp_path):
        lock_path = tmp_path / "shared.lock"
        holder = SingleInstanceLock(lock_path)
        holder.acquire()
        try:
            h = make_harness(lock_path=lock_path)

            with pytest.raises(AlreadyRunningError) as exc_info:
                h.scheduler.run()

            assert exc_info.value.pid == os.getpid()
            assert h.switch.calls == []
            assert h.scheduler.state is SchedulerState.NOT_STARTED
        finally:
            holder.release()

    def test_stale_lock_reclaimed(self, make_harness, tmp_path):
        lock_path = tmp_path / "stale.lock"
        lock_path.write_text(
            '{"pid": 999999999, "create_time": 1.0, "started_at": "2020-01-01T00:00:00"}'
        )
        h = make_harness(cycles=1, lock_path=lock_path)

        outcome = h.scheduler.run()

        assert outcome.completed
        assert not lock_path.exists()


# ---------------------------------------------------------------------------
# Command templates and restoration reporting
# ---------------------------------------------------------------------------


class TestCommandTemplateFailures:
    def test_broken_enable_template_is_restoration_failure(self, tmp_path):
        """Disable works, enable cannot be rendered: fatal, never a bare KeyError."""
        switch = TemplateSwitch(enable_command="sh -c 'echo {oops}'", disable_command="true")
        controller = ExternalStateController(switch)
        guard = CancellationGuard(
            SingleInstanceLock(tmp_path / "template.lock"), controller, sleep=lambda _s: None
        )
        scheduler = CycleScheduler(
            RunConfig.create(1, 1, 1),
            controller,
            guard,
            reporter=ProgressReporter(sleep=lambda _s: None),
            sleep=lambda _s: None,
        )
        ok = subprocess.CompletedProcess(args=[], returncode=0)

        with patch("focus_timer.services.power_switch.subprocess.run", return_value=ok) as run:
            with pytest.raises(RestorationError) as exc_info:
                scheduler.run()

        assert "invalid command template" in exc_info.value.reason
        assert not exc_info.value.recovered
        assert [c.args[0] for c in run.call_args_list] == [["true"]]
        assert not (tmp_path / "template.lock").exists()


class TestRestorationRecovery:
    def test_guard_recovers_after_scheduler_gave_up(self, make_harness):
        """Scheduler exhausts its enable attempts, the guard's first one succeeds."""
        h = make_harness(focus=1, rest=1, cycles=2, fail_enable=3)

        with pytest.raises(RestorationError) as exc_info:
            h.scheduler.run()

        assert exc_info.value.recovered
        assert h.switch.count(ResourceState.ENABLED) == 4
        assert h.switch.state is ResourceState.ENABLED

    def test_unrecovered_when_guard_also_fails(self, make_harness):
        h = make_harness(focus=1, rest=1, cycles=1, fail_enable=-1)

        with pytest.raises(RestorationError) as exc_info:
            h.scheduler.run()

        assert not exc_info.value.recovered


class TestCycleCounter:
    def test_going_backwards_is_an_error(self, make_harness):
        h = make_harness()
        h.scheduler._enter(SchedulerState.FOCUSING, CycleState(2, Phase.FOCUSING))

        with pytest.raises(RuntimeError, match="went backwards"):
            h.scheduler._enter(SchedulerState.FOCUSING, CycleState(1, Phase.FOCUSING))
