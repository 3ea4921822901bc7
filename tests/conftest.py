"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real filesystem, the real
network interface and real time.
"""

from __future__ import annotations

import logging
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from focus_timer.models.config_models import RunConfig
from focus_timer.models.cycle import ResourceState
from focus_timer.services.guard import CancellationGuard
from focus_timer.services.lock import SingleInstanceLock
from focus_timer.services.notifier import Notifier
from focus_timer.services.power_switch import ExternalPowerSwitch
from focus_timer.services.progress import ProgressReporter
from focus_timer.services.scheduler import CycleScheduler
from focus_timer.services.state_controller import ExternalStateController


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class RecordingSwitch(ExternalPowerSwitch):
    """Power switch that records every request into a shared event list.

    ``fail_enable`` / ``fail_disable`` are the number of leading calls for
    that state that return a non-zero status; ``-1`` means every call fails.
    """

    def __init__(self, events: list[str], fail_enable: int = 0, fail_disable: int = 0):
        self.events = events
        self.fail = {
            ResourceState.ENABLED: fail_enable,
            ResourceState.DISABLED: fail_disable,
        }
        self.calls: list[ResourceState] = []
        self.state = ResourceState.ENABLED

    def apply(self, state: ResourceState) -> int:
        self.calls.append(state)
        self.events.append("enable" if state is ResourceState.ENABLED else "disable")
        remaining = self.fail[state]
        if remaining != 0:
            if remaining > 0:
                self.fail[state] = remaining - 1
            return 1
        self.state = state
        return 0

    def count(self, state: ResourceState) -> int:
        return sum(1 for c in self.calls if c is state)


class RecordingNotifier(Notifier):
    def __init__(self, events: list[str], status: int = 0, raises: bool = False):
        self.events = events
        self.status = status
        self.raises = raises
        self.messages: list[tuple[str, str]] = []

    def send(self, title: str, message: str) -> int:
        self.events.append("notify")
        self.messages.append((title, message))
        if self.raises:
            raise RuntimeError("notification daemon gone")
        return self.status


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logging(tmp_path):
    """Keep the rotating log file inside tmp_path and reset the logger singleton."""
    import focus_timer.utils.logger as logger_mod

    logger_mod._logger = None
    logging.getLogger("focus_timer").handlers.clear()
    with patch("focus_timer.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    for handler in logging.getLogger("focus_timer").handlers:
        handler.close()
    logging.getLogger("focus_timer").handlers.clear()
    logger_mod._logger = None


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Also patches get_config_service everywhere commands look it up.
    """
    from focus_timer.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    svc = ConfigService(config_dir=tmp_path / "config", runtime_dir=tmp_path / "run")
    with patch(
        "focus_timer.services.config_service.get_config_service", return_value=svc
    ), patch(
        "focus_timer.commands.run_command.get_config_service", return_value=svc
    ), patch(
        "focus_timer.commands.restore_command.get_config_service", return_value=svc
    ), patch(
        "focus_timer.commands.status_command.get_config_service", return_value=svc
    ), patch(
        "focus_timer.commands.config.get_config_service", return_value=svc
    ):
        yield svc
    get_config_service.cache_clear()


# ---------------------------------------------------------------------------
# Scheduler harness
# ---------------------------------------------------------------------------


@pytest.fixture()
def events() -> list[str]:
    return []


@pytest.fixture()
def make_harness(tmp_path, events):
    """Factory building a scheduler wired to fakes.

    ``on_tick(n)`` is called from the fake sleep before the n-th tick
    (1-based, counted across the whole run) so tests can inject
    cancellation or signals at precise points.
    """

    def _make(
        focus: int = 2,
        rest: int = 1,
        cycles: int = 2,
        fail_enable: int = 0,
        fail_disable: int = 0,
        on_tick=None,
        notifier: Notifier | None = None,
        lock_path=None,
        signals=None,
        attempts: int = 3,
    ) -> SimpleNamespace:
        tick_count = 0

        def tick_sleep(_seconds: float) -> None:
            nonlocal tick_count
            tick_count += 1
            events.append("tick")
            if on_tick is not None:
                on_tick(tick_count)

        switch = RecordingSwitch(events, fail_enable=fail_enable, fail_disable=fail_disable)
        controller = ExternalStateController(switch)
        lock = SingleInstanceLock(lock_path or tmp_path / "focus_timer.lock")
        guard = CancellationGuard(
            lock,
            controller,
            attempts=attempts,
            backoff=0.5,
            signals=signals,
            sleep=lambda _s: None,
        )
        scheduler = CycleScheduler(
            RunConfig.create(focus, rest, cycles),
            controller,
            guard,
            reporter=ProgressReporter(sleep=tick_sleep),
            notifier=notifier or RecordingNotifier(events),
            enable_attempts=attempts,
            enable_backoff=0.5,
            sleep=lambda _s: None,
        )
        return SimpleNamespace(
            scheduler=scheduler,
            guard=guard,
            lock=lock,
            switch=switch,
            controller=controller,
            events=events,
        )

    return _make


@pytest.fixture()
def recording_switch(events):
    return RecordingSwitch(events)


@pytest.fixture()
def recording_notifier_cls():
    return RecordingNotifier


@pytest.fixture()
def recording_switch_cls():
    return RecordingSwitch
