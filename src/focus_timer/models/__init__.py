"""Data models for focus-timer."""

from .config_models import AppConfig, RunConfig
from .cycle import (
    CycleState,
    OutcomeKind,
    Phase,
    ResourceState,
    RunOutcome,
    SchedulerState,
    TickEvent,
)
from .exceptions import (
    AlreadyRunningError,
    ConfigError,
    ExternalActionError,
    FocusTimerError,
    RestorationError,
)

__all__ = [
    "AppConfig",
    "RunConfig",
    "CycleState",
    "OutcomeKind",
    "Phase",
    "ResourceState",
    "RunOutcome",
    "SchedulerState",
    "TickEvent",
    "FocusTimerError",
    "ConfigError",
    "AlreadyRunningError",
    "ExternalActionError",
    "RestorationError",
]
