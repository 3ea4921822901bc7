"""Configuration models for focus-timer.

``RunConfig`` is the validated, immutable description of a single run.
``AppConfig`` is the persisted user configuration (defaults, switch and
notification backends, restoration policy).
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError

DEFAULT_FOCUS_SECONDS = 1500
DEFAULT_REST_SECONDS = 300
DEFAULT_CYCLES = 1


class RunConfig(BaseModel):
    """Validated configuration of one run. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, strict=True)

    focus_duration: int = Field(..., gt=0, description="Focus time in seconds")
    rest_duration: int = Field(..., gt=0, description="Break time in seconds")
    cycle_count: int = Field(..., ge=1, description="Number of focus/break cycles")

    @classmethod
    def create(cls, focus: int, rest: int, cycles: int) -> RunConfig:
        """Build a RunConfig, raising ConfigError instead of ValidationError."""
        try:
            return cls(focus_duration=focus, rest_duration=rest, cycle_count=cycles)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"Invalid run configuration: {problems}") from e

    @property
    def total_seconds(self) -> int:
        return (self.focus_duration + self.rest_duration) * self.cycle_count


class TimerConfig(BaseModel):
    """Defaults used when a run does not pass explicit values."""

    focus: int = Field(default=DEFAULT_FOCUS_SECONDS, gt=0)
    rest: int = Field(default=DEFAULT_REST_SECONDS, gt=0)
    cycles: int = Field(default=DEFAULT_CYCLES, ge=1)


class SwitchConfig(BaseModel):
    """How the network interface is toggled."""

    backend: Literal["networksetup", "nmcli", "command", "noop"] = Field(
        default="networksetup"
    )
    interface: str = Field(default="en0")
    enable_command: str | None = Field(
        default=None, description="Command template for 'command' backend"
    )
    disable_command: str | None = Field(
        default=None, description="Command template for 'command' backend"
    )
    timeout: float = Field(default=10.0, gt=0)

    @field_validator("interface")
    @classmethod
    def validate_interface(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("interface cannot be empty")
        return v.strip()

    @field_validator("enable_command", "disable_command")
    @classmethod
    def validate_command_template(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            argv = shlex.split(v.format(interface="en0"))
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"invalid command template {v!r}: only {{interface}} may be "
                f"substituted, literal braces must be doubled ({e})"
            ) from e
        if not argv:
            raise ValueError("command template cannot be empty")
        return v


class RestoreConfig(BaseModel):
    """Bounded retry policy for re-enabling the interface."""

    attempts: int = Field(default=3, ge=1, le=10)
    backoff: float = Field(default=0.5, ge=0, le=5)


class NotificationConfig(BaseModel):
    """Cycle-complete notifications."""

    enabled: bool = Field(default=True)
    backend: Literal["osascript", "notify-send", "bell", "none"] = Field(
        default="osascript"
    )
    title: str = Field(default="Focus Timer")


class LockConfig(BaseModel):
    """Single-instance lock location."""

    path: str | None = Field(default=None, description="Override the lock file path")

    def resolve(self, default_dir: Path) -> Path:
        if self.path:
            return Path(self.path).expanduser()
        return default_dir / "focus_timer.lock"


class AppConfig(BaseModel):
    """Main focus-timer configuration."""

    timer: TimerConfig = Field(default_factory=TimerConfig)
    switch: SwitchConfig = Field(default_factory=SwitchConfig)
    restore: RestoreConfig = Field(default_factory=RestoreConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
