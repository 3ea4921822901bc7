"""Cycle state, phases and run outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Phase(str, Enum):
    """The two sub-states of an active cycle."""

    FOCUSING = "focusing"
    RESTING = "resting"

    @property
    def label(self) -> str:
        return "Focus" if self is Phase.FOCUSING else "Break"


class ResourceState(str, Enum):
    """Power state of the external resource (network interface)."""

    ENABLED = "enabled"
    DISABLED = "disabled"

    @property
    def switch_word(self) -> str:
        """The on/off word most interface tools expect."""
        return "on" if self is ResourceState.ENABLED else "off"


class SchedulerState(str, Enum):
    """States of the cycle scheduler."""

    NOT_STARTED = "not_started"
    FOCUSING = "focusing"
    RESTING = "resting"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CycleState:
    """Where the run currently is."""

    current_cycle: int
    phase: Phase

    def describe(self, cycle_count: int) -> str:
        return f"Cycle {self.current_cycle}/{cycle_count}: {self.phase.label}"


class OutcomeKind(str, Enum):
    COMPLETED_ALL_CYCLES = "completed_all_cycles"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RunOutcome:
    """Terminal result of a run, produced once."""

    kind: OutcomeKind
    cycle: int | None = None
    phase: Phase | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def completed_all_cycles(cls, warnings: list[str] | None = None) -> RunOutcome:
        return cls(kind=OutcomeKind.COMPLETED_ALL_CYCLES, warnings=tuple(warnings or ()))

    @classmethod
    def cancelled_at(
        cls, cycle: int, phase: Phase, warnings: list[str] | None = None
    ) -> RunOutcome:
        return cls(
            kind=OutcomeKind.CANCELLED,
            cycle=cycle,
            phase=phase,
            warnings=tuple(warnings or ()),
        )

    @property
    def completed(self) -> bool:
        return self.kind is OutcomeKind.COMPLETED_ALL_CYCLES

    @property
    def cancelled(self) -> bool:
        return self.kind is OutcomeKind.CANCELLED

    @property
    def degraded(self) -> bool:
        """True if any cycle ran without the interface actually disabled."""
        return bool(self.warnings)

    def summary(self) -> str:
        if self.completed:
            return "All cycles finished"
        return f"Cancelled during cycle {self.cycle} ({self.phase.label.lower()})"


@dataclass(frozen=True)
class TickEvent:
    """One whole second of elapsed phase time."""

    elapsed: int
    remaining: int
    total: int
