"""Services for focus-timer."""

from .guard import CancellationGuard
from .lock import LockOwner, SingleInstanceLock
from .notifier import Notifier, create_notifier
from .power_switch import ExternalPowerSwitch, create_power_switch
from .progress import ProgressReporter
from .scheduler import CycleScheduler, RunListener
from .state_controller import ExternalStateController

__all__ = [
    "CancellationGuard",
    "CycleScheduler",
    "ExternalPowerSwitch",
    "ExternalStateController",
    "LockOwner",
    "Notifier",
    "ProgressReporter",
    "RunListener",
    "SingleInstanceLock",
    "create_notifier",
    "create_power_switch",
]
