"""Single owner of the external resource state."""

from __future__ import annotations

import logging
import subprocess

from focus_timer.models.cycle import ResourceState
from focus_timer.models.exceptions import ExternalActionError

from .power_switch import ExternalPowerSwitch

logger = logging.getLogger(__name__)


class ExternalStateController:
    """Wraps a power switch behind an idempotent ``set_state``.

    The underlying switch is invoked on every call, so asking for the state
    the controller already believes in still reaches the real interface.
    No retries happen here; callers own the retry policy.
    """

    def __init__(self, switch: ExternalPowerSwitch):
        self.switch = switch
        self._state: ResourceState | None = None

    @property
    def state(self) -> ResourceState | None:
        """Last state confirmed by the switch, ``None`` if never set."""
        return self._state

    def set_state(self, target: ResourceState) -> None:
        """Drive the resource to ``target``.

        Raises:
            ExternalActionError: The switch failed, is unavailable, timed out,
                or its command could not be built.
        """
        logger.info("setting interface %s via %s", target.value, self.switch.name)
        try:
            status = self.switch.apply(target)
        except FileNotFoundError as e:
            self._state = None
            raise ExternalActionError(target.value, f"command not found: {e.filename}") from e
        except subprocess.TimeoutExpired as e:
            self._state = None
            raise ExternalActionError(target.value, f"timed out after {e.timeout}s") from e
        except OSError as e:
            self._state = None
            raise ExternalActionError(target.value, str(e)) from e
        except ValueError as e:
            # Command could not be built, e.g. a broken template
            self._state = None
            raise ExternalActionError(target.value, str(e)) from e

        if status != 0:
            self._state = None
            raise ExternalActionError(target.value, f"exit status {status}")

        self._state = target
