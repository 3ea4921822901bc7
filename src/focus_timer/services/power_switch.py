"""Power switches that toggle the real network interface.

A switch is a black box: ``apply(state)`` runs whatever command or API turns
the interface on or off and returns its exit status. Switches never retry
and never raise for a non-zero status; interpreting the status is the
controller's job.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod

from focus_timer.models.config_models import SwitchConfig
from focus_timer.models.cycle import ResourceState
from focus_timer.models.exceptions import ConfigError

logger = logging.getLogger(__name__)


class ExternalPowerSwitch(ABC):
    """Abstract interface toggler."""

    @abstractmethod
    def apply(self, state: ResourceState) -> int:
        """Drive the interface to ``state``. Returns the exit status."""

    @property
    def name(self) -> str:
        """Switch type identifier (for logging/debugging)."""
        return type(self).__name__


class CommandSwitch(ExternalPowerSwitch):
    """Runs an external command per state.

    Raises ``OSError`` if the command cannot be started and
    ``subprocess.TimeoutExpired`` if it does not finish in time.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    @abstractmethod
    def command_for(self, state: ResourceState) -> list[str]:
        """Build the argv for ``state``."""

    def apply(self, state: ResourceState) -> int:
        argv = self.command_for(state)
        logger.debug("running %s", shlex.join(argv))
        result = subprocess.run(
            argv,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=self.timeout,
            check=False,
        )
        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
            logger.warning(
                "%s exited with %d: %s", argv[0], result.returncode, stderr or "-"
            )
        return result.returncode


class NetworksetupSwitch(CommandSwitch):
    """macOS: ``networksetup -setairportpower <iface> on|off``."""

    def __init__(self, interface: str = "en0", timeout: float = 10.0):
        super().__init__(timeout=timeout)
        self.interface = interface

    def command_for(self, state: ResourceState) -> list[str]:
        return ["networksetup", "-setairportpower", self.interface, state.switch_word]


class NmcliSwitch(CommandSwitch):
    """Linux NetworkManager: ``nmcli radio wifi on|off``."""

    def command_for(self, state: ResourceState) -> list[str]:
        return ["nmcli", "radio", "wifi", state.switch_word]


class TemplateSwitch(CommandSwitch):
    """User-supplied command templates, ``{interface}`` is substituted.

    A template that cannot be rendered raises ``ValueError`` from ``apply``.
    """

    def __init__(
        self,
        enable_command: str,
        disable_command: str,
        interface: str = "en0",
        timeout: float = 10.0,
    ):
        super().__init__(timeout=timeout)
        self.enable_command = enable_command
        self.disable_command = disable_command
        self.interface = interface

    def command_for(self, state: ResourceState) -> list[str]:
        template = (
            self.enable_command
            if state is ResourceState.ENABLED
            else self.disable_command
        )
        try:
            argv = shlex.split(template.format(interface=shlex.quote(self.interface)))
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"invalid command template {template!r}: {e}") from e
        if not argv:
            raise ValueError(f"command template for {state.value} is empty")
        return argv


class NoopSwitch(ExternalPowerSwitch):
    """Dry-run switch: records requests, touches nothing."""

    def __init__(self):
        self.calls: list[ResourceState] = []

    def apply(self, state: ResourceState) -> int:
        logger.info("dry run: would set interface %s", state.value)
        self.calls.append(state)
        return 0


def create_power_switch(config: SwitchConfig, dry_run: bool = False) -> ExternalPowerSwitch:
    """Build the switch selected in the configuration."""
    if dry_run or config.backend == "noop":
        return NoopSwitch()
    if config.backend == "networksetup":
        return NetworksetupSwitch(interface=config.interface, timeout=config.timeout)
    if config.backend == "nmcli":
        return NmcliSwitch(timeout=config.timeout)
    if config.backend == "command":
        if not config.enable_command or not config.disable_command:
            raise ConfigError(
                "switch.backend 'command' requires switch.enable_command "
                "and switch.disable_command"
            )
        return TemplateSwitch(
            enable_command=config.enable_command,
            disable_command=config.disable_command,
            interface=config.interface,
            timeout=config.timeout,
        )
    raise ConfigError(f"Unknown switch backend: {config.backend}")
