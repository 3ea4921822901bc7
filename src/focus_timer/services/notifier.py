"""Cycle-complete notifications (best effort)."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod

from focus_timer.models.config_models import NotificationConfig
from focus_timer.utils.ui.console import get_console

logger = logging.getLogger(__name__)

_NOTIFY_TIMEOUT = 5.0


class Notifier(ABC):
    """Sends a desktop notification. Never raises."""

    @abstractmethod
    def send(self, title: str, message: str) -> int:
        """Send a notification. Returns an exit status (0 on success)."""


class CommandNotifier(Notifier):
    """Notifier backed by an external command."""

    @abstractmethod
    def command_for(self, title: str, message: str) -> list[str]:
        """Build the argv for a notification."""

    def send(self, title: str, message: str) -> int:
        argv = self.command_for(title, message)
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=_NOTIFY_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("notification via %s failed: %s", argv[0], e)
            return 1
        if result.returncode != 0:
            logger.warning("%s exited with %d", argv[0], result.returncode)
        return result.returncode


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class OsascriptNotifier(CommandNotifier):
    """macOS notification center via AppleScript."""

    def command_for(self, title: str, message: str) -> list[str]:
        script = (
            f"display notification {_applescript_quote(message)} "
            f"with title {_applescript_quote(title)}"
        )
        return ["osascript", "-e", script]


class NotifySendNotifier(CommandNotifier):
    """freedesktop notifications via ``notify-send``."""

    def command_for(self, title: str, message: str) -> list[str]:
        return ["notify-send", title, message]


class BellNotifier(Notifier):
    """Rings the terminal bell."""

    def send(self, title: str, message: str) -> int:
        get_console().bell()
        return 0


class NullNotifier(Notifier):
    def send(self, title: str, message: str) -> int:
        return 0


def create_notifier(config: NotificationConfig) -> Notifier:
    """Build the notifier selected in the configuration."""
    if not config.enabled or config.backend == "none":
        return NullNotifier()
    if config.backend == "osascript":
        return OsascriptNotifier()
    if config.backend == "notify-send":
        return NotifySendNotifier()
    return BellNotifier()
