"""PID-backed single-instance lock file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

import psutil

from focus_timer.models.exceptions import AlreadyRunningError

logger = logging.getLogger(__name__)

# Process create times are floats; allow for rounding in the marker.
_CREATE_TIME_TOLERANCE = 1.0


@dataclass
class LockOwner:
    """Identity recorded in the lock marker."""

    pid: int
    create_time: float | None
    started_at: str  # ISO 8601

    def is_alive(self) -> bool:
        """True if the recorded process still exists and is the same process."""
        try:
            proc = psutil.Process(self.pid)
            if self.create_time is not None:
                if abs(proc.create_time() - self.create_time) > _CREATE_TIME_TOLERANCE:
                    # PID reused by an unrelated process
                    return False
            return proc.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            # Exists but belongs to someone else
            return True

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> LockOwner:
        return cls(
            pid=int(data["pid"]),
            create_time=data.get("create_time"),
            started_at=str(data.get("started_at", "")),
        )

    @classmethod
    def current(cls) -> LockOwner:
        pid = os.getpid()
        try:
            create_time = psutil.Process(pid).create_time()
        except psutil.Error:
            create_time = None
        return cls(
            pid=pid,
            create_time=create_time,
            started_at=datetime.now().astimezone().isoformat(),
        )


class SingleInstanceLock:
    """Host-local exclusive marker file.

    The marker is created atomically (``O_CREAT | O_EXCL``). A marker whose
    owner is dead, whose PID now belongs to another process, or which cannot
    be parsed is stale and gets reclaimed.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._owner: LockOwner | None = None

    @property
    def held(self) -> bool:
        return self._owner is not None

    def read_owner(self) -> LockOwner | None:
        """Owner recorded in the marker, or None if missing or unreadable."""
        try:
            with open(self.path, encoding="utf-8") as f:
                return LockOwner.from_dict(json.load(f))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("unreadable lock marker %s: %s", self.path, e)
            return None

    def acquire(self) -> None:
        """Create the marker.

        Raises:
            AlreadyRunningError: A live process holds the lock.
        """
        if self._owner is not None:
            raise AlreadyRunningError(self._owner.pid, self.path)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        owner = LockOwner.current()

        # Second attempt only after reclaiming a stale marker
        for _ in range(2):
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
            except FileExistsError:
                existing = self.read_owner()
                if existing is not None and existing.is_alive():
                    raise AlreadyRunningError(existing.pid, self.path) from None
                logger.warning(
                    "reclaiming stale lock %s (pid %s)",
                    self.path,
                    existing.pid if existing else "unknown",
                )
                self.path.unlink(missing_ok=True)
                continue

            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(owner.to_dict(), f)
            self._owner = owner
            logger.info("acquired lock %s (pid %d)", self.path, owner.pid)
            return

        existing = self.read_owner()
        raise AlreadyRunningError(existing.pid if existing else None, self.path)

    def release(self) -> None:
        """Remove the marker if it still names this process."""
        if self._owner is None:
            return
        current = self.read_owner()
        if current is not None and current.pid == self._owner.pid:
            self.path.unlink(missing_ok=True)
            logger.info("released lock %s", self.path)
        else:
            logger.warning("lock %s no longer ours, leaving it in place", self.path)
        self._owner = None
