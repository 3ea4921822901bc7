"""Bounded retry with doubling backoff."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_call(
    func: Callable[[], T],
    *,
    attempts: int,
    backoff: float,
    retry_on: tuple[type[BaseException], ...],
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operation",
) -> T:
    """Call ``func`` up to ``attempts`` times.

    Waits ``backoff``, then ``2 * backoff`` and so on between attempts. The
    last exception is re-raised once attempts are exhausted.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    last_error: BaseException | None = None
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except retry_on as e:
            last_error = e
            logger.warning(
                "%s failed (attempt %d/%d): %s", description, attempt, attempts, e
            )
            if attempt < attempts and backoff > 0:
                sleep(backoff * (2 ** (attempt - 1)))

    assert last_error is not None
    raise last_error
