"""Bounded fixed-delay polling."""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable

log = logging.getLogger(__name__)


@dataclass
class PollResult:
    ok:       bool
    attempts: int


def poll(
    check:    Callable[[], bool],
    attempts: int,
    delay:    float,
    sleep:    Callable[[float], None] = time.sleep,
) -> PollResult:
    """
    Call check() up to `attempts` times, `delay` seconds apart.
    Returns on the first truthy result; no sleep after the final failure.
    An exception from check() counts as a failed attempt.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")

    for attempt in range(1, attempts + 1):
        try:
            if check():
                return PollResult(ok=True, attempts=attempt)
        except Exception as e:
            log.debug(f"poll attempt {attempt}/{attempts} raised: {e}")

        if attempt < attempts:
            sleep(delay)

    return PollResult(ok=False, attempts=attempts)
