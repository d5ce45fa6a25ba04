"""Time sources for the executor.

The executor never reads time directly; it asks its clock. ``VirtualClock``
jumps straight to the next deadline so examples and tests run instantly and
deterministically, while ``MonotonicClock`` really waits.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


def coerce_finite_float(value: float, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be float, got {type(value).__name__}")
    coerced = float(value)
    if math.isnan(coerced) or math.isinf(coerced):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return coerced


@runtime_checkable
class Clock(Protocol):
    def now(self) -> float:
        """Current time in seconds."""
        ...

    def advance_to(self, deadline: float) -> float:
        """Move time forward to at least ``deadline`` and return the new time."""
        ...

    def wait_timeout(self, deadline: float | None) -> float | None:
        """Real seconds to block on external completions before ``deadline``.

        ``None`` means block until something completes.
        """
        ...


@dataclass
class VirtualClock:
    _mut_current_time: float = 0.0

    def __post_init__(self) -> None:
        self._mut_current_time = coerce_finite_float(
            self._mut_current_time,
            name="current_time",
        )

    def now(self) -> float:
        return self._mut_current_time

    def advance_to(self, deadline: float) -> float:
        target = coerce_finite_float(deadline, name="deadline")
        if target > self._mut_current_time:
            self._mut_current_time = target
        return self._mut_current_time

    def wait_timeout(self, deadline: float | None) -> float | None:
        # Virtual time passes instantly, so only poll when a timer is due.
        if deadline is None:
            return None
        return 0.0


class MonotonicClock:
    """Wall-clock time based on :func:`time.monotonic`."""

    def now(self) -> float:
        return time.monotonic()

    def advance_to(self, deadline: float) -> float:
        target = coerce_finite_float(deadline, name="deadline")
        while (remaining := target - self.now()) > 0:
            time.sleep(remaining)
        return self.now()

    def wait_timeout(self, deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return max(0.0, deadline - self.now())


__all__ = [
    "Clock",
    "MonotonicClock",
    "VirtualClock",
    "coerce_finite_float",
]
