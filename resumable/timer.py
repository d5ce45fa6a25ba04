"""Timed suspension.

``yield_for`` is the only way a task asks to be put to sleep. It reads the
clock of the executor that is currently resuming the task, so tasks never
hold a reference to the executor itself.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from resumable.clock import Clock, coerce_finite_float
from resumable.errors import NoRunningExecutorError
from resumable.outcome import Suspended
from resumable.wake import Timer

_running_clock: ContextVar[Clock | None] = ContextVar("resumable_running_clock", default=None)


@contextmanager
def running_clock(clock: Clock) -> Iterator[Clock]:
    """Expose ``clock`` to tasks resumed inside the ``with`` block."""
    token = _running_clock.set(clock)
    try:
        yield clock
    finally:
        _running_clock.reset(token)


def current_clock() -> Clock:
    clock = _running_clock.get()
    if clock is None:
        raise NoRunningExecutorError("current_clock")
    return clock


def now() -> float:
    return current_clock().now()


def yield_for(duration: float) -> Suspended:
    """Suspend the calling task until at least ``duration`` seconds have passed.

    ``duration == 0`` yields once and is immediately eligible again.
    """
    seconds = coerce_finite_float(duration, name="duration")
    if seconds < 0.0:
        raise ValueError("duration must be >= 0.0")
    clock = _running_clock.get()
    if clock is None:
        raise NoRunningExecutorError("yield_for")
    return Suspended(Timer(deadline=clock.now() + seconds))


__all__ = [
    "current_clock",
    "now",
    "running_clock",
    "yield_for",
]
