"""Wake conditions attached to a suspension request."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class WakeCondition(Protocol):
    @property
    def deadline(self) -> float | None: ...

    def is_ready(self, now: float) -> bool: ...

    def futures(self) -> tuple[Future[Any], ...]: ...


@dataclass(frozen=True)
class Timer:
    """Ready once the clock reaches ``deadline``."""

    deadline: float

    def is_ready(self, now: float) -> bool:
        return now >= self.deadline

    def futures(self) -> tuple[Future[Any], ...]:
        return ()


@dataclass(frozen=True, eq=False)
class AwaitFuture:
    """Ready once an externally driven future has finished."""

    future: Future[Any]

    @property
    def deadline(self) -> float | None:
        return None

    def is_ready(self, now: float) -> bool:
        return self.future.done()

    def futures(self) -> tuple[Future[Any], ...]:
        return (self.future,)


@dataclass(frozen=True)
class AnyOf:
    """Ready as soon as any member condition is ready."""

    conditions: tuple[WakeCondition, ...]

    @property
    def deadline(self) -> float | None:
        deadlines = [c.deadline for c in self.conditions if c.deadline is not None]
        return min(deadlines) if deadlines else None

    def is_ready(self, now: float) -> bool:
        return any(c.is_ready(now) for c in self.conditions)

    def futures(self) -> tuple[Future[Any], ...]:
        return tuple(f for c in self.conditions for f in c.futures())


__all__ = [
    "AnyOf",
    "AwaitFuture",
    "Timer",
    "WakeCondition",
]
