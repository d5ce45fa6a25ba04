"""Results of a single ``Task.resume()`` call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeAlias, TypeVar

from resumable.wake import WakeCondition

T = TypeVar("T")


@dataclass(frozen=True)
class Suspended:
    """The task reached a suspension point and must not run before ``wake`` holds."""

    wake: WakeCondition


@dataclass(frozen=True)
class Completed(Generic[T]):
    """Terminal: the task finished with a value."""

    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failed:
    """Terminal: the task stopped with an error. No later segment ran."""

    error: Exception

    def unwrap(self) -> NoReturn:
        raise self.error


Terminal: TypeAlias = Completed[Any] | Failed
Outcome: TypeAlias = Suspended | Terminal


def is_terminal(outcome: Outcome) -> bool:
    return isinstance(outcome, (Completed, Failed))


__all__ = [
    "Completed",
    "Failed",
    "Outcome",
    "Suspended",
    "Terminal",
    "is_terminal",
]
