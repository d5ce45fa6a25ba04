"""Join several independently suspending tasks into one."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from typing import Any

from loguru import logger

from resumable.errors import TaskStateError
from resumable.outcome import Completed, Failed, Outcome, Suspended, is_terminal
from resumable.task import Task
from resumable.timer import now
from resumable.wake import AnyOf

log = logger.bind(component="join")


class Join(Task[list[Any]]):
    """Composite task that completes once every child is terminal.

    On each resume every running child whose wake condition holds (or that
    has not started yet) is resumed once, in child-index order. A child that
    suspended under another driver is not resumed before its wake condition
    holds, and one finished elsewhere contributes its recorded result.
    Siblings of a failed child keep running; the first failure by index is
    reported after all children have finished.
    """

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        WAITING = enum.auto()

    def __init__(self, tasks: Iterable[Task[Any]]) -> None:
        children = tuple(tasks)
        if len({child.task_id for child in children}) != len(children):
            raise ValueError("join() received the same task more than once")
        for child in children:
            if child.done:
                raise TaskStateError(f"cannot join {child!r}: it has already finished")
        super().__init__()
        self.children = children
        self._slots: list[Completed[Any] | Failed | None] = [None] * len(children)
        self.remaining = len(children)

    def step(self) -> Outcome:
        current = now()
        for index, child in enumerate(self.children):
            if self._slots[index] is not None:
                continue
            if child.done:
                # Finished by another driver, e.g. the executor it was submitted to.
                outcome = child.result
            elif child.wake is not None and not child.wake.is_ready(current):
                continue
            else:
                outcome = child.resume()
                if not is_terminal(outcome):
                    continue
            self._slots[index] = outcome
            self.remaining -= 1
            log.debug("child {} of {} finished: {}", index, self, outcome)

        if self.remaining:
            waiting = tuple(
                child.wake
                for slot, child in zip(self._slots, self.children)
                if slot is None and child.wake is not None
            )
            return self.suspend(
                self.Segment.WAITING,
                Suspended(AnyOf(waiting)),
                remaining=self.remaining,
            )
        return self._combine()

    def _combine(self) -> Completed[list[Any]] | Failed:
        values: list[Any] = []
        for slot in self._slots:
            if isinstance(slot, Failed):
                return slot
            assert slot is not None
            values.append(slot.value)
        return Completed(values)


def join(tasks: Iterable[Task[Any]]) -> Join:
    return Join(tasks)


__all__ = [
    "Join",
    "join",
]
