"""Explicit task state machines.

A task is a value with a ``resume()`` operation. Every call runs the code of
the current *segment* (the stretch between two suspension points) and
returns an :class:`~resumable.outcome.Outcome`. The task remembers two
things between calls:

* ``segment``: which segment runs next, a member of the task kind's own
  ``Segment`` enumeration (``INITIAL``, ``AFTER_…``), or a :class:`TerminalSegment`
  tag once finished;
* ``captured``: the locals whose live range crosses the upcoming suspension
  point, and nothing else.

Subclasses implement :meth:`Task.step` and move between segments with
:meth:`Task.suspend` and :meth:`Task.advance`. Both *replace* the captured
locals, so a value that is not handed over explicitly is dropped at the
suspension point, exactly like a scope that ends before an ``await``.

Example::

    class Countdown(Task[str]):
        class Segment(enum.Enum):
            INITIAL = enum.auto()
            AFTER_SLEEP = enum.auto()

        def __init__(self, label: str) -> None:
            super().__init__(label=label)

        def step(self) -> Outcome:
            match self.segment:
                case self.Segment.INITIAL:
                    label = self.local("label")
                    return self.suspend(self.Segment.AFTER_SLEEP, yield_for(1.0), label=label)
                case self.Segment.AFTER_SLEEP:
                    return Completed(f"{self.local('label')} done")
            raise AssertionError(self.segment)
"""

from __future__ import annotations

import enum
import itertools
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from frozendict import frozendict

from resumable.errors import TaskStateError
from resumable.outcome import Completed, Failed, Outcome, Suspended
from resumable.timer import current_clock
from resumable.wake import WakeCondition

T = TypeVar("T")

_task_ids = itertools.count(1)


class TerminalSegment(enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class Task(ABC, Generic[T]):
    """A unit of suspendable work driven one segment at a time."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()

    def __init__(self, **arguments: Any) -> None:
        # Arguments are the locals of the initial segment; nothing runs yet.
        self.task_id: int = next(_task_ids)
        self.segment: enum.Enum = self.Segment.INITIAL
        self._mut_locals: dict[str, Any] = dict(arguments)
        self._result: Completed[T] | Failed | None = None
        self._wake: WakeCondition | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def captured(self) -> frozendict[str, Any]:
        """Snapshot of the locals persisted across the upcoming suspension point."""
        return frozendict(self._mut_locals)

    @property
    def done(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Completed[T] | Failed | None:
        return self._result

    @property
    def wake(self) -> WakeCondition | None:
        """Condition from the last suspension; ``None`` before the first resume and once done."""
        return self._wake

    def resume(self) -> Outcome:
        """Run the current segment up to the next suspension point or to the end.

        Raises:
            TaskStateError: The task already finished, or the wake condition of
                its last suspension does not hold yet.
        """
        if self._result is not None:
            raise TaskStateError(f"{self!r} has already finished and cannot be resumed")
        if self._wake is not None and not self._wake.is_ready(current_clock().now()):
            raise TaskStateError(f"{self!r} resumed before its wake condition holds")
        self._wake = None
        try:
            outcome = self.step()
        except Exception as exc:
            outcome = Failed(exc)

        match outcome:
            case Suspended(wake=wake):
                self._wake = wake
                return outcome
            case Completed():
                self.segment = TerminalSegment.COMPLETED
            case Failed():
                self.segment = TerminalSegment.FAILED
            case _:
                self.segment = TerminalSegment.FAILED
                outcome = Failed(
                    TypeError(f"{self.name}.step() must return an Outcome, got {outcome!r}")
                )
        self._discard_locals()
        self._result = outcome
        return outcome

    @abstractmethod
    def step(self) -> Outcome:
        """Execute the segment named by ``self.segment``."""

    def suspend(self, segment: enum.Enum, request: Suspended, **live: Any) -> Suspended:
        """Stop at a suspension point; ``live`` becomes the whole captured state."""
        self.segment = segment
        self._mut_locals = dict(live)
        return request

    def advance(self, segment: enum.Enum, **live: Any) -> Outcome:
        """Fall through into ``segment`` without suspending."""
        self.segment = segment
        self._mut_locals = dict(live)
        return self.step()

    def local(self, name: str) -> Any:
        return self._mut_locals[name]

    def _discard_locals(self) -> None:
        self._mut_locals = {}

    def __repr__(self) -> str:
        return f"<{self.name} #{self.task_id} {self.segment.name}>"


__all__ = [
    "Task",
    "TerminalSegment",
]
