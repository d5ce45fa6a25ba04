"""
Generator-backed tasks.

This module provides the @resumable decorator, which turns a generator
function into a task factory. Python already compiles a generator into a
state machine with a resumable frame; ``GeneratorTask`` simply adapts that
frame to the :class:`~resumable.task.Task` protocol so the executor can drive
it exactly like a hand-written state machine.

Inside the generator:

* ``yield yield_for(seconds)`` suspends the task;
* ``value = yield other_task`` runs ``other_task`` as a delegate and sends
  back its value, or throws its error at the ``yield``;
* ``return value`` completes the task.

Usage::

    @resumable
    def answer() -> Generator[Any, Any, int]:
        yield yield_for(0.01)
        return 42

    Executor(VirtualClock()).run(answer())  # Completed(value=42)
"""

from __future__ import annotations

import enum
import inspect
from collections.abc import Callable, Generator
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from frozendict import frozendict

from resumable.outcome import Completed, Failed, Outcome, Suspended
from resumable.task import Task

P = ParamSpec("P")
T = TypeVar("T")


class GeneratorTask(Task[T]):
    """Task whose segments are the stretches between a generator's yields."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        RUNNING = enum.auto()
        DELEGATING = enum.auto()

    def __init__(
        self,
        func: Callable[..., Generator[Any, Any, T]],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        super().__init__()
        self._func = func
        self._args = args
        self._kwargs = kwargs
        self._gen: Generator[Any, Any, T] | None = None
        self._delegate: Task[Any] | None = None

    @property
    def name(self) -> str:
        return self._func.__qualname__

    @property
    def captured(self) -> frozendict[str, Any]:
        if self._gen is None or self._gen.gi_frame is None:
            return frozendict()
        return frozendict(self._gen.gi_frame.f_locals)

    def step(self) -> Outcome:
        if self._gen is None:
            produced = self._func(*self._args, **self._kwargs)
            if not inspect.isgenerator(produced):
                return Completed(produced)
            self._gen = produced
            self.segment = self.Segment.RUNNING
            return self._advance(self._gen.send, None)
        if self._delegate is not None:
            return self._drive_delegate()
        return self._advance(self._gen.send, None)

    def _advance(self, method: Callable[[Any], Any], argument: Any) -> Outcome:
        try:
            yielded = method(argument)
        except StopIteration as stop:
            return Completed(stop.value)

        match yielded:
            case Suspended():
                self.segment = self.Segment.RUNNING
                return yielded
            case Task():
                self._delegate = yielded
                self.segment = self.Segment.DELEGATING
                return self._drive_delegate()
            case _:
                assert self._gen is not None
                return self._advance(
                    self._gen.throw,
                    TypeError(
                        f"{self.name} yielded {yielded!r}; "
                        "yield a suspension from yield_for() or a Task"
                    ),
                )

    def _drive_delegate(self) -> Outcome:
        assert self._gen is not None and self._delegate is not None
        outcome = self._delegate.resume()
        match outcome:
            case Suspended():
                return outcome
            case Completed(value=value):
                self._delegate = None
                return self._advance(self._gen.send, value)
            case Failed(error=error):
                self._delegate = None
                return self._advance(self._gen.throw, error)
        raise AssertionError(outcome)

    def _discard_locals(self) -> None:
        super()._discard_locals()
        if self._gen is not None:
            self._gen.close()
        self._gen = None
        self._delegate = None


def resumable(
    func: Callable[P, Generator[Any, Any, T]],
) -> Callable[P, GeneratorTask[T]]:
    """
    Decorator that converts a generator function into a task factory.

    Calling the decorated function only records the arguments; the generator
    is created on the first ``resume()``, so building a task never runs any
    of its code.
    """

    @wraps(func)
    def factory(*args: P.args, **kwargs: P.kwargs) -> GeneratorTask[T]:
        return GeneratorTask(func, args, kwargs)

    factory.original_func = func  # type: ignore[attr-defined]
    return factory


__all__ = [
    "GeneratorTask",
    "resumable",
]
