"""Narrated demonstration routines.

Each routine is written out by hand as an explicit state machine so the
segments and the captured locals are visible. None of them print; narration
goes through the ``narrate`` callable (a loguru INFO line by default).
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Generator
from typing import Any, TypeVar

import httpx
from loguru import logger

from resumable.clock import coerce_finite_float
from resumable.errors import TransportError, ValidationError
from resumable.fetch import Fetcher, FetchResponse
from resumable.generator import resumable
from resumable.join import join
from resumable.outcome import Completed, Failed, Outcome, Suspended
from resumable.task import Task
from resumable.timer import now, yield_for
from resumable.wake import AwaitFuture

T = TypeVar("T")

Narrate = Callable[[str], None]

STATE_MACHINE_DELAY = 0.1
STEP_DELAY = 0.05
REQUEST_STAGE_DELAY = 0.03
ANSWER_DELAY = 0.01
CONCURRENT_DELAYS = (0.1, 0.05, 0.075)


def log_narration(text: str) -> None:
    logger.bind(component="demo").info(text)


class NarratedTask(Task[T]):
    def __init__(self, narrate: Narrate | None = None, **arguments: Any) -> None:
        super().__init__(**arguments)
        self.narrate: Narrate = narrate or log_narration


class StateMachineDemo(NarratedTask[float]):
    """One suspension point; completes with the elapsed seconds."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_SLEEP = enum.auto()

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                self.narrate("Starting async state machine...")
                start_time = now()
                return self.suspend(
                    self.Segment.AFTER_SLEEP,
                    yield_for(STATE_MACHINE_DELAY),
                    start_time=start_time,
                )
            case self.Segment.AFTER_SLEEP:
                elapsed = now() - self.local("start_time")
                self.narrate(f"Completed after {elapsed * 1000:.1f}ms")
                return Completed(elapsed)
        raise AssertionError(self.segment)


class MultipleAwaitsDemo(NarratedTask[None]):
    """Three sequential suspension points, one segment each."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_FIRST = enum.auto()
        AFTER_SECOND = enum.auto()
        AFTER_THIRD = enum.auto()

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                self.narrate("Starting task with multiple awaits...")
                self.narrate("Awaiting first operation...")
                return self.suspend(self.Segment.AFTER_FIRST, yield_for(STEP_DELAY))
            case self.Segment.AFTER_FIRST:
                self.narrate("First operation completed")
                self.narrate("Awaiting second operation...")
                return self.suspend(self.Segment.AFTER_SECOND, yield_for(STEP_DELAY))
            case self.Segment.AFTER_SECOND:
                self.narrate("Second operation completed")
                self.narrate("Awaiting third operation...")
                return self.suspend(self.Segment.AFTER_THIRD, yield_for(STEP_DELAY))
            case self.Segment.AFTER_THIRD:
                self.narrate("Third operation completed")
                self.narrate("All operations finished!")
                return Completed(None)
        raise AssertionError(self.segment)


class VariableScopingDemo(NarratedTask[int]):
    """Only ``important_value`` crosses the suspension point.

    ``temporary_value`` lives in a nested scope that ends before the
    suspension, so it is never part of the captured state.
    """

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_SLEEP = enum.auto()

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                self.narrate("Demonstrating variable scoping across awaits...")
                important_value = 42
                self.narrate(f"Before await: important_value = {important_value}")
                self._temporary_scope()
                return self.suspend(
                    self.Segment.AFTER_SLEEP,
                    yield_for(STEP_DELAY),
                    important_value=important_value,
                )
            case self.Segment.AFTER_SLEEP:
                important_value = self.local("important_value")
                self.narrate(f"After await: important_value = {important_value}")
                result = important_value * 2
                self.narrate(f"Computed result: {result}")
                return Completed(result)
        raise AssertionError(self.segment)

    def _temporary_scope(self) -> None:
        temporary_value = "temporary"
        self.narrate(f"Temporary value: {temporary_value}")


class ProcessRequest(NarratedTask[str]):
    """Validate, process and finalize a request, one suspension per stage.

    An id of ``0`` fails right after validation; no later stage runs.
    """

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_VALIDATION = enum.auto()
        AFTER_PROCESSING = enum.auto()
        AFTER_FINALIZE = enum.auto()

    def __init__(self, request_id: int, data: str, narrate: Narrate | None = None) -> None:
        super().__init__(narrate, request_id=request_id, data=data)

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                request_id, data = self.local("request_id"), self.local("data")
                self.narrate(f"Processing request with id: {request_id}, data: {data}")
                return self.suspend(
                    self.Segment.AFTER_VALIDATION,
                    yield_for(REQUEST_STAGE_DELAY),
                    request_id=request_id,
                    data=data,
                )
            case self.Segment.AFTER_VALIDATION:
                request_id, data = self.local("request_id"), self.local("data")
                if request_id == 0:
                    return Failed(ValidationError("Invalid ID: cannot be zero"))
                return self.suspend(
                    self.Segment.AFTER_PROCESSING,
                    yield_for(REQUEST_STAGE_DELAY),
                    request_id=request_id,
                    data=data,
                )
            case self.Segment.AFTER_PROCESSING:
                processed_data = (
                    f"Processed(id={self.local('request_id')}, data={self.local('data')})"
                )
                return self.suspend(
                    self.Segment.AFTER_FINALIZE,
                    yield_for(REQUEST_STAGE_DELAY),
                    processed_data=processed_data,
                )
            case self.Segment.AFTER_FINALIZE:
                return Completed(self.local("processed_data"))
        raise AssertionError(self.segment)


class FetchData(NarratedTask[str]):
    """GET ``url`` through the fetch collaborator; one suspension for the request."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_REQUEST = enum.auto()

    def __init__(
        self,
        url: str,
        fetcher: Fetcher,
        timeout: float = 10.0,
        narrate: Narrate | None = None,
    ) -> None:
        timeout = coerce_finite_float(timeout, name="timeout")
        if timeout <= 0.0:
            raise ValueError("timeout must be > 0.0")
        super().__init__(narrate, url=url, timeout=timeout)
        self.fetcher = fetcher

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                url = self.local("url")
                self.narrate(f"Fetching data from: {url}")
                future = self.fetcher.submit(url, self.local("timeout"))
                return self.suspend(
                    self.Segment.AFTER_REQUEST,
                    Suspended(AwaitFuture(future)),
                    future=future,
                )
            case self.Segment.AFTER_REQUEST:
                try:
                    response: FetchResponse = self.local("future").result()
                except (httpx.HTTPError, OSError) as exc:
                    return Failed(TransportError(f"Request failed: {exc}"))
                if not response.is_success:
                    return Failed(
                        TransportError(
                            f"HTTP error: {response.status_code}",
                            status_code=response.status_code,
                        )
                    )
                body = response.text
                self.narrate(f"Successfully fetched {len(body.encode('utf-8'))} bytes")
                return Completed(body)
        raise AssertionError(self.segment)


class LabeledDelay(NarratedTask[int]):
    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_SLEEP = enum.auto()

    def __init__(self, label: int, seconds: float, narrate: Narrate | None = None) -> None:
        super().__init__(narrate, label=label, seconds=seconds)

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                return self.suspend(
                    self.Segment.AFTER_SLEEP,
                    yield_for(self.local("seconds")),
                    label=self.local("label"),
                )
            case self.Segment.AFTER_SLEEP:
                label = self.local("label")
                self.narrate(f"Task {label} completed")
                return Completed(label)
        raise AssertionError(self.segment)


class ConcurrentExecutionDemo(NarratedTask[int]):
    """Join three delays; completes with the sum of their labels."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        JOINING = enum.auto()

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                self.narrate("Starting concurrent tasks...")
                joined = join(
                    LabeledDelay(label, seconds, self.narrate)
                    for label, seconds in enumerate(CONCURRENT_DELAYS, start=1)
                )
                return self.advance(self.Segment.JOINING, joined=joined)
            case self.Segment.JOINING:
                joined = self.local("joined")
                outcome = joined.resume()
                if isinstance(outcome, Suspended):
                    return self.suspend(self.Segment.JOINING, outcome, joined=joined)
                if isinstance(outcome, Failed):
                    return outcome
                results = outcome.value
                total = sum(results)
                self.narrate(
                    f"All tasks completed: {' + '.join(map(str, results))} = {total}"
                )
                return Completed(total)
        raise AssertionError(self.segment)


class AnswerTask(Task[int]):
    """Hand-written equivalent of :func:`answer`."""

    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_SLEEP = enum.auto()

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                return self.suspend(self.Segment.AFTER_SLEEP, yield_for(ANSWER_DELAY))
            case self.Segment.AFTER_SLEEP:
                return Completed(42)
        raise AssertionError(self.segment)


@resumable
def answer() -> Generator[Any, Any, int]:
    yield yield_for(ANSWER_DELAY)
    return 42


__all__ = [
    "AnswerTask",
    "ConcurrentExecutionDemo",
    "FetchData",
    "LabeledDelay",
    "MultipleAwaitsDemo",
    "Narrate",
    "NarratedTask",
    "ProcessRequest",
    "StateMachineDemo",
    "VariableScopingDemo",
    "answer",
    "log_narration",
]
