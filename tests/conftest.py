"""
Shared fixtures for the resumable test-suite.

Everything runs on a ``VirtualClock`` so delays complete instantly and the
order of events is fully deterministic.
"""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any

import pytest

from resumable.clock import VirtualClock
from resumable.executor import Executor
from resumable.fetch import FetchResponse
from resumable.outcome import Outcome
from resumable.task import Task
from resumable.timer import running_clock


@dataclass
class Recorder:
    """Collects narration lines and executor observations."""

    lines: list[str] = field(default_factory=list)
    outcomes: list[tuple[Task[Any], Outcome]] = field(default_factory=list)

    def narrate(self, text: str) -> None:
        self.lines.append(text)

    def observe(self, task: Task[Any], outcome: Outcome) -> None:
        self.outcomes.append((task, outcome))

    def outcomes_for(self, task: Task[Any]) -> list[Outcome]:
        return [outcome for seen, outcome in self.outcomes if seen is task]


@dataclass
class FakeFetcher:
    """Fetcher that answers immediately with a canned response or error."""

    response: FetchResponse | None = None
    error: BaseException | None = None
    requests: list[tuple[str, float]] = field(default_factory=list)

    def submit(self, url: str, timeout: float) -> Future[FetchResponse]:
        self.requests.append((url, timeout))
        future: Future[FetchResponse] = Future()
        if self.error is not None:
            future.set_exception(self.error)
        else:
            future.set_result(self.response or FetchResponse(200, ""))
        return future


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def executor(clock: VirtualClock, recorder: Recorder) -> Executor:
    return Executor(clock, observer=recorder.observe)


@pytest.fixture
def running(clock: VirtualClock) -> Iterator[VirtualClock]:
    """Make ``clock`` visible to tasks resumed by hand inside the test."""
    with running_clock(clock):
        yield clock


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
