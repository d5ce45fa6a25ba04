"""Single-threaded cooperative executor.

The executor owns a FIFO ready queue and a pending set ordered by wake
deadline. It resumes ready tasks one segment at a time and, when nothing is
ready, moves its clock to the earliest deadline and promotes every task whose
wake condition now holds.
"""

from __future__ import annotations

import heapq
import itertools
import math
from collections import deque
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, wait
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger

from resumable.clock import Clock, MonotonicClock
from resumable.errors import ExecutorError, TaskStateError
from resumable.outcome import Completed, Failed, Outcome, Suspended
from resumable.task import Task
from resumable.timer import running_clock
from resumable.wake import WakeCondition

T = TypeVar("T")

Observer = Callable[[Task[Any], Outcome], None]

log = logger.bind(component="executor")


@dataclass(order=True)
class PendingEntry:
    deadline: float
    sequence: int
    task: Task[Any] = field(compare=False)
    wake: WakeCondition = field(compare=False)


class Executor:
    """Run-loop that drives tasks to completion.

    Args:
        clock: Time source. Defaults to :class:`MonotonicClock`; pass a
            :class:`~resumable.clock.VirtualClock` for instant, deterministic runs.
        observer: Called with ``(task, outcome)`` after every ``resume()``.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        observer: Observer | None = None,
    ) -> None:
        self.clock: Clock = clock or MonotonicClock()
        self._observer = observer
        self._ready: deque[Task[Any]] = deque()
        self._pending: list[PendingEntry] = []
        self._scheduled: set[int] = set()
        self._sequence = itertools.count()
        self._running = False

    @property
    def ready_count(self) -> int:
        return len(self._ready)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, task: Task[Any]) -> Task[Any]:
        """Schedule ``task``.

        A fresh task is enqueued as ready. A task that was already resumed
        elsewhere and is suspended is parked until its wake condition holds.
        """
        if task.done:
            raise TaskStateError(f"{task!r} has already finished")
        if task.task_id in self._scheduled:
            raise ExecutorError(f"{task!r} is already scheduled on this executor")
        self._scheduled.add(task.task_id)
        if task.wake is not None:
            self._park(task, task.wake)
        else:
            self._ready.append(task)
            log.debug("submitted {}", task)
        return task

    def run(self, task: Task[T]) -> Completed[T] | Failed:
        """Block until ``task`` is terminal and return its outcome."""
        if self._running:
            raise ExecutorError("Executor.run() is not re-entrant; join or delegate instead")
        if task.result is not None:
            return task.result
        if task.task_id not in self._scheduled:
            self.submit(task)

        self._running = True
        try:
            with running_clock(self.clock):
                return self._loop(task)
        finally:
            self._running = False

    def _loop(self, root: Task[T]) -> Completed[T] | Failed:
        while True:
            if not self._ready:
                if not self._pending:
                    raise ExecutorError(f"Nothing left to run but {root!r} is not terminal")
                self._wait_for_wakeups()
                continue

            current = self._ready.popleft()
            if current.result is not None:
                # Driven to the end by a join or delegating task meanwhile.
                self._scheduled.discard(current.task_id)
                if current is root:
                    return current.result
                continue
            wake = current.wake
            if wake is not None and not wake.is_ready(self.clock.now()):
                # Resumed elsewhere since it was queued; wait on its new condition.
                self._park(current, wake)
                continue

            outcome = current.resume()
            if self._observer is not None:
                self._observer(current, outcome)

            match outcome:
                case Suspended(wake=wake):
                    self._park(current, wake)
                case Completed() | Failed():
                    self._scheduled.discard(current.task_id)
                    log.debug("{} finished: {}", current, outcome)
                    if current is root:
                        return outcome

    def _park(self, task: Task[Any], wake: WakeCondition) -> None:
        deadline = wake.deadline
        sort_key = math.inf if deadline is None else deadline
        heapq.heappush(self._pending, PendingEntry(sort_key, next(self._sequence), task, wake))
        log.debug("{} suspended until {}", task, "completion" if deadline is None else deadline)

    def _wait_for_wakeups(self) -> None:
        now = self.clock.now()
        if not any(entry.wake.is_ready(now) for entry in self._pending):
            head = self._pending[0].deadline
            deadline = None if math.isinf(head) else head
            futures = [f for entry in self._pending for f in entry.wake.futures()]
            if futures:
                done, _ = wait(
                    futures,
                    timeout=self.clock.wait_timeout(deadline),
                    return_when=FIRST_COMPLETED,
                )
                if not done and deadline is not None:
                    self.clock.advance_to(deadline)
            elif deadline is not None:
                self.clock.advance_to(deadline)
            else:
                raise ExecutorError("Pending tasks wait on conditions that can never be met")

        promoted = self._promote(self.clock.now())
        if not promoted and not any(entry.wake.futures() for entry in self._pending):
            raise ExecutorError(
                f"No pending task became ready at t={self.clock.now()}; "
                "a wake condition reports a deadline it does not honour"
            )

    def _promote(self, now: float) -> int:
        still_pending: list[PendingEntry] = []
        promoted = 0
        for entry in sorted(self._pending):
            if entry.wake.is_ready(now):
                self._ready.append(entry.task)
                promoted += 1
            else:
                still_pending.append(entry)
        heapq.heapify(still_pending)
        self._pending = still_pending
        if promoted:
            log.debug("promoted {} task(s) at t={}", promoted, now)
        return promoted


__all__ = [
    "Executor",
    "Observer",
    "PendingEntry",
]
