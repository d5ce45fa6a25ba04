from __future__ import annotations

import enum

import pytest

from resumable.clock import VirtualClock
from resumable.demos import LabeledDelay
from resumable.errors import TaskStateError
from resumable.executor import Executor
from resumable.join import Join, join
from resumable.outcome import Completed, Failed, Outcome, Suspended
from resumable.task import Task
from resumable.timer import running_clock, yield_for
from resumable.wake import AnyOf


class FailAfter(Task[int]):
    class Segment(enum.Enum):
        INITIAL = enum.auto()
        AFTER_SLEEP = enum.auto()

    def __init__(self, seconds: float, error: Exception) -> None:
        super().__init__(seconds=seconds)
        self.error = error

    def step(self) -> Outcome:
        match self.segment:
            case self.Segment.INITIAL:
                return self.suspend(self.Segment.AFTER_SLEEP, yield_for(self.local("seconds")))
            case self.Segment.AFTER_SLEEP:
                return Failed(self.error)
        raise AssertionError(self.segment)


def test_results_follow_child_order_not_completion_order(
    executor: Executor, clock: VirtualClock, recorder
) -> None:
    children = [
        LabeledDelay(1, 0.1, recorder.narrate),
        LabeledDelay(2, 0.05, recorder.narrate),
        LabeledDelay(3, 0.075, recorder.narrate),
    ]
    outcome = executor.run(join(children))

    assert outcome == Completed([1, 2, 3])
    assert recorder.lines == ["Task 2 completed", "Task 3 completed", "Task 1 completed"]
    assert clock.now() == pytest.approx(0.1)


def test_children_overlap_instead_of_running_back_to_back(
    executor: Executor, clock: VirtualClock
) -> None:
    executor.run(join([LabeledDelay(n, 1.0) for n in range(5)]))
    assert clock.now() == pytest.approx(1.0)


@pytest.mark.parametrize("attempt", range(3))
def test_failing_child_surfaces_its_error(attempt: int) -> None:
    error = RuntimeError("child 2 failed")
    children = [LabeledDelay(1, 0.1), FailAfter(0.05, error), LabeledDelay(3, 0.075)]

    outcome = Executor(VirtualClock()).run(join(children))

    assert isinstance(outcome, Failed)
    assert outcome.error is error


def test_siblings_run_to_completion_after_a_failure(executor: Executor) -> None:
    children = [LabeledDelay(1, 0.1), FailAfter(0.01, ValueError("early")), LabeledDelay(3, 0.2)]
    executor.run(join(children))
    assert children[0].result == Completed(1)
    assert children[2].result == Completed(3)


def test_first_failure_is_chosen_by_index_not_by_time(executor: Executor) -> None:
    late = ValueError("late but first")
    early = ValueError("early but last")
    outcome = executor.run(join([FailAfter(0.3, late), LabeledDelay(2, 0.1), FailAfter(0.1, early)]))
    assert isinstance(outcome, Failed)
    assert outcome.error is late


def test_empty_join_completes_immediately(executor: Executor, recorder) -> None:
    task = join([])
    assert executor.run(task) == Completed([])
    assert [type(o) for o in recorder.outcomes_for(task)] == [Completed]


def test_join_waits_on_earliest_child(running: VirtualClock) -> None:
    joined = join([LabeledDelay(1, 0.1), LabeledDelay(2, 0.05)])
    outcome = joined.resume()

    assert isinstance(outcome, Suspended)
    assert isinstance(outcome.wake, AnyOf)
    assert outcome.wake.deadline == pytest.approx(0.05)
    assert joined.captured == {"remaining": 2}
    assert joined.segment is Join.Segment.WAITING


def test_only_ready_children_are_resumed(running: VirtualClock) -> None:
    slow, fast = LabeledDelay(1, 0.1), LabeledDelay(2, 0.05)
    joined = join([slow, fast])
    joined.resume()

    running.advance_to(0.05)
    joined.resume()

    assert fast.done
    assert not slow.done
    assert joined.remaining == 1


def test_join_rejects_duplicate_children() -> None:
    child = LabeledDelay(1, 0.1)
    with pytest.raises(ValueError, match="same task more than once"):
        join([child, child])


def test_join_rejects_finished_children(executor: Executor) -> None:
    child = LabeledDelay(1, 0.0)
    executor.run(child)
    with pytest.raises(TaskStateError, match="already finished"):
        join([child])


def test_child_suspended_before_joining_keeps_its_deadline(
    executor: Executor, clock: VirtualClock
) -> None:
    child = LabeledDelay(1, 1.0)
    with running_clock(clock):
        child.resume()

    assert executor.run(join([child, LabeledDelay(2, 0.5)])) == Completed([1, 2])
    assert clock.now() == pytest.approx(1.0)
