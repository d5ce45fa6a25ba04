"""
resumable: a small cooperative execution core for suspend/resume control flow.

Tasks are explicit state machines (or generators wrapped with ``@resumable``)
that run one segment at a time. ``yield_for`` suspends a task, ``join``
combines tasks, and ``Executor.run`` drives everything to completion on a
single thread.
"""

from resumable.clock import Clock, MonotonicClock, VirtualClock
from resumable.config import DEFAULT_CONFIG, load_config
from resumable.errors import (
    ConfigError,
    ExecutorError,
    NoRunningExecutorError,
    ResumableError,
    TaskStateError,
    TransportError,
    ValidationError,
)
from resumable.executor import Executor
from resumable.generator import GeneratorTask, resumable
from resumable.join import Join, join
from resumable.outcome import Completed, Failed, Outcome, Suspended, is_terminal
from resumable.task import Task, TerminalSegment
from resumable.timer import current_clock, now, running_clock, yield_for
from resumable.wake import AnyOf, AwaitFuture, Timer, WakeCondition

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "AnyOf",
    "AwaitFuture",
    "Clock",
    "Completed",
    "ConfigError",
    "Executor",
    "ExecutorError",
    "Failed",
    "GeneratorTask",
    "Join",
    "MonotonicClock",
    "NoRunningExecutorError",
    "Outcome",
    "ResumableError",
    "Suspended",
    "Task",
    "TaskStateError",
    "TerminalSegment",
    "Timer",
    "TransportError",
    "ValidationError",
    "VirtualClock",
    "WakeCondition",
    "current_clock",
    "is_terminal",
    "join",
    "load_config",
    "now",
    "resumable",
    "running_clock",
    "yield_for",
]
