from __future__ import annotations

from typing import Any


class ResumableError(Exception):
    """Base class for errors raised by resumable tasks and the executor."""


class ValidationError(ResumableError):
    """Raised when an input fails a precondition of a task."""


class TransportError(ResumableError):
    """Raised when the fetch collaborator fails or answers with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TaskStateError(ResumableError):
    """Raised when a terminal task is resumed again."""


class NoRunningExecutorError(ResumableError, RuntimeError):
    """Raised when a suspension is requested outside of a running executor."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"{operation}() called outside of a running executor\n"
            f"Hint: submit the task with `Executor().run(task)` instead of calling resume() directly"
        )


class ExecutorError(ResumableError):
    """Raised when the run-loop cannot make progress toward the root task."""


class ConfigError(KeyError):
    """Raised when an unknown configuration key is supplied or requested."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(
            f"Unknown configuration key: {key!r}\n"
            f"Hint: known keys are listed in `resumable.config.DEFAULT_CONFIG`"
        )


__all__ = [
    "ConfigError",
    "ExecutorError",
    "NoRunningExecutorError",
    "ResumableError",
    "TaskStateError",
    "TransportError",
    "ValidationError",
]
