from __future__ import annotations

import argparse
import math
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from frozendict import frozendict
from loguru import logger
from rich.console import Console

from resumable.clock import MonotonicClock, VirtualClock
from resumable.config import LOG_LEVELS, load_config
from resumable.demos import (
    ConcurrentExecutionDemo,
    FetchData,
    MultipleAwaitsDemo,
    ProcessRequest,
    StateMachineDemo,
    VariableScopingDemo,
    answer,
)
from resumable.executor import Executor
from resumable.fetch import Fetcher, HttpxFetcher
from resumable.outcome import Completed, Failed


@dataclass
class RunContext:
    config: frozendict[str, Any]
    console: Console
    executor: Executor
    fetcher: Fetcher | None

    def narrate(self, text: str) -> None:
        self.console.print(f"  {text}", markup=False, highlight=False)

    def report(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False)


def _state_machine(ctx: RunContext) -> None:
    ctx.executor.run(StateMachineDemo(ctx.narrate))


def _multiple_awaits(ctx: RunContext) -> None:
    ctx.executor.run(MultipleAwaitsDemo(ctx.narrate))


def _variable_scoping(ctx: RunContext) -> None:
    ctx.executor.run(VariableScopingDemo(ctx.narrate))


def _process_request(ctx: RunContext) -> None:
    match ctx.executor.run(ProcessRequest(42, "test-data", ctx.narrate)):
        case Completed(value=value):
            ctx.report(f"Result: {value}")
        case Failed(error=error):
            ctx.report(f"Error: {error}")


def _fetch(ctx: RunContext) -> None:
    if ctx.fetcher is None:
        ctx.narrate("Skipped (fetch disabled)")
        return
    task = FetchData(
        ctx.config["fetch.url"],
        ctx.fetcher,
        timeout=ctx.config["fetch.timeout"],
        narrate=ctx.narrate,
    )
    match ctx.executor.run(task):
        case Completed(value=body):
            preview = body[: ctx.config["narration.preview"]]
            ctx.report(f"Fetched data (first {len(preview)} chars): {preview}...")
        case Failed(error=error):
            ctx.report(f"Failed to fetch data: {error}")


def _concurrent(ctx: RunContext) -> None:
    ctx.executor.run(ConcurrentExecutionDemo(ctx.narrate))


def _sugar(ctx: RunContext) -> None:
    outcome = ctx.executor.run(answer())
    ctx.narrate(f"answer() resolved to {outcome.unwrap()}")


EXAMPLES: tuple[tuple[str, Callable[[RunContext], None]], ...] = (
    ("Async State Machine Example", _state_machine),
    ("Multiple Awaits Example", _multiple_awaits),
    ("Variable Scoping Example", _variable_scoping),
    ("Complex Async Function Example", _process_request),
    ("HTTP Request Example", _fetch),
    ("Concurrent Execution Example", _concurrent),
    ("Async Sugar Example", _sugar),
)


def positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: {raw!r}") from None
    if not math.isfinite(value) or value <= 0.0:
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {raw!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resumable-demo",
        description="Run the suspend/resume examples in order and narrate each step.",
    )
    parser.add_argument(
        "--virtual-time",
        action="store_const",
        const=True,
        default=None,
        help="Use a virtual clock so every delay completes instantly",
    )
    parser.add_argument(
        "--skip-fetch",
        action="store_true",
        help="Do not issue the outbound HTTP request",
    )
    parser.add_argument("--url", default=None, help="URL fetched by the HTTP example")
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=None,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="loguru level for scheduler diagnostics (default: WARNING)",
    )
    return parser


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(
    argv: Sequence[str] | None = None,
    console: Console | None = None,
    fetcher: Fetcher | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(
            {
                "clock.virtual": args.virtual_time,
                "fetch.enabled": False if args.skip_fetch else None,
                "fetch.url": args.url,
                "fetch.timeout": args.timeout,
                "log.level": args.log_level,
            }
        )
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(config["log.level"])

    clock = VirtualClock() if config["clock.virtual"] else MonotonicClock()
    owned: HttpxFetcher | None = None
    if not config["fetch.enabled"]:
        fetcher = None
    elif fetcher is None:
        fetcher = owned = HttpxFetcher()
    ctx = RunContext(
        config=config,
        console=console or Console(),
        executor=Executor(clock),
        fetcher=fetcher,
    )

    ctx.report("=== Suspend/Resume Examples ===\n")
    try:
        for number, (title, example) in enumerate(EXAMPLES, start=1):
            ctx.report(f"{number}. {title}:")
            example(ctx)
            ctx.report("")
    finally:
        if owned is not None:
            owned.close()
    ctx.report("=== All examples completed ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
