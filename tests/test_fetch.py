from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from resumable.clock import VirtualClock
from resumable.demos import FetchData
from resumable.errors import TransportError
from resumable.executor import Executor
from resumable.fetch import DEFAULT_USER_AGENT, FetchResponse, HttpxFetcher
from resumable.outcome import Completed, Failed

URL = "https://example.test/data"


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=f"ok from {request.url.path} as {request.headers['User-Agent']}")


def _server_error(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text="unavailable")


def _refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def make_fetcher() -> Iterator:
    created: list[HttpxFetcher] = []

    def factory(handler) -> HttpxFetcher:
        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        created.append(fetcher)
        return fetcher

    yield factory
    for fetcher in created:
        fetcher.close()


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [(200, True), (204, True), (299, True), (301, False), (404, False), (500, False)],
)
def test_is_success_covers_2xx_only(status_code: int, expected: bool) -> None:
    assert FetchResponse(status_code, "").is_success is expected


def test_submit_runs_the_request_off_thread(make_fetcher) -> None:
    response = make_fetcher(_ok).submit(URL, 5.0).result(timeout=5)
    assert response == FetchResponse(200, f"ok from /data as {DEFAULT_USER_AGENT}")


def test_transport_errors_surface_through_the_future(make_fetcher) -> None:
    future = make_fetcher(_refused).submit(URL, 5.0)
    assert isinstance(future.exception(timeout=5), httpx.ConnectError)


def test_default_headers_are_merged() -> None:
    fetcher = HttpxFetcher(default_headers={"Accept": "application/json"})
    try:
        assert fetcher.build_headers() == {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
        }
    finally:
        fetcher.close()


def test_fetch_task_end_to_end(make_fetcher) -> None:
    task = FetchData(URL, make_fetcher(_ok), narrate=lambda _: None)
    outcome = Executor(VirtualClock()).run(task)
    assert isinstance(outcome, Completed)
    assert outcome.value.startswith("ok from /data")


def test_fetch_task_reports_bad_status(make_fetcher) -> None:
    task = FetchData(URL, make_fetcher(_server_error), narrate=lambda _: None)
    outcome = Executor(VirtualClock()).run(task)
    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, TransportError)
    assert outcome.error.status_code == 503


def test_fetch_task_reports_transport_failure(make_fetcher) -> None:
    task = FetchData(URL, make_fetcher(_refused), narrate=lambda _: None)
    outcome = Executor(VirtualClock()).run(task)
    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, TransportError)
