"""HTTP fetch collaborator.

The executor is single-threaded, so the request itself runs on a worker
thread and hands its result back through a :class:`~concurrent.futures.Future`.
A task waiting on the request suspends with
:class:`~resumable.wake.AwaitFuture` and is resumed once the future is done.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol

import httpx

DEFAULT_USER_AGENT = "resumable-demo"


@dataclass(frozen=True)
class FetchResponse:
    status_code: int
    text: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class Fetcher(Protocol):
    def submit(self, url: str, timeout: float) -> Future[FetchResponse]:
        """Start a GET request; the future fails with ``httpx.HTTPError`` on transport errors."""
        ...


@dataclass
class HttpxFetcher:
    """Thin wrapper around :class:`httpx.Client` running on one worker thread."""

    default_headers: dict[str, str] | None = None
    follow_redirects: bool = True
    transport: httpx.BaseTransport | None = None
    _pool: ThreadPoolExecutor = field(
        default_factory=lambda: ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="resumable-fetch",
        ),
        repr=False,
    )

    def build_headers(self) -> dict[str, str]:
        headers = {"User-Agent": DEFAULT_USER_AGENT}
        if self.default_headers:
            headers.update(self.default_headers)
        return headers

    def submit(self, url: str, timeout: float) -> Future[FetchResponse]:
        return self._pool.submit(self._get, url, timeout)

    def _get(self, url: str, timeout: float) -> FetchResponse:
        with httpx.Client(
            timeout=timeout,
            headers=self.build_headers(),
            follow_redirects=self.follow_redirects,
            transport=self.transport,
        ) as client:
            response = client.get(url)
        return FetchResponse(status_code=response.status_code, text=response.text)

    def close(self) -> None:
        self._pool.shutdown(wait=False)


__all__ = [
    "DEFAULT_USER_AGENT",
    "FetchResponse",
    "Fetcher",
    "HttpxFetcher",
]
