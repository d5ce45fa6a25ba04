from __future__ import annotations

from types import SimpleNamespace

import pytest

import resumable.clock as clock_module
from resumable.clock import Clock, MonotonicClock, VirtualClock


class FakeTime:
    def __init__(self, start: float = 100.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


@pytest.fixture
def fake_time(monkeypatch: pytest.MonkeyPatch) -> FakeTime:
    fake = FakeTime()
    monkeypatch.setattr(
        clock_module,
        "time",
        SimpleNamespace(monotonic=fake.monotonic, sleep=fake.sleep),
    )
    return fake


class TestVirtualClock:
    def test_starts_at_zero(self) -> None:
        assert VirtualClock().now() == 0.0

    def test_advance_jumps_forward_without_waiting(self) -> None:
        clock = VirtualClock(5.0)
        assert clock.advance_to(7.5) == 7.5
        assert clock.now() == 7.5

    def test_advance_never_moves_backwards(self) -> None:
        clock = VirtualClock(5.0)
        assert clock.advance_to(3.0) == 5.0

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_rejects_non_finite_deadline(self, value: float) -> None:
        with pytest.raises(ValueError, match="must be finite"):
            VirtualClock().advance_to(value)

    def test_rejects_non_numeric_start(self) -> None:
        with pytest.raises(TypeError, match="current_time must be float"):
            VirtualClock("1")  # type: ignore[arg-type]

    def test_wait_timeout_polls_only_when_a_timer_is_due(self) -> None:
        clock = VirtualClock()
        assert clock.wait_timeout(None) is None
        assert clock.wait_timeout(12.0) == 0.0

    def test_satisfies_clock_protocol(self) -> None:
        assert isinstance(VirtualClock(), Clock)


class TestMonotonicClock:
    def test_advance_sleeps_until_deadline(self, fake_time: FakeTime) -> None:
        clock = MonotonicClock()
        assert clock.advance_to(102.5) == 102.5
        assert fake_time.sleeps == [2.5]

    def test_advance_to_past_deadline_does_not_sleep(self, fake_time: FakeTime) -> None:
        clock = MonotonicClock()
        assert clock.advance_to(50.0) == 100.0
        assert fake_time.sleeps == []

    def test_wait_timeout_is_remaining_time(self, fake_time: FakeTime) -> None:
        clock = MonotonicClock()
        assert clock.wait_timeout(None) is None
        assert clock.wait_timeout(104.0) == 4.0
        assert clock.wait_timeout(90.0) == 0.0

    def test_satisfies_clock_protocol(self) -> None:
        assert isinstance(MonotonicClock(), Clock)
