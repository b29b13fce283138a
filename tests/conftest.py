"""Shared test helpers"""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional

import pytest

from retrier.infrastructure.deadline import Scope
from retrier.infrastructure.tasks.base import Task, TaskError

# Allowed difference between expected and measured durations.
EPSILON = 0.15


class Result:
    def __init__(self, elapsed: float, error: Optional[BaseException]):
        self.elapsed = elapsed
        self.error = error

    @property
    def failed(self) -> bool:
        return self.error is not None


class RecordingTask(Task):
    """Task wrapper recording the number of calls and each call's outcome"""

    def __init__(self, fn: Callable[[Scope, int], None]):
        self.fn = fn
        self.calls = 0
        self.results: List[Result] = []
        self._lock = threading.Lock()

    def run(self, scope: Scope) -> None:
        with self._lock:
            index = self.calls
            self.calls += 1
        start = time.monotonic()
        error = None
        try:
            self.fn(scope, index)
        except BaseException as e:
            error = e
            raise
        finally:
            with self._lock:
                self.results.append(Result(time.monotonic() - start, error))


def succeed(scope: Scope, index: int) -> None:
    pass


def fail(scope: Scope, index: int) -> None:
    raise TaskError("boom")


def blocking(seconds: float) -> Callable[[Scope, int], None]:
    """Wait ``seconds`` honoring cancellation; fails if the scope ends first"""

    def _run(scope: Scope, index: int) -> None:
        if scope.wait(seconds):
            raise TaskError(scope.reason.value)

    return _run


def stubborn(seconds: float) -> Callable[[Scope, int], None]:
    """Sleep ``seconds`` ignoring cancellation, then fail"""

    def _run(scope: Scope, index: int) -> None:
        time.sleep(seconds)
        raise TaskError("too slow")

    return _run


def pattern(outcomes: str) -> Callable[[Scope, int], None]:
    """Succeed ('S') or fail ('F') per call; the last entry repeats"""

    def _run(scope: Scope, index: int) -> None:
        outcome = outcomes[min(index, len(outcomes) - 1)]
        if outcome == "F":
            raise TaskError(f"call {index} failed")

    return _run


def assert_duration(expected: float, actual: float, epsilon: float = EPSILON) -> None:
    assert expected - epsilon <= actual <= expected + epsilon, (
        f"A duration of {expected}s +/- {epsilon}s is expected but got {actual:.3f}s"
    )


@pytest.fixture
def recorded_sleeps(monkeypatch):
    """Replace the cancellable sleep used between attempts with a recorder"""
    sleeps: List[float] = []

    def fake_sleep(scope: Scope, seconds: float) -> bool:
        sleeps.append(seconds)
        return True

    monkeypatch.setattr("retrier.infrastructure.retry.sleep", fake_sleep)
    return sleeps
