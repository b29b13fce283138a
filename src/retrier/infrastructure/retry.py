"""Retry strategies built on tenacity.

This module provides the wait, sleep and stop strategies that plug the
retry orchestrator into ``tenacity.Retrying``.
"""

from __future__ import annotations

import logging
from typing import Callable

from tenacity import RetryCallState, stop_after_attempt, stop_never
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from retrier.domain.models.run_state import RunState
from retrier.infrastructure.deadline import Scope, sleep
from retrier.infrastructure.jitter import jitter

logger = logging.getLogger(__name__)


class wait_backoff(wait_base):
    """Wait ``base * multiplier`` plus up to ``variance`` seconds of jitter.

    The multiplier is read from the run state, so it follows the
    success/failure history rather than the attempt number.
    """

    def __init__(self, base: float, variance: float, state: RunState) -> None:
        self.base = base
        self.variance = variance
        self.state = state

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.base * self.state.backoff_multiplier + jitter(self.variance)


def stop_after_attempts(attempts: int) -> stop_base:
    """Stop after ``attempts`` invocations, or never when ``attempts`` is 0"""
    if attempts == 0:
        return stop_never
    return stop_after_attempt(attempts)


def sleep_within(
    scope: Scope,
    on_interrupt: Callable[[], BaseException],
    after_sleep: Callable[[], None] | None = None,
) -> Callable[[float], None]:
    """Create a tenacity sleep function that is cut short when ``scope`` ends

    Args:
        scope: Scope whose end interrupts the sleep
        on_interrupt: Factory for the exception raised when interrupted
        after_sleep: Optional callback run after an uninterrupted sleep

    Returns:
        Sleep function accepted by ``tenacity.Retrying(sleep=...)``
    """

    def _sleep(seconds: float) -> None:
        if not sleep(scope, float(seconds)):
            logger.debug(f"Sleep of {float(seconds):.3f}s interrupted")
            raise on_interrupt()
        if after_sleep is not None:
            after_sleep()

    return _sleep
