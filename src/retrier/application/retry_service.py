"""Retry service - runs a task until it succeeds or a budget runs out"""

import logging
import threading
from typing import Optional

from tenacity import Retrying, retry_if_result

from retrier.domain.config.duration import format_duration
from retrier.domain.config.spec import RetrySpec
from retrier.domain.errors import AttemptsExceeded, TimeExceeded
from retrier.domain.models.run_state import RunState
from retrier.infrastructure.deadline import Scope, child_scope
from retrier.infrastructure.retry import sleep_within, stop_after_attempts, wait_backoff
from retrier.infrastructure.tasks.base import Task, TaskError

logger = logging.getLogger(__name__)


class _Outcome:
    """Result slot filled by the attempt thread"""

    def __init__(self) -> None:
        self.finished = threading.Event()
        self.error: Optional[BaseException] = None


class RetryService:
    """Service for running a task repeatedly under a retry spec

    Each attempt runs in its own thread under a per-attempt scope nested in
    the overall scope. The control thread races the attempt against the
    overall deadline, so a task that ignores cancellation still cannot hold
    the sequence past ``total_time``.
    """

    def __init__(self, spec: RetrySpec, task: Task):
        """Initialize retry service

        Args:
            spec: Retry parameters
            task: Task to run
        """
        self.spec = spec
        self.task = task

    def run(self) -> None:
        """Run the task until the consecutive-success requirement is met

        Raises:
            AttemptsExceeded: If the attempt budget is spent
            TimeExceeded: If the overall deadline elapses
        """
        spec = self.spec
        logger.info(f"Retrying {self.task.describe()} ({spec.describe()})")

        with child_scope(None, spec.total_time) as overall:
            state = RunState()

            def _advance_backoff() -> None:
                if spec.backoff:
                    state.advance_backoff()

            retrying = Retrying(
                stop=stop_after_attempts(spec.attempts),
                wait=wait_backoff(spec.sleep, spec.jitter, state),
                retry=retry_if_result(lambda satisfied: not satisfied),
                sleep=sleep_within(
                    overall,
                    on_interrupt=lambda: self._time_exceeded(state),
                    after_sleep=_advance_backoff,
                ),
                before_sleep=lambda retry_state: logger.info(
                    f"Sleeping for {retry_state.next_action.sleep:.3f}s"
                ),
                retry_error_callback=lambda retry_state: self._raise_attempts_exceeded(state),
            )
            retrying(self._attempt, overall, state)

        logger.info(f"Succeeded after {state.total_runs} attempt(s)")

    def _attempt(self, overall: Scope, state: RunState) -> bool:
        """Run one attempt and classify it

        Returns:
            True once enough consecutive successes have been seen
        """
        attempt_number = state.total_runs + 1
        logger.info(f"Running {self.task.describe()} (attempt {attempt_number})")

        outcome = _Outcome()
        with child_scope(overall, self.spec.task_time) as attempt_scope:
            worker = threading.Thread(
                target=self._run_task,
                args=(attempt_scope, outcome),
                name=f"retrier-attempt-{attempt_number}",
                daemon=True,
            )
            worker.start()

            overall.add_done_callback(outcome.finished.set)
            try:
                outcome.finished.wait()
            finally:
                overall.remove_done_callback(outcome.finished.set)

            if overall.done:
                # The worker may still be running; it is abandoned, not joined.
                raise self._time_exceeded(state)

        failed = (outcome.error is not None) != self.spec.invert
        if failed:
            error = outcome.error or TaskError("task succeeded but failure was expected")
            state.record_failure(error)
            logger.warning(f"Attempt {state.total_runs} failed: {error}")
        else:
            state.record_success()
            logger.info(f"Attempt {state.total_runs} succeeded")

        attempts = str(self.spec.attempts) if self.spec.attempts else "unlimited"
        logger.info(
            f"Progress: attempt {state.total_runs}/{attempts}, "
            f"consecutive {state.consecutive_successes}/{self.spec.required_successes}"
        )
        return state.consecutive_successes >= self.spec.required_successes

    def _run_task(self, scope: Scope, outcome: _Outcome) -> None:
        try:
            self.task.run(scope)
        except BaseException as e:
            outcome.error = e
        finally:
            outcome.finished.set()

    def _raise_attempts_exceeded(self, state: RunState) -> None:
        logger.error(f"Giving up after {state.total_runs} attempt(s)")
        raise AttemptsExceeded(state.total_runs, state.last_error) from state.last_error

    def _time_exceeded(self, state: RunState) -> TimeExceeded:
        logger.error(f"Overall deadline of {format_duration(self.spec.total_time)} reached")
        return TimeExceeded(self.spec.total_time, state.total_runs, state.last_error)


def retry(spec: RetrySpec, task: Task) -> None:
    """Run ``task`` until ``spec`` is satisfied

    Raises:
        AttemptsExceeded: If the attempt budget is spent
        TimeExceeded: If the overall deadline elapses
    """
    RetryService(spec, task).run()
