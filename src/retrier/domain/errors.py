"""Terminal errors of a retry sequence.

Individual attempt failures never leave the orchestrator; only these do.
"""

from typing import Optional

from retrier.domain.config.duration import format_duration


class RetrierError(Exception):
    """Base exception for all retrier errors"""

    pass


class AttemptsExceeded(RetrierError):
    """Raised when the attempt budget is spent without enough consecutive successes.

    Attributes:
        attempts: Number of attempts made
        last_error: Error raised by the last failed attempt, if any
    """

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"maximum attempts exceeded ({attempts})")


class TimeExceeded(RetrierError):
    """Raised when the overall deadline elapses, during an attempt or a sleep.

    Attributes:
        total_time: The overall time budget in seconds
        attempts: Number of attempts that completed before the deadline
        last_error: Error raised by the last failed attempt, if any
    """

    def __init__(
        self,
        total_time: float,
        attempts: int,
        last_error: Optional[BaseException] = None,
    ) -> None:
        self.total_time = total_time
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"maximum time exceeded ({format_duration(total_time)})")
