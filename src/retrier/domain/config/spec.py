"""Retry specification model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from retrier.domain.config.duration import format_duration, parse_duration


class RetrySpec(BaseModel):
    """Parameters of one retry sequence.

    Zero counts and durations mean "no limit" rather than "zero limit".
    Durations are stored as float seconds; duration strings ("1m30s"),
    plain numbers and timedeltas are accepted on input.

    Attributes:
        attempts: Maximum number of task invocations (0 = unlimited)
        backoff: Double the sleep after each failure, reset on success
        consecutive: Back-to-back successes required (0 is treated as 1)
        invert: Treat task failures as successes and vice versa
        jitter: Upper bound (exclusive) of random delay added to each sleep
        sleep: Base delay between attempts
        task_time: Maximum time for a single attempt (0 = unbounded)
        total_time: Maximum time for the whole sequence (0 = unbounded)
    """

    attempts: int = Field(0, ge=0)
    backoff: bool = False
    consecutive: int = Field(0, ge=0)
    invert: bool = False
    jitter: float = Field(0.0, ge=0.0)
    sleep: float = Field(0.0, ge=0.0)
    task_time: float = Field(0.0, ge=0.0)
    total_time: float = Field(0.0, ge=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("jitter", "sleep", "task_time", "total_time", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        return parse_duration(value)

    @property
    def required_successes(self) -> int:
        """Effective consecutive-success requirement (at least 1)"""
        return max(self.consecutive, 1)

    def describe(self) -> str:
        """Human readable one-line summary used in log output"""
        attempts = str(self.attempts) if self.attempts else "unlimited"
        total = format_duration(self.total_time) if self.total_time else "unbounded"
        task = format_duration(self.task_time) if self.task_time else "unbounded"
        return (
            f"attempts={attempts} consecutive={self.required_successes} "
            f"sleep={format_duration(self.sleep)} jitter={format_duration(self.jitter)} "
            f"backoff={self.backoff} invert={self.invert} "
            f"task_time={task} total_time={total}"
        )
