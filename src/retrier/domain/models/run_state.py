"""Run state - counters of a single retry sequence"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RunState:
    """Mutable counters owned by one orchestrator call"""

    total_runs: int = 0
    consecutive_successes: int = 0
    backoff_multiplier: int = 1
    last_error: Optional[BaseException] = None

    def record_success(self) -> None:
        """Extend the success streak and reset the backoff multiplier"""
        self.backoff_multiplier = 1
        self.consecutive_successes += 1
        self.total_runs += 1

    def record_failure(self, error: Optional[BaseException] = None) -> None:
        """Break the success streak"""
        self.consecutive_successes = 0
        self.last_error = error
        self.total_runs += 1

    def advance_backoff(self) -> None:
        """Double the backoff multiplier"""
        self.backoff_multiplier *= 2
