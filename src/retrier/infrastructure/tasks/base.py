"""Base task interface"""

from abc import ABC, abstractmethod

from retrier.infrastructure.deadline import Scope


class TaskError(Exception):
    """A task attempt failed"""

    pass


class Task(ABC):
    """Abstract base class for tasks

    A task is run any number of times, each run under its own scope.
    Implementations must not rely on state left by a previous run.
    """

    @abstractmethod
    def run(self, scope: Scope) -> None:
        """Run the task once

        Returning means success; raising means failure. The run should
        return promptly once ``scope`` ends.

        Args:
            scope: Deadline scope of this attempt

        Raises:
            Exception: Any exception marks the attempt as failed
        """
        pass

    def describe(self) -> str:
        """Short description used in log output"""
        return type(self).__name__
