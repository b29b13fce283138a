"""Task that wraps a plain callable"""

from typing import Callable, Optional

from retrier.infrastructure.deadline import Scope
from retrier.infrastructure.tasks.base import Task


class CallableTask(Task):
    """Adapt a ``fn(scope)`` callable to the task interface"""

    def __init__(self, fn: Callable[[Scope], object], name: Optional[str] = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", repr(fn))

    def describe(self) -> str:
        return self.name

    def run(self, scope: Scope) -> None:
        self.fn(scope)
