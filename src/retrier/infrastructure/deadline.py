"""Cancellable deadline scopes.

A scope ends either when it is cancelled or when its deadline passes. Child
scopes end with their parent, so a per-attempt scope created under the
overall scope never outlives it. Scopes are released with ``cancel()`` or by
using them as context managers.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class EndReason(str, Enum):
    """Why a scope ended"""

    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline exceeded"


class Scope:
    """A cancellable, optionally timed scope

    Args:
        parent: Enclosing scope (None for a root scope)
        timeout: Seconds until the scope expires on its own (0 = no own bound)
    """

    def __init__(self, parent: Optional[Scope] = None, timeout: float = 0.0):
        if timeout < 0:
            raise ValueError("timeout must be non-negative")

        self._parent = parent
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._reason: Optional[EndReason] = None
        self._timer: Optional[threading.Timer] = None

        deadline = parent.deadline if parent is not None else None
        if timeout > 0:
            own_deadline = time.monotonic() + timeout
            deadline = own_deadline if deadline is None else min(deadline, own_deadline)
        self.deadline = deadline

        if timeout > 0:
            self._timer = threading.Timer(timeout, self._end, args=(EndReason.DEADLINE_EXCEEDED,))
            self._timer.daemon = True
            self._timer.start()

        if parent is not None:
            parent.add_done_callback(self._on_parent_done)

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()

    @property
    def done(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[EndReason]:
        return self._reason

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None when the scope is untimed"""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the scope ends or ``timeout`` elapses

        Returns:
            True if the scope has ended
        """
        return self._event.wait(timeout)

    def cancel(self) -> None:
        """End the scope and release its timer and parent registration"""
        self._end(EndReason.CANCELLED)
        if self._parent is not None:
            self._parent.remove_done_callback(self._on_parent_done)

    def add_done_callback(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once the scope ends (immediately if it already has)"""
        with self._lock:
            if self._reason is None:
                self._callbacks.append(callback)
                return
        callback()

    def remove_done_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _on_parent_done(self) -> None:
        self._end(self._parent.reason or EndReason.CANCELLED)

    def _end(self, reason: EndReason) -> None:
        with self._lock:
            if self._reason is not None:
                return
            self._reason = reason
            callbacks, self._callbacks = self._callbacks, []

        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
        if reason is EndReason.DEADLINE_EXCEEDED:
            logger.debug("Scope deadline exceeded")
        for callback in callbacks:
            callback()


def child_scope(parent: Optional[Scope], timeout: float = 0.0) -> Scope:
    """Create a scope bounded by ``parent`` and, if non-zero, by ``timeout``

    A zero timeout yields a scope that is cancellable but has no bound beyond
    its parent's.
    """
    return Scope(parent, timeout)


def sleep(scope: Scope, seconds: float) -> bool:
    """Pause for ``seconds`` unless ``scope`` ends first

    Returns:
        True if the full duration elapsed, False if the scope ended early
    """
    if seconds <= 0:
        return not scope.done
    return not scope.wait(min(seconds, threading.TIMEOUT_MAX))
