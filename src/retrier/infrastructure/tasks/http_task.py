"""Task that issues an HTTP GET request"""

import logging

import requests

from retrier.infrastructure.deadline import EndReason, Scope
from retrier.infrastructure.tasks.base import Task, TaskError

logger = logging.getLogger(__name__)


class HttpTask(Task):
    """GET a URL; a 200 response is success

    The request timeout is the time left in the attempt scope. requests
    applies it to each connect and read, not to the whole request, so a
    server that trickles its response can keep an attempt running past
    task_time. requests cannot be interrupted mid-call; such attempts, and
    attempts under an untimed scope, are bounded by the overall deadline.
    """

    def __init__(self, url: str):
        self.url = url

    def describe(self) -> str:
        return f"GET {self.url}"

    def run(self, scope: Scope) -> None:
        if scope.done:
            raise TaskError(f"{self.url}: {scope.reason.value}")

        timeout = scope.remaining()
        if timeout is not None and timeout <= 0:
            raise TaskError(f"{self.url}: {EndReason.DEADLINE_EXCEEDED.value}")
        logger.debug(f"HTTP GET {self.url} (timeout={timeout})")
        try:
            with requests.get(self.url, timeout=timeout, stream=True) as response:
                if response.status_code != requests.codes.ok:
                    raise TaskError(
                        f"HTTP status was {response.status_code} {response.reason or ''}".rstrip()
                    )
        except requests.exceptions.RequestException as e:
            raise TaskError(f"{self.url}: {e}") from e
