"""Task implementations"""

from retrier.infrastructure.tasks.base import Task, TaskError
from retrier.infrastructure.tasks.callable_task import CallableTask
from retrier.infrastructure.tasks.exec_task import ExecTask
from retrier.infrastructure.tasks.factory import TaskFactory
from retrier.infrastructure.tasks.http_task import HttpTask

__all__ = ["Task", "TaskError", "CallableTask", "ExecTask", "HttpTask", "TaskFactory"]
