"""Factory for creating tasks from a command line target"""

import logging
from typing import Optional, Sequence

from retrier.infrastructure.tasks.base import Task
from retrier.infrastructure.tasks.exec_task import ExecTask
from retrier.infrastructure.tasks.http_task import HttpTask

logger = logging.getLogger(__name__)


class TaskFactory:
    """Factory for creating task instances"""

    URL_PREFIXES = ("http://", "https://")

    @classmethod
    def create(
        cls,
        target: str,
        args: Optional[Sequence[str]] = None,
        quiet: bool = False,
    ) -> Task:
        """Create a task for a command or URL

        Args:
            target: Command name or http(s) URL
            args: Command arguments (ignored for URLs)
            quiet: Silence the command's output

        Returns:
            Task instance

        Raises:
            ValueError: If target is empty
        """
        if not target:
            raise ValueError("no command given")

        if target.startswith(cls.URL_PREFIXES):
            if args:
                logger.warning(f"Ignoring extra arguments for URL target: {' '.join(args)}")
            logger.debug(f"Creating HTTP task for {target}")
            return HttpTask(target)

        logger.debug(f"Creating exec task for {target}")
        return ExecTask(target, args, quiet=quiet)
