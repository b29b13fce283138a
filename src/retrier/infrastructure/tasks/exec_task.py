"""Task that runs a command as a subprocess"""

import logging
import shlex
import subprocess
from typing import Optional, Sequence

from retrier.infrastructure.deadline import Scope
from retrier.infrastructure.tasks.base import Task, TaskError

logger = logging.getLogger(__name__)


class ExecTask(Task):
    """Run a command; a zero exit status is success

    The process is killed as soon as the attempt scope ends.
    """

    def __init__(self, name: str, args: Optional[Sequence[str]] = None, quiet: bool = False):
        """Initialize exec task

        Args:
            name: Executable name or path
            args: Command arguments
            quiet: Discard the command's stdout and stderr
        """
        self.name = name
        self.args = list(args or [])
        self.quiet = quiet

    def describe(self) -> str:
        return shlex.join([self.name, *self.args])

    def run(self, scope: Scope) -> None:
        output = subprocess.DEVNULL if self.quiet else None
        try:
            process = subprocess.Popen(
                [self.name, *self.args],
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=output,
            )
        except OSError as e:
            raise TaskError(f"failed to start {self.name}: {e}") from e

        def _kill() -> None:
            if process.poll() is None:
                logger.debug(f"Killing pid {process.pid}: scope ended")
                process.kill()

        scope.add_done_callback(_kill)
        try:
            returncode = process.wait()
        finally:
            scope.remove_done_callback(_kill)
            if process.poll() is None:
                process.kill()
                process.wait()

        if returncode != 0:
            if scope.done and returncode < 0:
                raise TaskError(f"{self.name}: {scope.reason.value}, process killed")
            raise TaskError(f"{self.name}: exit status {returncode}")
