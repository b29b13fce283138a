"""CLI interface for retrier"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from click.core import ParameterSource

from retrier.application.retry_service import RetryService
from retrier.domain.config.duration import parse_duration
from retrier.domain.errors import RetrierError
from retrier.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from retrier.infrastructure.tasks.factory import TaskFactory

logger = logging.getLogger(__name__)

# CLI option name -> RetrySpec field
SPEC_OPTIONS = {
    "attempts": "attempts",
    "backoff": "backoff",
    "consecutive": "consecutive",
    "invert": "invert",
    "jitter": "jitter",
    "max_time": "total_time",
    "sleep": "sleep",
    "task_time": "task_time",
}


class DurationParamType(click.ParamType):
    """Click parameter type for durations such as ``5s`` or ``1m30s``"""

    name = "duration"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> float:
        if isinstance(value, float):
            return value
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationParamType()


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Setup logging configuration"""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.CRITICAL
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)
    for logger_name in logging.Logger.manager.loggerDict:
        if logger_name.startswith("retrier"):
            logging.getLogger(logger_name).setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _explicit_options(ctx: click.Context, names: Dict[str, str]) -> Dict[str, Any]:
    """Collect options given on the command line (or via envvar), keyed by model field"""
    overrides = {}
    for option, field in names.items():
        source = ctx.get_parameter_source(option)
        if source in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            overrides[field] = ctx.params[option]
    return overrides


@click.command(context_settings={"allow_interspersed_args": False})
@click.option("--attempts", "-a", type=click.IntRange(min=0), help="Maximum number of attempts (0 = unlimited) [default: 3]")
@click.option("--backoff", is_flag=True, help="Use exponential backoff when sleeping")
@click.option("--consecutive", "-c", type=click.IntRange(min=0), help="Required number of back to back successes")
@click.option("--invert", is_flag=True, help="Treat command failure as success and vice versa")
@click.option("--jitter", type=DURATION, help="Time range randomly added to sleep")
@click.option("--max-time", type=DURATION, help="Maximum total time (0 = unbounded) [default: 1m]")
@click.option("--sleep", type=DURATION, help="Time to sleep between attempts [default: 5s]")
@click.option("--task-time", type=DURATION, help="Maximum time for a single attempt (0 = unbounded)")
@click.option("--quiet", "-q", is_flag=True, help="Silence all output")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to .retrier.yml config file",
)
@click.version_option(package_name="retrier")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(
    ctx,
    attempts: Optional[int],
    backoff: bool,
    consecutive: Optional[int],
    invert: bool,
    jitter: Optional[float],
    max_time: Optional[float],
    sleep: Optional[float],
    task_time: Optional[float],
    quiet: bool,
    verbose: bool,
    config: Optional[Path],
    command: Tuple[str, ...],
):
    """Retry COMMAND (or GET a URL) until it succeeds.

    COMMAND: Command with arguments, or an http(s):// URL
    """
    setup_logging(verbose=verbose, quiet=quiet)

    try:
        config_manager = ConfigManager(config_path=config)
        output = config_manager.get_output_config(
            _explicit_options(ctx, {"quiet": "quiet", "verbose": "verbose"})
        )
        if output.quiet or output.verbose:
            setup_logging(verbose=output.verbose, quiet=output.quiet)
        spec = config_manager.get_retry_spec(_explicit_options(ctx, SPEC_OPTIONS))
    except ConfigurationError as e:
        if quiet:
            ctx.exit(1)
        _die(str(e), verbose=verbose, exc=e)

    if not command:
        if output.quiet:
            ctx.exit(1)
        _die("no command given")

    try:
        task = TaskFactory.create(command[0], command[1:], quiet=output.quiet)
        RetryService(spec, task).run()
    except RetrierError as e:
        if output.quiet:
            ctx.exit(1)
        _die(str(e), verbose=output.verbose, exc=e)


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
