"""graceful-shutdown - command line entry point."""

import logging
import os
import sys
from collections.abc import Iterable

import click
from click.shell_completion import CompletionItem, get_completion_class
from rich.console import Console
from rich.markup import escape

from graceful_shutdown.errors import (
    EnumerationError,
    GracefulShutdownError,
    PatternCompileError,
    RunError,
    SignalParseError,
    UserNotFoundError,
)
from graceful_shutdown.escalation import EscalationEngine
from graceful_shutdown.matcher import Matcher
from graceful_shutdown.models import ProcessSnapshot
from graceful_shutdown.options import ColorMode, Options, OutputMode
from graceful_shutdown.processes import ProcessEnumerator
from graceful_shutdown.reporter import ConsoleReporter, make_console
from graceful_shutdown.signals import Signal

logger = logging.getLogger(__name__)

PROG_NAME = "graceful-shutdown"
COMPLETION_SHELLS = ["bash", "zsh", "fish"]
VERBOSITY_KEY = "graceful_shutdown.verbosity"


class SignalParamType(click.ParamType):
    """Click parameter accepting a signal name or number."""

    name = "signal"

    def convert(self, value, param, ctx):
        if isinstance(value, Signal):
            return value
        try:
            return Signal.parse(value)
        except SignalParseError as err:
            self.fail(str(err), param, ctx)

    def shell_complete(self, ctx, param, incomplete):
        return [
            CompletionItem(sig.short_name.lower())
            for sig in Signal.variants()
            if sig.short_name.lower().startswith(incomplete.lower())
        ]


def setup_logging(level: str) -> None:
    """Setup diagnostics logging on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - graceful-shutdown - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def set_verbosity(mode: OutputMode):
    """Callback for --verbose/--quiet; whichever appears last on the command line wins."""

    def callback(ctx: click.Context, param: click.Parameter, value: bool) -> None:
        # Invoked flags are processed in command line order
        if value:
            ctx.meta[VERBOSITY_KEY] = mode

    return callback


def list_signals(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print the supported signals and exit. Prose is only shown on a terminal."""
    if not value or ctx.resilient_parsing:
        return

    is_tty = sys.stdout.isatty()
    if is_tty:
        click.echo("Currently supported signals:")
    for sig in Signal.variants():
        click.echo(f"{sig.number}\t{sig}")
    if is_tty:
        click.echo("Signal names does not require the SIG prefix, and are case-insensitive.")
    ctx.exit()


def generate_completions(ctx: click.Context, param: click.Parameter, value: str | None) -> None:
    """Print the completion script for a shell and exit."""
    if value is None or ctx.resilient_parsing:
        return

    complete_var = "_{}_COMPLETE".format(PROG_NAME.replace("-", "_").upper())
    completion_class = get_completion_class(value)
    completion = completion_class(ctx.command, {}, PROG_NAME, complete_var)
    click.echo(completion.source())
    ctx.exit()


def report_error(console: Console, err: BaseException) -> None:
    """Print an error followed by its chain of causes."""
    console.print(f"[red]ERROR: {escape(str(err))}[/red]")
    cause = err.__cause__
    level = 1
    while cause is not None:
        console.print(f"[red]{'  ' * level}Caused by: {escape(str(cause))}[/red]")
        cause = cause.__cause__
        level += 1


def find_processes(options: Options, matcher: Matcher) -> list[ProcessSnapshot]:
    """Matching processes in discovery order, never including this one."""
    own_pid = os.getpid()
    return [
        process
        for process in ProcessEnumerator().enumerate(options.user)
        if process.pid != own_pid and matcher.is_match(process)
    ]


def run(options: Options, lines: Iterable[str]) -> bool:
    """
    Load patterns, find matching processes and shut them down.

    Returns:
        True if every matched process was handled successfully.

    Raises:
        RunError: If the patterns or the process list could not be loaded.
    """
    try:
        matcher = Matcher.from_lines(lines, options.match_mode)
    except PatternCompileError as err:
        raise RunError("Could not load patterns") from err

    try:
        processes = find_processes(options, matcher)
    except EnumerationError as err:
        raise RunError("Could not build process list") from err

    logger.info("Matched %d processes with %d patterns", len(processes), len(matcher))

    engine = EscalationEngine(options.policy, ConsoleReporter(options))
    return engine.run(processes).success


@click.command(context_settings={"auto_envvar_prefix": "GRACEFUL_SHUTDOWN"})
@click.option(
    "-w",
    "--wait-time",
    type=click.FloatRange(min=0),
    default=5.0,
    show_default=True,
    metavar="SECONDS",
    help="Number of seconds to wait for processes to terminate. Use 0 to disable waiting "
    "and exit immediately with a success status code.",
)
@click.option(
    "--no-kill",
    is_flag=True,
    help="Do not kill processes that are still alive when the wait time is up. Exits with "
    "an error status code if any matched process survived.",
)
@click.option(
    "-s",
    "--terminate-signal",
    type=SignalParamType(),
    default="term",
    show_default=True,
    help="Signal to use when terminating processes, by number or case-insensitive name.",
)
@click.option(
    "--kill-signal",
    type=SignalParamType(),
    default="kill",
    show_default=True,
    help="Signal to use for processes that did not quit before the wait time ran out.",
)
@click.option(
    "-W",
    "--whole-command",
    "--whole",
    "whole_command",
    is_flag=True,
    help="Match the whole command line of the process rather than the basename.",
)
@click.option("-u", "--user", metavar="USER", help="Only find processes owned by USER.")
@click.option(
    "-m",
    "--mine",
    is_flag=True,
    help="Only find processes owned by you. Has no effect if --user is given.",
)
@click.option(
    "-n",
    "--dry-run",
    is_flag=True,
    help="Don't send any signals, show what would happen instead. Implies --verbose.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    expose_value=False,
    callback=set_verbosity(OutputMode.VERBOSE),
    help="Show more verbose output. Overrides an earlier --quiet.",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    expose_value=False,
    callback=set_verbosity(OutputMode.QUIET),
    help="Don't render any output. Overrides an earlier --verbose.",
)
@click.option(
    "--color",
    type=click.Choice([mode.value for mode in ColorMode]),
    default=ColorMode.AUTO.value,
    show_default=True,
    help='Show color in output. "auto" enables color when writing to a terminal.',
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Threshold for diagnostic log messages on stderr.",
)
@click.option(
    "--list-signals",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=list_signals,
    help="List all supported signals and exit.",
)
@click.option(
    "--generate-completions",
    type=click.Choice(COMPLETION_SHELLS),
    is_eager=True,
    expose_value=False,
    callback=generate_completions,
    metavar="SHELL",
    help="Print a completion script for SHELL and exit.",
)
@click.pass_context
def cli(
    ctx,
    wait_time,
    no_kill,
    terminate_signal,
    kill_signal,
    whole_command,
    user,
    mine,
    dry_run,
    color,
    log_level,
):
    """Reads a list of process patterns to gracefully terminate from STDIN."""
    setup_logging(log_level)
    verbosity = ctx.meta.get(VERBOSITY_KEY, OutputMode.NORMAL)

    color_mode = ColorMode(color)
    err_console = make_console(color_mode.enabled(sys.stderr))
    stdin = click.get_text_stream("stdin")

    try:
        try:
            options = Options.from_cli(
                wait_time=wait_time,
                no_kill=no_kill,
                terminate_signal=terminate_signal,
                kill_signal=kill_signal,
                whole_command=whole_command,
                user=user,
                mine=mine,
                dry_run=dry_run,
                verbosity=verbosity,
                color=color_mode,
            )
        except UserNotFoundError as err:
            raise RunError("Could not build process list") from err

        if options.output_mode.show_normal and stdin.isatty():
            err_console.print(
                "[yellow]WARNING: Reading processlist from TTY stdin. "
                "Exit with ^D when you are done, or ^C to abort.[/yellow]"
            )

        success = run(options, stdin)
    except GracefulShutdownError as err:
        logger.debug("Run aborted", exc_info=True)
        if verbosity.show_normal or dry_run:
            report_error(err_console, err)
        ctx.exit(1)

    ctx.exit(0 if success else 1)


def main() -> None:
    """Entry point for graceful-shutdown."""
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
