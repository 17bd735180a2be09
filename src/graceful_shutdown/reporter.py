"""Console rendering of escalation events for graceful-shutdown."""

import sys

from rich.console import Console
from rich.markup import escape

from graceful_shutdown.errors import KillError
from graceful_shutdown.escalation import EscalationListener
from graceful_shutdown.matcher import MatchMode
from graceful_shutdown.models import ProcessSnapshot
from graceful_shutdown.options import Options
from graceful_shutdown.signals import Signal


def make_console(colors: bool, stderr: bool = True) -> Console:
    """Create a rich console; without colors no escape codes are written at all."""
    return Console(
        stderr=stderr,
        force_terminal=colors,
        no_color=not colors,
        highlight=False,
        soft_wrap=True,
    )


def describe_process(process: ProcessSnapshot, match_mode: MatchMode) -> str:
    """Markup for a process: pid and name, plus the command line when matching on it."""
    text = f"[green]{process.pid}[/green] ([green]{escape(process.name)}[/green])"
    if match_mode is MatchMode.COMMANDLINE:
        text += f": [dim]{escape(process.commandline)}[/dim]"
    return text


class ConsoleReporter(EscalationListener):
    """Prints escalation events according to the output mode."""

    def __init__(self, options: Options, out: Console | None = None, err: Console | None = None) -> None:
        self._options = options
        self._out = out or make_console(options.color_mode.enabled(sys.stdout), stderr=False)
        self._err = err or make_console(options.color_mode.enabled(sys.stderr))

    def _describe(self, process: ProcessSnapshot) -> str:
        return describe_process(process, self._options.match_mode)

    def would_signal(self, process: ProcessSnapshot, signal: Signal) -> None:
        if self._options.output_mode.show_normal:
            self._out.print(f"Would have sent {signal} to process {self._describe(process)}")

    def signaling(self, process: ProcessSnapshot, signal: Signal) -> None:
        if self._options.output_mode.show_verbose:
            self._err.print(f"Sending {signal} to process {self._describe(process)}")

    def signal_failed(self, process: ProcessSnapshot, signal: Signal, error: KillError) -> None:
        if self._options.output_mode.show_normal:
            self._err.print(
                f"[red]Failed to send {signal} to[/red] {self._describe(process)}: "
                f"[red]{escape(str(error))}[/red]"
            )

    def shut_down(self, process: ProcessSnapshot) -> None:
        if self._options.output_mode.show_verbose:
            self._err.print(f"Process shut down: {self._describe(process)}")

    def timed_out(self, force_kill: bool) -> None:
        if force_kill:
            if self._options.output_mode.show_verbose:
                self._err.print("[red]Timeout reached. Forcefully shutting down processes.[/red]")
        elif self._options.output_mode.show_normal:
            self._err.print("[yellow]WARNING: Some processes are still alive.[/yellow]")

    def still_alive(self, process: ProcessSnapshot) -> None:
        if self._options.output_mode.show_verbose:
            self._err.print(f"Process {self._describe(process)}")
