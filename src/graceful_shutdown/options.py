"""Resolved run options for graceful-shutdown."""

import os
import pwd
import sys
from dataclasses import dataclass
from enum import Enum

from graceful_shutdown.errors import UserNotFoundError
from graceful_shutdown.matcher import MatchMode
from graceful_shutdown.models import EscalationPolicy
from graceful_shutdown.signals import Signal


class OutputMode(Enum):
    """How much the tool prints."""

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"

    @property
    def show_normal(self) -> bool:
        return self is not OutputMode.QUIET

    @property
    def show_verbose(self) -> bool:
        return self is OutputMode.VERBOSE


class ColorMode(Enum):
    """When to colorize output."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"

    def enabled(self, stream=None) -> bool:
        if self is ColorMode.AUTO:
            stream = stream or sys.stdout
            return stream.isatty()
        return self is ColorMode.ALWAYS


def find_user_by_name(name: str) -> int:
    """Return the uid of the account called ``name``."""
    try:
        return pwd.getpwnam(name).pw_uid
    except KeyError as err:
        raise UserNotFoundError(name) from err


@dataclass(slots=True, frozen=True)
class Options:
    """Everything a run needs, resolved from the command line."""

    policy: EscalationPolicy
    match_mode: MatchMode = MatchMode.BASENAME
    output_mode: OutputMode = OutputMode.NORMAL
    color_mode: ColorMode = ColorMode.NEVER
    user: int | None = None

    @classmethod
    def from_cli(
        cls,
        *,
        wait_time: float,
        no_kill: bool,
        terminate_signal: Signal,
        kill_signal: Signal,
        whole_command: bool,
        user: str | None,
        mine: bool,
        dry_run: bool,
        verbosity: OutputMode,
        color: ColorMode,
    ) -> "Options":
        """
        Build options from raw command line values.

        A wait time of zero disables waiting. ``--user`` wins over ``--mine``.
        Dry runs are always verbose.

        Raises:
            UserNotFoundError: If ``user`` names no account.
        """
        if user is not None:
            uid = find_user_by_name(user)
        elif mine:
            uid = os.getuid()
        else:
            uid = None

        policy = EscalationPolicy(
            terminate_signal=terminate_signal,
            kill_signal=kill_signal,
            wait_duration=wait_time if wait_time > 0 else None,
            force_kill_enabled=not no_kill,
            dry_run=dry_run,
        )

        return cls(
            policy=policy,
            match_mode=MatchMode.COMMANDLINE if whole_command else MatchMode.BASENAME,
            output_mode=OutputMode.VERBOSE if dry_run else verbosity,
            color_mode=color,
            user=uid,
        )
