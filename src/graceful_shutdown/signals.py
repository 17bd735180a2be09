"""Catalog of the signals graceful-shutdown knows how to send."""

import signal as _signal
from collections.abc import Iterator
from enum import Enum

from graceful_shutdown.errors import SignalParseError


class Signal(Enum):
    """Supported termination signals, valued by their OS signal number."""

    SIGABRT = int(_signal.SIGABRT)
    SIGALRM = int(_signal.SIGALRM)
    SIGHUP = int(_signal.SIGHUP)
    SIGINT = int(_signal.SIGINT)
    SIGKILL = int(_signal.SIGKILL)
    SIGQUIT = int(_signal.SIGQUIT)
    SIGSTOP = int(_signal.SIGSTOP)
    SIGTERM = int(_signal.SIGTERM)
    SIGUSR1 = int(_signal.SIGUSR1)
    SIGUSR2 = int(_signal.SIGUSR2)

    @property
    def number(self) -> int:
        return self.value

    @property
    def short_name(self) -> str:
        """Name without the SIG prefix, e.g. ``TERM``."""
        return self.name[3:]

    @classmethod
    def variants(cls) -> Iterator["Signal"]:
        """Iterate over every supported signal in declaration order."""
        return iter(cls)

    @classmethod
    def parse(cls, text: str) -> "Signal":
        """
        Look up a signal by name or number.

        Names are case-insensitive and the SIG prefix is optional, so
        ``kill``, ``SIGKILL`` and ``9`` all resolve to ``Signal.SIGKILL``.

        Raises:
            SignalParseError: If nothing in the catalog matches.
        """
        wanted = text.strip().upper()
        number = int(wanted) if wanted.isdecimal() else None

        for sig in cls.variants():
            if wanted in (sig.name, sig.short_name) or sig.number == number:
                return sig

        raise SignalParseError(text)

    def __str__(self) -> str:
        return self.short_name
