"""Pattern matching of processes for graceful-shutdown."""

import re
from collections.abc import Iterable
from enum import Enum

from graceful_shutdown.errors import PatternCompileError
from graceful_shutdown.models import ProcessSnapshot


class MatchMode(Enum):
    """Which process field the patterns are tested against."""

    BASENAME = "basename"
    COMMANDLINE = "commandline"


def strip_comment(line: str) -> str:
    """Drop everything from the first ``#`` and trim what is left."""
    index = line.find("#")
    if index == -1:
        return line
    return line[:index].strip()


def load_patterns(lines: Iterable[str]) -> list[str]:
    """Read patterns one per line, skipping comments and blank lines."""
    patterns = []
    for line in lines:
        pattern = strip_comment(line.rstrip("\r\n"))
        if pattern:
            patterns.append(pattern)
    return patterns


class Matcher:
    """A compiled set of case-insensitive patterns and the field to test."""

    def __init__(self, patterns: Iterable[str], mode: MatchMode = MatchMode.BASENAME) -> None:
        self._mode = mode
        self._regexes = []
        for pattern in patterns:
            try:
                self._regexes.append(re.compile(pattern, re.IGNORECASE))
            except re.error as err:
                raise PatternCompileError(pattern) from err

    @classmethod
    def from_lines(cls, lines: Iterable[str], mode: MatchMode = MatchMode.BASENAME) -> "Matcher":
        return cls(load_patterns(lines), mode)

    @property
    def mode(self) -> MatchMode:
        return self._mode

    def __len__(self) -> int:
        return len(self._regexes)

    def is_match(self, process: ProcessSnapshot) -> bool:
        """True if any pattern occurs anywhere in the selected field."""
        if self._mode is MatchMode.COMMANDLINE:
            target = process.commandline
        else:
            target = process.name
        return any(regex.search(target) for regex in self._regexes)
