"""Exception types for graceful-shutdown."""

from enum import Enum


class GracefulShutdownError(Exception):
    """Base class for every error raised by graceful-shutdown."""


class RunError(GracefulShutdownError):
    """A fatal step of the run failed; the cause is chained via ``__cause__``."""


class EnumerationError(GracefulShutdownError):
    """The process table could not be listed at all."""


class PatternCompileError(GracefulShutdownError):
    """A pattern could not be compiled into a regular expression."""

    def __init__(self, pattern: str) -> None:
        super().__init__(f'Invalid pattern "{pattern}"')
        self.pattern = pattern


class SignalParseError(GracefulShutdownError):
    """A string did not name any supported signal."""

    def __init__(self, text: str) -> None:
        super().__init__(f'Failed to parse "{text}" as a signal name.')
        self.text = text


class UserNotFoundError(GracefulShutdownError):
    """No account exists with the requested user name."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Could not find user with name "{name}"')
        self.name = name


class KillErrorKind(Enum):
    """Ways a single signal delivery can fail."""

    INVALID_SIGNAL = "invalid signal"
    NO_PERMISSION = "no permission"
    DOES_NOT_EXIST = "does not exist"
    UNEXPECTED = "unexpected error"


class KillError(GracefulShutdownError):
    """Delivering a signal to one process failed."""

    def __init__(self, kind: KillErrorKind, pid: int, message: str | None = None) -> None:
        self.kind = kind
        self.pid = pid
        self.message = message
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind is KillErrorKind.INVALID_SIGNAL:
            return "Invalid signal"
        if self.kind is KillErrorKind.NO_PERMISSION:
            return "Permission denied"
        if self.kind is KillErrorKind.DOES_NOT_EXIST:
            return "Process does not exist"
        return f"Unexpected error: {self.message}"

    @property
    def is_gone(self) -> bool:
        """True when the process had already exited, which counts as success."""
        return self.kind is KillErrorKind.DOES_NOT_EXIST
