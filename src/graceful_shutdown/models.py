"""Data models for graceful-shutdown."""

import errno
import logging
from dataclasses import dataclass

import psutil

from graceful_shutdown.errors import KillError, KillErrorKind
from graceful_shutdown.signals import Signal

logger = logging.getLogger(__name__)


def stringify_cmdline(raw: bytes | str) -> str:
    """
    Turn a raw NUL-separated argument vector into one display string.

    NULs become single spaces and trailing whitespace is dropped. Arguments
    that themselves contain spaces can no longer be told apart afterwards.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.replace("\0", " ").rstrip()


@dataclass(slots=True, frozen=True)
class ProcessSnapshot:
    """Immutable identity of a process found in the process table."""

    pid: int
    owner_uid: int
    name: str  # Executable basename
    commandline: str

    def send(self, signal: Signal) -> None:
        """
        Deliver a signal to the process.

        Success only means the OS accepted the signal, not that the process
        exited.

        Raises:
            KillError: If delivery failed. ``KillErrorKind.DOES_NOT_EXIST``
                means the process was already gone.
        """
        logger.debug("Sending %s to pid %d", signal, self.pid)
        try:
            psutil.Process(self.pid).send_signal(signal.number)
        except psutil.NoSuchProcess as err:
            raise KillError(KillErrorKind.DOES_NOT_EXIST, self.pid) from err
        except psutil.AccessDenied as err:
            raise KillError(KillErrorKind.NO_PERMISSION, self.pid) from err
        except OSError as err:
            if err.errno == errno.EINVAL:
                raise KillError(KillErrorKind.INVALID_SIGNAL, self.pid) from err
            if err.errno == errno.EPERM:
                raise KillError(KillErrorKind.NO_PERMISSION, self.pid) from err
            if err.errno == errno.ESRCH:
                raise KillError(KillErrorKind.DOES_NOT_EXIST, self.pid) from err
            raise KillError(KillErrorKind.UNEXPECTED, self.pid, str(err)) from err

    def is_alive(self) -> bool:
        """
        Check whether the pid is still present in the process table.

        Zombies have already exited and count as dead. The pid may have been
        reused by an unrelated process since discovery; that race is accepted.
        """
        try:
            return psutil.Process(self.pid).status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            return True


@dataclass(slots=True, frozen=True)
class EscalationPolicy:
    """How to terminate the selected processes."""

    terminate_signal: Signal = Signal.SIGTERM
    kill_signal: Signal = Signal.SIGKILL
    wait_duration: float | None = 5.0  # Seconds; None or 0 disables waiting
    force_kill_enabled: bool = True
    dry_run: bool = False
    poll_interval: float = 0.1

    @property
    def should_wait(self) -> bool:
        return not self.dry_run and bool(self.wait_duration) and self.wait_duration > 0


@dataclass(slots=True)
class RunOutcome:
    """Result of one escalation run."""

    success: bool = True
    signaled: int = 0
    failed: int = 0
    survivors: int = 0
