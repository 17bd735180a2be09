"""Process table enumeration for graceful-shutdown."""

import logging
from collections.abc import Iterator

import psutil

from graceful_shutdown.errors import EnumerationError
from graceful_shutdown.models import ProcessSnapshot, stringify_cmdline

logger = logging.getLogger(__name__)


class ProcessEnumerator:
    """
    Reads the live process table using psutil.

    Every method returns a lazy, single-pass iterator. The table keeps
    changing while it is walked, so entries may appear or vanish mid-way and
    an exhausted iterator cannot be restarted; call the method again for a
    fresh pass.

    Entries that cannot be fully read (the process exited or access was
    denied) are skipped, and so are zombies. Only failing to list the table
    at all is an error, and that is raised before the iterator is handed out.
    """

    def all(self) -> Iterator[ProcessSnapshot]:
        """Iterate over every readable process."""
        return self._iter_snapshots(self._list_pids())

    def all_from_user(self, uid: int) -> Iterator[ProcessSnapshot]:
        """Iterate over the readable processes owned by ``uid``."""
        return (process for process in self.all() if process.owner_uid == uid)

    def enumerate(self, user: int | None = None) -> Iterator[ProcessSnapshot]:
        """Iterate over all processes, or only those of ``user`` when given."""
        if user is None:
            return self.all()
        return self.all_from_user(user)

    def _list_pids(self) -> list[int]:
        try:
            return psutil.pids()
        except OSError as err:
            raise EnumerationError("Failed to open the process table") from err

    def _iter_snapshots(self, pids: list[int]) -> Iterator[ProcessSnapshot]:
        for pid in pids:
            if pid <= 0:
                continue
            try:
                snapshot = self._read_snapshot(pid)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as err:
                # Died mid-read, unreadable or a zombie; nothing to signal
                logger.debug("Skipping pid %d: %s", pid, err)
                continue
            yield snapshot

    def _read_snapshot(self, pid: int) -> ProcessSnapshot:
        """Read one process entry; pid and owner come from the same oneshot."""
        proc = psutil.Process(pid)
        with proc.oneshot():
            # Linux reads zombies without error, so check the state explicitly
            if proc.status() == psutil.STATUS_ZOMBIE:
                raise psutil.ZombieProcess(pid)
            owner_uid = proc.uids().real
            name = proc.name()
            cmdline = proc.cmdline()

        return ProcessSnapshot(
            pid=pid,
            owner_uid=owner_uid,
            name=name,
            commandline=stringify_cmdline("\0".join(cmdline)),
        )
