"""Shared fixtures for graceful-shutdown tests."""

import subprocess
import sys
import uuid

import pytest

SLEEPER = "import time; time.sleep(60)"

STUBBORN_SLEEPER = (
    "import signal, sys, time; "
    "signal.signal(signal.SIGTERM, signal.SIG_IGN); "
    "print('ready', flush=True); "
    "time.sleep(60)"
)


class Spawner:
    """Starts throwaway python processes tagged with a unique marker."""

    def __init__(self) -> None:
        self.marker = f"gs-test-{uuid.uuid4().hex}"
        self.processes: list[subprocess.Popen] = []

    def sleeper(self) -> subprocess.Popen:
        """A process that exits on SIGTERM."""
        proc = subprocess.Popen([sys.executable, "-c", f"{SLEEPER}  # {self.marker}"])
        self.processes.append(proc)
        return proc

    def stubborn(self) -> subprocess.Popen:
        """A process that ignores SIGTERM and only dies to SIGKILL."""
        proc = subprocess.Popen(
            [sys.executable, "-c", f"{STUBBORN_SLEEPER}  # {self.marker}"],
            stdout=subprocess.PIPE,
            text=True,
        )
        # Wait until the handler is installed
        assert proc.stdout.readline().strip() == "ready"
        self.processes.append(proc)
        return proc

    def cleanup(self) -> None:
        for proc in self.processes:
            if proc.poll() is None:
                proc.kill()
            proc.wait(timeout=5)
            if proc.stdout is not None:
                proc.stdout.close()


@pytest.fixture
def spawner():
    """Spawn helper that kills and reaps everything it started."""
    helper = Spawner()
    try:
        yield helper
    finally:
        helper.cleanup()
