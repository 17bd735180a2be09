"""Terminate, wait and kill escalation for graceful-shutdown."""

import logging
import time
from collections.abc import Callable, Sequence

from graceful_shutdown.errors import KillError
from graceful_shutdown.models import EscalationPolicy, ProcessSnapshot, RunOutcome
from graceful_shutdown.signals import Signal

logger = logging.getLogger(__name__)


class EscalationListener:
    """
    Receives progress events from an escalation run.

    All methods are no-ops; subclass and override the ones you care about.
    """

    def would_signal(self, process: ProcessSnapshot, signal: Signal) -> None:
        pass

    def signaling(self, process: ProcessSnapshot, signal: Signal) -> None:
        pass

    def signal_failed(self, process: ProcessSnapshot, signal: Signal, error: KillError) -> None:
        pass

    def shut_down(self, process: ProcessSnapshot) -> None:
        pass

    def timed_out(self, force_kill: bool) -> None:
        pass

    def still_alive(self, process: ProcessSnapshot) -> None:
        pass


class EscalationEngine:
    """
    Drives one terminate/wait/kill run over a list of selected processes.

    Processes are signalled one at a time in the order given. Any process
    whose signal could not be delivered is dropped from tracking and fails
    the run, except when it had already exited. With a wait duration the
    tracked processes are polled until they are all gone or time runs out;
    survivors then get the kill signal, or are reported and fail the run when
    force killing is disabled. Nothing is checked after the kill signal.
    """

    def __init__(
        self,
        policy: EscalationPolicy,
        listener: EscalationListener | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._policy = policy
        self._listener = listener or EscalationListener()
        self._sleep = sleep
        self._clock = clock

    def run(self, processes: Sequence[ProcessSnapshot]) -> RunOutcome:
        """Run the escalation and report whether every process was handled."""
        if self._policy.dry_run:
            return self._dry_run(processes)

        outcome = RunOutcome()
        tracked = self._signal_all(list(processes), self._policy.terminate_signal, outcome)

        if not self._policy.should_wait:
            return outcome

        tracked = self._wait_for_exit(tracked)
        if not tracked:
            logger.info("All processes shut down")
            return outcome

        self._listener.timed_out(self._policy.force_kill_enabled)
        if self._policy.force_kill_enabled:
            logger.info("Timeout reached, sending %s to %d processes", self._policy.kill_signal, len(tracked))
            self._signal_all(tracked, self._policy.kill_signal, outcome)
        else:
            logger.info("Timeout reached, %d processes still alive", len(tracked))
            for process in tracked:
                self._listener.still_alive(process)
            outcome.survivors = len(tracked)
            outcome.success = False

        return outcome

    def _dry_run(self, processes: Sequence[ProcessSnapshot]) -> RunOutcome:
        for process in processes:
            self._listener.would_signal(process, self._policy.terminate_signal)
        return RunOutcome(success=True)

    def _signal_all(
        self, processes: list[ProcessSnapshot], signal: Signal, outcome: RunOutcome
    ) -> list[ProcessSnapshot]:
        """Send ``signal`` to each process and return those still worth tracking."""
        tracked = []
        for process in processes:
            self._listener.signaling(process, signal)
            try:
                process.send(signal)
            except KillError as err:
                if err.is_gone:
                    logger.debug("pid %d exited before %s arrived", process.pid, signal)
                    continue
                logger.info("Failed to send %s to pid %d: %s", signal, process.pid, err)
                self._listener.signal_failed(process, signal, err)
                outcome.failed += 1
                outcome.success = False
                continue
            outcome.signaled += 1
            tracked.append(process)
        return tracked

    def _wait_for_exit(self, tracked: list[ProcessSnapshot]) -> list[ProcessSnapshot]:
        """Poll until every tracked process is gone or the wait runs out."""
        deadline = self._clock() + self._policy.wait_duration

        while tracked and self._clock() < deadline:
            self._sleep(self._policy.poll_interval)

            still_running = []
            for process in tracked:
                if process.is_alive():
                    still_running.append(process)
                else:
                    self._listener.shut_down(process)
            tracked = still_running

        return tracked
