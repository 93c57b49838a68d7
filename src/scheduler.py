"""Polling Scheduler - Runs a job on a fixed interval in a background thread.

At most one run of the job is in flight at a time. Timer ticks that find a
run in progress are skipped; manual triggers wait for it to finish and then
run the job themselves.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any


logger = logging.getLogger(__name__)


class PollingScheduler:
    """Interval timer with a single-flight guard."""

    def __init__(
        self,
        name: str,
        job: Callable[[], Any],
        interval_seconds: float,
    ) -> None:
        """Initialize scheduler.

        Args:
            name: Name used in logs and for the thread
            job: Callable to run; its return value is passed back by trigger_now()
            interval_seconds: Seconds between the end of one run and the next tick
        """
        self.name = name
        self.job = job
        self.interval_seconds = interval_seconds
        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """True while the timer thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def _run_job(self) -> Any:
        try:
            return self.job()
        except Exception:
            logger.exception("Scheduled job %s failed", self.name)
            return None

    def _tick(self) -> None:
        if not self._run_lock.acquire(blocking=False):
            logger.info("Skipping %s run, previous run still in progress", self.name)
            return
        try:
            self._run_job()
        finally:
            self._run_lock.release()

    def _loop(self, run_immediately: bool) -> None:
        if run_immediately:
            self._tick()
        while not self._stop_event.wait(self.interval_seconds):
            self._tick()

    def start(self, run_immediately: bool = True) -> None:
        """Start the timer thread.

        Args:
            run_immediately: Run the job once right away instead of after
                the first interval
        """
        if self.running:
            raise RuntimeError(f"Scheduler {self.name} is already running")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            args=(run_immediately,),
            name=f"scheduler-{self.name}",
            daemon=True,
        )
        self._thread.start()
        logger.info("Started %s scheduler (every %ss)", self.name, self.interval_seconds)

    def trigger_now(self) -> Any:
        """Run the job now, waiting for any in-flight run to finish first.

        Returns:
            The job's return value (None if it raised)
        """
        with self._run_lock:
            return self._run_job()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer. An in-flight run is allowed to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Stopped %s scheduler", self.name)
