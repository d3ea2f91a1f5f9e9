from __future__ import annotations

import threading
from typing import Any, Callable, Optional

import schedule

from ..utils.logging import get_logger

logger = get_logger("tw.pipeline.scheduler")


class RecurringTask:
    """Run ``func`` now and then every ``interval_minutes`` until stopped.

    Uses a private ``schedule.Scheduler`` ticked by one daemon thread, so two
    runs never overlap: a run that outlasts the interval delays the next tick
    instead of starting a second run beside it, and missed ticks are not
    replayed. ``run_now`` executes one run synchronously on the caller's thread
    and is serialized with scheduled runs.
    """

    def __init__(
        self,
        func: Callable[[], Any],
        *,
        interval_minutes: float = 15,
        name: str = "recurring-task",
        poll_seconds: float = 1.0,
    ) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self.func = func
        self.interval_minutes = interval_minutes
        self.name = name
        self.poll_seconds = poll_seconds
        self._scheduler = schedule.Scheduler()
        self._stop = threading.Event()
        self._run_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.runs = 0
        self.last_result: Any = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_now(self) -> Any:
        with self._run_lock:
            try:
                self.last_result = self.func()
            except Exception as exc:  # noqa: BLE001 - keep the schedule alive after a failed run
                logger.exception("%s run failed: %s", self.name, exc)
                self.last_result = None
            finally:
                self.runs += 1
            return self.last_result

    def start(self, *, run_immediately: bool = True) -> None:
        if self.running:
            raise RuntimeError(f"{self.name} is already running")
        if run_immediately:
            self.run_now()
        self._stop.clear()
        self._scheduler.clear()
        self._scheduler.every(self.interval_minutes).minutes.do(self._tick)
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info("%s scheduled every %s minutes", self.name, self.interval_minutes)

    def _tick(self) -> None:
        logger.info("Running scheduled %s...", self.name)
        self.run_now()

    def _loop(self) -> None:
        while not self._stop.is_set():
            self._scheduler.run_pending()
            self._stop.wait(self.poll_seconds)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer; a run already in progress is allowed to finish."""
        self._stop.set()
        self._scheduler.clear()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("%s stopped", self.name)
