"""Periodic and manual triggering of panel updates."""
import asyncio
import logging
from typing import Callable, List, Optional, Set

from updater import WeatherUpdater


class RefreshTrigger:
    """A manual refresh control; firing it notifies every connected listener."""

    def __init__(self):
        self._listeners: List[Callable[[], object]] = []

    def connect(self, callback: Callable[[], object]) -> None:
        self._listeners.append(callback)

    def fire(self) -> None:
        for callback in self._listeners:
            callback()


class Scheduler:
    """
    Runs the updater at startup, then every interval, plus on manual refresh.

    Each run is started as its own task: the timer does not wait for a
    previous run to finish, and a manual refresh does not cancel one in
    flight.
    """

    def __init__(
        self,
        updater: WeatherUpdater,
        interval_seconds: float = 600.0,
        trigger: Optional[RefreshTrigger] = None,
    ):
        self.updater = updater
        self.interval_seconds = interval_seconds
        self._tasks: Set[asyncio.Task] = set()
        if trigger is not None:
            trigger.connect(self.refresh_now)

    def _spawn(self, force: bool) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.updater.run(force_ignore_cache=force))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def refresh_now(self) -> asyncio.Task:
        """Start a forced update immediately, independent of the timer."""
        logging.info("Manual refresh requested")
        return self._spawn(True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """
        Start an update now and every interval_seconds after.

        Args:
            max_cycles: Stop after starting this many timed updates (None runs forever)
        """
        cycle = 0
        while True:
            cycle += 1
            logging.info(f"Cycle {cycle}: starting update ({self.pending} still pending)")
            self._spawn(False)
            if max_cycles is not None and cycle >= max_cycles:
                return
            await asyncio.sleep(max(self.interval_seconds, 0.0))

    async def drain(self) -> None:
        """Wait for every update started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
