"""Measurement task: runs a probe cycle at a fixed interval."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.probe_cycle import ProbeCycleExecutor


class MeasurementTask:
    """Run a cycle, sleep ``interval_ms``, repeat for the life of the process.

    A non-positive interval disables the task. A failed cycle is logged and
    the loop carries on. Nothing in the application sets ``stop_event``.
    """

    name = "Measurement"

    def __init__(
        self,
        *,
        cycle: ProbeCycleExecutor,
        interval_ms: int,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.cycle = cycle
        self.interval = interval_ms / 1000.0
        self.enabled = interval_ms > 0
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.cycles_run = 0

    def execute(self) -> None:
        self.cycle.run_cycle()
        self.cycles_run += 1

    def run(self) -> None:
        """Main loop: execute → sleep until stopped."""
        if not self.enabled:
            return

        while not self.stop_event.is_set():
            try:
                self.execute()
            except Exception as exc:
                logging.error(f"{self.name} failed: {exc}")
            if self.stop_event.wait(self.interval):
                break

    def start_in_thread(self) -> threading.Thread:
        """Run the loop on a daemon thread so it never holds up exit."""
        thread = threading.Thread(
            target=self.run,
            name="nettest_measurement",
            daemon=True,
        )
        thread.start()
        return thread
