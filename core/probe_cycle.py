"""Probe cycle executor: one measurement pass over the target list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Sequence

from config import ProbeStrategy
from services import ProbeConstructionError

from .ping_handler import OutcomeKind, PingHandler, Probe, ProbeOutcome

if TYPE_CHECKING:
    from .metrics_handler import MetricsHandler

ProbeFactory = Callable[[str], Probe]


class ProbeCycleExecutor:
    """Runs one cycle: build a probe per target, then probe in list order.

    Probes are built for every target before any is run, so construction
    failures are counted even for targets a fallover cycle never reaches.
    Under FALLOVER the probing phase stops at the first success; under ALL
    every constructed probe runs.
    """

    def __init__(
        self,
        targets: Sequence[str],
        strategy: ProbeStrategy,
        probe_factory: ProbeFactory,
        metrics_handler: MetricsHandler,
    ) -> None:
        self.targets = tuple(targets)
        self.strategy = strategy
        self.probe_factory = probe_factory
        self.metrics_handler = metrics_handler

    def _build_handlers(self, outcomes: list[ProbeOutcome]) -> list[PingHandler]:
        handlers: list[PingHandler] = []
        for host in self.targets:
            try:
                probe = self.probe_factory(host)
            except ProbeConstructionError as exc:
                logging.warning(f"failed to create pinger for \"{host}\": {exc}")
                outcome = ProbeOutcome(host, OutcomeKind.CONSTRUCTION_ERROR, error=str(exc))
                self.metrics_handler.record(outcome)
                outcomes.append(outcome)
                continue
            handlers.append(PingHandler(host, probe))
        return handlers

    def run_cycle(self) -> list[ProbeOutcome]:
        """Run one cycle (blocking) and return the outcomes in attempt order."""
        outcomes: list[ProbeOutcome] = []
        for handler in self._build_handlers(outcomes):
            outcome = handler.execute()
            self.metrics_handler.record(outcome)
            outcomes.append(outcome)

            if outcome.is_success and self.strategy is ProbeStrategy.FALLOVER:
                break
        return outcomes
