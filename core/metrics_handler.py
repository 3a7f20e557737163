"""
Metrics handler - updates Prometheus metrics.

Single Responsibility: Update metrics based on probe outcomes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from infrastructure import PingMetrics
    from .ping_handler import ProbeOutcome


class MetricsHandler:
    """
    Handles Prometheus metrics updates.

    A success adds one latency observation, every other outcome adds one
    failure. Never both.
    """

    def __init__(self, metrics: PingMetrics) -> None:
        self.metrics = metrics

    def record(self, outcome: ProbeOutcome) -> None:
        """
        Record one outcome against its target label.

        Args:
            outcome: Result from PingHandler or a failed probe construction
        """
        if outcome.is_success and outcome.rtt_ms is not None:
            self.metrics.observe_rtt(outcome.target, outcome.rtt_ms)
        else:
            self.metrics.record_failure(outcome.target)
