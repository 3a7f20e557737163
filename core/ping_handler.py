"""
Ping handler - runs one probe and classifies the result.

Single Responsibility: turn a probe run into a ProbeOutcome.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Protocol

from services import ProbeStats, ProbeTransportError, whole_milliseconds


class Probe(Protocol):
    """Anything that can send an echo and report statistics."""

    def run(self) -> ProbeStats: ...


class OutcomeKind(str, enum.Enum):
    SUCCESS = "success"
    CONSTRUCTION_ERROR = "construction_error"
    TRANSPORT_ERROR = "transport_error"
    NO_REPLY = "no_reply"


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing one target in one cycle."""
    target: str
    kind: OutcomeKind
    rtt_ms: float | None = None
    error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def is_failure(self) -> bool:
        return not self.is_success


class PingHandler:
    """
    Handles ping execution for one target.

    ``target`` is the host string as configured; it is what outcomes and
    metric labels carry, whatever the probe resolved it to.
    """

    def __init__(self, target: str, probe: Probe) -> None:
        self.target = target
        self.probe = probe

    def execute(self) -> ProbeOutcome:
        """Run the probe (blocking) and return its outcome."""
        try:
            stats = self.probe.run()
        except (ProbeTransportError, OSError) as exc:
            logging.warning(f"failed to ping host \"{self.target}\": {exc}")
            return ProbeOutcome(self.target, OutcomeKind.TRANSPORT_ERROR, error=str(exc))

        if not stats.has_reply or stats.avg_rtt_ms is None:
            logging.warning(f"ping failed for host \"{self.target}\": no packets received")
            return ProbeOutcome(self.target, OutcomeKind.NO_REPLY, error="no packets received")

        rtt = whole_milliseconds(stats.avg_rtt_ms)
        logging.info(f"ping measured {rtt:f} for \"{self.target}\"")
        return ProbeOutcome(self.target, OutcomeKind.SUCCESS, rtt_ms=rtt)
