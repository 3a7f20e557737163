"""
Core handlers for the measurement cycle.

- PingHandler: runs one probe and classifies the result
- MetricsHandler: records outcomes in the Prometheus series
- ProbeCycleExecutor: one pass over the target list per strategy
- MeasurementTask: drives ProbeCycleExecutor at the probe interval
"""

from .ping_handler import OutcomeKind, PingHandler, Probe, ProbeOutcome
from .metrics_handler import MetricsHandler
from .probe_cycle import ProbeCycleExecutor, ProbeFactory
from .measurement_task import MeasurementTask

__all__ = [
    "OutcomeKind",
    "PingHandler",
    "Probe",
    "ProbeOutcome",
    "MetricsHandler",
    "ProbeCycleExecutor",
    "ProbeFactory",
    "MeasurementTask",
]
