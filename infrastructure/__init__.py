"""Infrastructure layer for the metrics registry and endpoint."""

from __future__ import annotations

from .metrics import (
    MetricsRequestHandler,
    MetricsServer,
    MetricsServerError,
    PingMetrics,
    parse_listen_address,
)

__all__ = [
    "MetricsRequestHandler",
    "MetricsServer",
    "MetricsServerError",
    "PingMetrics",
    "parse_listen_address",
]
