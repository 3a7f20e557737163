"""Network probing services package."""

from .ping_service import (
    IcmpProbe,
    PingService,
    ProbeConstructionError,
    ProbeStats,
    ProbeTransportError,
    whole_milliseconds,
)

__all__ = [
    "IcmpProbe",
    "PingService",
    "ProbeConstructionError",
    "ProbeStats",
    "ProbeTransportError",
    "whole_milliseconds",
]
