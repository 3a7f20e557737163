"""
Type definitions and factory functions.

Contains the run configuration, the probe strategy and the error types shared
across the application.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from .settings import DEFAULT_METRICS_ADDR, DEFAULT_PROBE_INTERVAL_MS, DEFAULT_TARGET_HOSTS


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class NetTestError(Exception):
    """Base class for application errors."""


class ConfigurationError(NetTestError):
    """Invalid startup configuration. The process must not start."""


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────

class ProbeStrategy(str, enum.Enum):
    """How a cycle walks the target list."""
    FALLOVER = "fallover"   # stop at the first host that answers
    ALL = "all"


@dataclass(frozen=True)
class MonitorConfig:
    """Immutable run configuration, built once at startup."""
    targets: tuple[str, ...] = DEFAULT_TARGET_HOSTS
    strategy: ProbeStrategy = ProbeStrategy.FALLOVER
    metrics_addr: str = DEFAULT_METRICS_ADDR
    probe_interval_ms: int = DEFAULT_PROBE_INTERVAL_MS
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def probing_enabled(self) -> bool:
        return self.probe_interval_ms > 0

    def validate(self) -> None:
        """Raise ConfigurationError if probing is disabled, the only measurement."""
        if not self.probing_enabled:
            raise ConfigurationError("at least one metric must be selected to record (one of: -p)")


# ─────────────────────────────────────────────────────────────────────────────
# Factory Functions
# ─────────────────────────────────────────────────────────────────────────────

def resolve_target_hosts(hosts: Iterable[str], primary_host: Optional[str] = None) -> tuple[str, ...]:
    """Build the ordered target list.

    Falls back to the built-in hosts when ``hosts`` is empty and prepends
    ``primary_host`` when given. Duplicates are kept and nothing is resolved
    here; bad hosts only show up when probed.
    """
    resolved = list(hosts) or list(DEFAULT_TARGET_HOSTS)
    if primary_host:
        resolved.insert(0, primary_host)
    return tuple(resolved)


def select_strategy(fallover: Optional[bool], all_hosts: Optional[bool]) -> ProbeStrategy:
    """Pick the probe strategy from the -f / -a flags.

    ``None`` means the flag was not given on the command line.
    """
    if fallover and all_hosts:
        raise ConfigurationError("options -f (fallover) and -a (all) cannot both be provided")
    if all_hosts or fallover is False:
        return ProbeStrategy.ALL
    return ProbeStrategy.FALLOVER
