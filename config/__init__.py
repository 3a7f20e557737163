"""Configuration package: constants, environment settings and run config."""

from .settings import *  # noqa: F401,F403
from .settings_model import Settings
from .types import (
    ConfigurationError,
    MonitorConfig,
    NetTestError,
    ProbeStrategy,
    resolve_target_hosts,
    select_strategy,
)
