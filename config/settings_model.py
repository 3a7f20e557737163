from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .settings import DEFAULT_METRICS_ADDR, DEFAULT_PROBE_INTERVAL_MS


class Settings(BaseSettings):
    """
    Environment configuration using Pydantic Settings.

    Supplies the defaults the command line starts from; flags given on the
    command line always win.
    """

    # ─────────────────────────────────────────────────────────────────────────────
    # Targets
    # ─────────────────────────────────────────────────────────────────────────────
    TARGET_HOSTS: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Comma-separated target hosts (empty uses the built-in list)",
    )
    PRIMARY_TARGET_HOST: str = Field(default="", description="Host prepended to the target list")

    # ─────────────────────────────────────────────────────────────────────────────
    # Measurement
    # ─────────────────────────────────────────────────────────────────────────────
    PROBE_INTERVAL_MS: int = Field(
        default=DEFAULT_PROBE_INTERVAL_MS,
        description="Interval between ping cycles in milliseconds, <= 0 disables probing",
    )

    # ─────────────────────────────────────────────────────────────────────────────
    # Metrics
    # ─────────────────────────────────────────────────────────────────────────────
    METRICS_ADDR: str = Field(default=DEFAULT_METRICS_ADDR, min_length=1)

    # ─────────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("TARGET_HOSTS", mode="before")
    @classmethod
    def _split_hosts(cls, value):
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level
