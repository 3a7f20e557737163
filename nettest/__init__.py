"""
Command line entry point for net-test.

Parses flags on top of the environment settings, validates the resulting
configuration and hands over to the application.
"""

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from pydantic import ValidationError
from rich.console import Console

from config import (
    LOG_FORMAT,
    PING_COUNT,
    ConfigurationError,
    MonitorConfig,
    Settings,
    resolve_target_hosts,
    select_strategy,
)


def _str_to_bool(value: str) -> bool:
    """Parse the value of ``-f=false`` style boolean flags."""
    lowered = value.strip().lower()
    if lowered in ("1", "t", "true", "yes", "y", "on"):
        return True
    if lowered in ("0", "f", "false", "no", "n", "off"):
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def load_settings() -> Settings:
    """Read environment settings, mapping validation errors to ConfigurationError."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"invalid environment configuration: {exc}") from exc


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Measure ping round trip times and serve them as Prometheus metrics",
        prog="net-test",
    )
    parser.add_argument(
        "-t",
        dest="targets",
        action="append",
        metavar="HOST",
        help="Target hosts (DNS or IP4) to measure (can be provided multiple times)",
    )
    parser.add_argument(
        "-T",
        dest="primary_target",
        default=settings.PRIMARY_TARGET_HOST,
        metavar="HOST",
        help="Add this target host to the beginning of existing target hosts",
    )
    parser.add_argument(
        "-m",
        dest="metrics_addr",
        default=settings.METRICS_ADDR,
        metavar="ADDR",
        help="Host on which to serve Prometheus metrics (default: %(default)s)",
    )
    parser.add_argument(
        "-f",
        dest="fallover",
        nargs="?",
        const=True,
        default=None,
        type=_str_to_bool,
        metavar="BOOL",
        help=(
            "Only measure the first target host and fallover to other following target hosts "
            "if the measurement fails (incompatible with -a) (default: true). "
            "-f=false measures all target hosts, whatever -a says"
        ),
    )
    parser.add_argument(
        "-a",
        dest="all_hosts",
        nargs="?",
        const=True,
        default=None,
        type=_str_to_bool,
        metavar="BOOL",
        help="Measure all target hosts (incompatible with -f)",
    )
    parser.add_argument(
        "-p",
        dest="probe_interval_ms",
        type=int,
        default=settings.PROBE_INTERVAL_MS,
        metavar="MS",
        help=(
            f"Interval in milliseconds at which to perform the ping measurement. "
            f"Will perform {PING_COUNT} ping(s). A value of -1 disables this test. "
            f"Results recorded to the \"ping_rtt_ms\" and \"ping_failures_total\" metrics "
            f"with the \"target_host\" label. (default: %(default)s)"
        ),
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=settings.LOG_LEVEL,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: %(default)s)",
    )
    return parser


def parse_config(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> MonitorConfig:
    """Build the run configuration from flags and environment.

    Raises:
        ConfigurationError: conflicting strategy flags or invalid settings
    """
    if settings is None:
        settings = load_settings()
    args = build_parser(settings).parse_args(argv)

    strategy = select_strategy(args.fallover, args.all_hosts)
    targets = resolve_target_hosts(args.targets or settings.TARGET_HOSTS, args.primary_target)

    return MonitorConfig(
        targets=targets,
        strategy=strategy,
        metrics_addr=args.metrics_addr,
        probe_interval_ms=args.probe_interval_ms,
        log_level=args.log_level,
        log_file=settings.LOG_FILE,
    )


def setup_logging(config: MonitorConfig) -> None:
    kwargs = {}
    if config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        kwargs = {"filename": config.log_file, "filemode": "a", "encoding": "utf-8"}

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format=LOG_FORMAT,
        **kwargs,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point for net-test."""
    console = Console(stderr=True)

    try:
        config = parse_config(argv)
        config.validate()
    except ConfigurationError as exc:
        console.print(str(exc), style="bold red", markup=False, highlight=False)
        sys.exit(1)

    setup_logging(config)

    from main import NetTestApp

    try:
        app = NetTestApp(config, console=console)
    except ConfigurationError as exc:
        console.print(str(exc), style="bold red", markup=False, highlight=False)
        sys.exit(1)

    sys.exit(app.run())


__all__ = ["build_parser", "load_settings", "main", "parse_config", "setup_logging"]
