from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from rich.console import Console

from config import VERSION, MonitorConfig
from core import MeasurementTask, MetricsHandler, ProbeCycleExecutor
from infrastructure import MetricsServer, MetricsServerError, PingMetrics
from services import PingService


class NetTestApp:
    """Wires the probe loop and the metrics server around one registry."""

    def __init__(
        self,
        config: MonitorConfig,
        *,
        console: Optional[Console] = None,
        ping_service: Optional[PingService] = None,
        metrics: Optional[PingMetrics] = None,
    ) -> None:
        self.config = config
        self.console = console or Console(stderr=True)
        self.metrics = metrics or PingMetrics()
        self.ping_service = ping_service or PingService()
        self.cycle = ProbeCycleExecutor(
            config.targets,
            config.strategy,
            self.ping_service.create_probe,
            MetricsHandler(self.metrics),
        )
        self.task = MeasurementTask(cycle=self.cycle, interval_ms=config.probe_interval_ms)
        self.server = MetricsServer(config.metrics_addr, self.metrics)

    def _check_privileges(self) -> None:
        """Warn when raw ICMP sockets are unlikely to be allowed."""
        try:
            if sys.platform == "win32":
                import ctypes
                is_admin = ctypes.windll.shell32.IsUserAnAdmin() != 0
            else:
                is_admin = os.geteuid() == 0
        except Exception as exc:
            logging.debug(f"Failed to check privileges: {exc}")
            return

        if not is_admin:
            logging.warning("ICMP ping uses raw sockets; run as root or grant CAP_NET_RAW")

    def _announce(self) -> None:
        config = self.config
        self.console.print(f"\n[bold green]>>> net-test {VERSION} <<<[/bold green]")
        self.console.print(
            f"[dim]strategy: {config.strategy.value}, interval: {config.probe_interval_ms} ms[/dim]",
            highlight=False,
        )

        logging.info("starting measurements")
        logging.info(f"will measure hosts: {' '.join(config.targets)}")
        if config.probing_enabled:
            logging.info("will perform ICMP ping measurement (may require sudo)")

    def run(self) -> int:
        """Start probing and block serving metrics. Returns the exit status."""
        self._announce()
        self._check_privileges()

        try:
            self.server.bind()
        except MetricsServerError as exc:
            logging.critical(str(exc))
            self.console.print(str(exc), style="bold red", markup=False, highlight=False)
            return 1

        self.task.start_in_thread()

        try:
            self.server.serve_forever()
        except KeyboardInterrupt:
            logging.info("metrics server stopped")
        except OSError as exc:
            logging.critical(f"failed to run http Prometheus metrics server on \"{self.config.metrics_addr}\": {exc}")
            return 1
        finally:
            self.server.close()
        return 0


__all__ = ["NetTestApp"]
