"""Prometheus metrics registry and the HTTP server that exposes it."""

from __future__ import annotations

import ipaddress
import logging
import socket
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

from config import (
    FAILURES_METRIC_NAME,
    METRICS_PATH,
    RTT_BUCKETS_MS,
    RTT_METRIC_NAME,
    SERVER_IDLE_TIMEOUT,
    SERVER_READ_HEADER_TIMEOUT,
    SERVER_READ_TIMEOUT,
    SERVER_WRITE_TIMEOUT,
    TARGET_HOST_LABEL,
    ConfigurationError,
    NetTestError,
)


class MetricsServerError(NetTestError):
    """The metrics server could not bind or listen."""


class PingMetrics:
    """The two ping series, registered on a registry owned by this instance.

    prometheus_client locks each child internally, so the probe loop may
    write while scrapes read.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.rtt = Histogram(
            RTT_METRIC_NAME,
            "Round trip time for a target host in milliseconds",
            [TARGET_HOST_LABEL],
            buckets=RTT_BUCKETS_MS,
            registry=self.registry,
        )
        self.failures = Counter(
            FAILURES_METRIC_NAME,
            "Failures in pings for target hosts",
            [TARGET_HOST_LABEL],
            registry=self.registry,
        )

    def observe_rtt(self, host: str, rtt_ms: float) -> None:
        self.rtt.labels(**{TARGET_HOST_LABEL: host}).observe(rtt_ms)

    def record_failure(self, host: str) -> None:
        self.failures.labels(**{TARGET_HOST_LABEL: host}).inc()

    def render(self) -> bytes:
        """Serialize the registry in the text exposition format."""
        return generate_latest(self.registry)


def parse_listen_address(addr: str) -> tuple[str, int]:
    """Split a ``host:port`` bind address.

    Accepts ``:2112`` (all interfaces), ``127.0.0.1:2112`` and
    ``[::1]:2112``.
    """
    host, sep, port_text = addr.rpartition(":")
    if not sep:
        raise ConfigurationError(f"invalid metrics address \"{addr}\": missing port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigurationError(f"invalid metrics address \"{addr}\": IPv6 hosts need brackets")
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigurationError(f"invalid metrics address \"{addr}\": bad port") from None
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"invalid metrics address \"{addr}\": port out of range")
    return host, port


class _HeaderDeadlineReader:
    """Line reader over the request stream that stops at a fixed deadline.

    Each ``readline`` waits on the socket for at most the time left, one
    ``recv`` at a time, so a client trickling bytes cannot extend it.
    """

    def __init__(self, rfile, connection: socket.socket, deadline: float) -> None:
        self.rfile = rfile
        self.connection = connection
        self.deadline = deadline

    def readline(self, limit: int = -1) -> bytes:
        line = bytearray()
        while limit < 0 or len(line) < limit:
            remaining = self.deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError("request header read timed out")
            self.connection.settimeout(remaining)
            buffered = self.rfile.peek(1)
            if not buffered:
                break
            take = buffered.find(b"\n") + 1 or len(buffered)
            if limit >= 0:
                take = min(take, limit - len(line))
            line += self.rfile.read(take)
            if line.endswith(b"\n"):
                break
        return bytes(line)


class MetricsRequestHandler(BaseHTTPRequestHandler):
    """Serves the registry on ``/metrics`` with bounded socket waits.

    The first request on a connection must finish its headers within the
    header timeout of accept. Later keep-alive requests may first sit idle
    for the idle timeout, then get the same header deadline from their first
    byte. The read timeout caps the header deadline as well.
    """

    protocol_version = "HTTP/1.1"
    timeout = SERVER_READ_TIMEOUT
    metrics: Optional[PingMetrics] = None

    def setup(self) -> None:
        super().setup()
        self.requests_started = 0

    def handle_one_request(self) -> None:
        if self.requests_started:
            self.connection.settimeout(SERVER_IDLE_TIMEOUT)
            try:
                if not self.rfile.peek(1):
                    self.close_connection = True
                    return
            except (TimeoutError, ConnectionError):
                self.close_connection = True
                return
        self.requests_started += 1

        deadline = time.monotonic() + min(SERVER_READ_HEADER_TIMEOUT, self.timeout)
        stream = self.rfile
        self.rfile = _HeaderDeadlineReader(stream, self.connection, deadline)
        try:
            super().handle_one_request()
        finally:
            self.rfile = stream

    def do_GET(self) -> None:
        self._serve(send_body=True)

    def do_HEAD(self) -> None:
        self._serve(send_body=False)

    def _serve(self, send_body: bool) -> None:
        if isinstance(self.rfile, _HeaderDeadlineReader):
            self.rfile = self.rfile.rfile
        self.connection.settimeout(SERVER_WRITE_TIMEOUT)
        if self.path.split("?", 1)[0] != METRICS_PATH or self.metrics is None:
            self.send_error(404)
            return
        try:
            data = self.metrics.render()
        except Exception as exc:
            logging.error(f"Metrics error: {exc}")
            self.send_error(500, "Internal Server Error")
            return
        self.send_response(200)
        self.send_header("Content-Type", CONTENT_TYPE_LATEST)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        if send_body:
            self.wfile.write(data)

    def log_message(self, format: str, *args) -> None:
        """Route access lines to the debug log."""
        logging.debug(f"Metrics server: {format % args}")


class MetricsHTTPServer(ThreadingHTTPServer):
    """Threading server that can accept IPv4 clients on an IPv6 socket."""

    dual_stack = False

    def server_bind(self) -> None:
        if self.dual_stack:
            self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        super().server_bind()


class MetricsServer:
    """Prometheus metrics HTTP server."""

    def __init__(self, addr: str, metrics: PingMetrics) -> None:
        self.addr = addr
        self.host, self.port = parse_listen_address(addr)
        self.metrics = metrics
        self.server: MetricsHTTPServer | None = None

    def _handler_class(self) -> type[MetricsRequestHandler]:
        return type("BoundMetricsRequestHandler", (MetricsRequestHandler,), {"metrics": self.metrics})

    def _server_class(self) -> type[MetricsHTTPServer]:
        family = socket.AF_INET
        dual_stack = False
        if not self.host:
            # ":port" listens on every interface, IPv6 included where available
            if socket.has_dualstack_ipv6():
                family = socket.AF_INET6
                dual_stack = True
        else:
            try:
                if ipaddress.ip_address(self.host).version == 6:
                    family = socket.AF_INET6
            except ValueError:
                pass
        return type(
            "BoundMetricsHTTPServer",
            (MetricsHTTPServer,),
            {"address_family": family, "dual_stack": dual_stack},
        )

    def bind(self) -> None:
        """Bind and listen.

        Raises:
            MetricsServerError: the address cannot be bound
        """
        if self.server is not None:
            return
        try:
            self.server = self._server_class()((self.host, self.port), self._handler_class())
        except OSError as exc:
            raise MetricsServerError(
                f"failed to run http Prometheus metrics server on \"{self.addr}\": {exc}"
            ) from exc
        self.port = self.server.server_address[1]

    def serve_forever(self) -> None:
        """Serve until ``shutdown`` is called from another thread."""
        self.bind()
        assert self.server is not None
        logging.info(f"starting http Prometheus metrics server on \"{self.addr}\"")
        self.server.serve_forever()

    def shutdown(self) -> None:
        """Stop serve_forever (call from another thread)."""
        if self.server:
            self.server.shutdown()

    def close(self) -> None:
        if self.server:
            self.server.server_close()
            self.server = None
