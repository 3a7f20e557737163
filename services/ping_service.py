from __future__ import annotations

import ipaddress
import logging
import math
import socket
from dataclasses import dataclass
from typing import Any, Callable

from pythonping import ping as pythonping_ping

from config import PING_COUNT, PING_TIMEOUT_MS, NetTestError


class ProbeConstructionError(NetTestError):
    """The probe could not be bound to its host (bad literal, DNS failure)."""


class ProbeTransportError(NetTestError):
    """Sending or receiving the echo failed (permissions, network)."""


@dataclass(frozen=True)
class ProbeStats:
    """Statistics of one probe run."""
    packets_sent: int
    packets_recv: int
    avg_rtt_ms: float | None

    @property
    def has_reply(self) -> bool:
        return self.packets_recv > 0


class IcmpProbe:
    """A probe bound to one resolved host.

    ``host`` keeps the string it was created with, ``address`` the resolved
    address actually sent to.
    """

    def __init__(
        self,
        host: str,
        address: str,
        *,
        count: int = PING_COUNT,
        timeout_ms: int = PING_TIMEOUT_MS,
        ping_func: Callable[..., Any] = pythonping_ping,
    ) -> None:
        self.host = host
        self.address = address
        self.count = count
        self.timeout_ms = timeout_ms
        self._ping_func = ping_func

    def run(self) -> ProbeStats:
        """Send the echo requests and wait for replies (blocking)."""
        try:
            responses = self._ping_func(
                self.address,
                count=self.count,
                timeout=self.timeout_ms / 1000.0,
                verbose=False,
            )
        except OSError as exc:
            # Raw sockets need CAP_NET_RAW / root
            raise ProbeTransportError(str(exc) or exc.__class__.__name__) from exc

        replies = [resp.time_elapsed_ms for resp in responses if resp.success]
        avg = sum(replies) / len(replies) if replies else None
        return ProbeStats(
            packets_sent=self.count,
            packets_recv=len(replies),
            avg_rtt_ms=avg,
        )

    def __repr__(self) -> str:
        return f"IcmpProbe(host={self.host!r}, address={self.address!r})"


class PingService:
    """Creates ICMP probes for target hosts."""

    def __init__(
        self,
        *,
        count: int = PING_COUNT,
        timeout_ms: int = PING_TIMEOUT_MS,
        ping_func: Callable[..., Any] = pythonping_ping,
        resolver: Callable[..., Any] = socket.getaddrinfo,
    ) -> None:
        self.count = count
        self.timeout_ms = timeout_ms
        self._ping_func = ping_func
        self._resolver = resolver

    def resolve(self, host: str) -> str:
        """Resolve host to an address, preferring IPv4.

        Raises:
            ProbeConstructionError: empty host or resolution failure
        """
        host = host.strip()
        if not host:
            raise ProbeConstructionError("empty host")

        try:
            return str(ipaddress.ip_address(host))
        except ValueError:
            pass

        try:
            infos = self._resolver(host, None)
        except (socket.gaierror, UnicodeError) as exc:
            raise ProbeConstructionError(str(exc)) from exc

        addresses = [info[4][0] for info in infos if info[0] == socket.AF_INET]
        addresses += [info[4][0] for info in infos if info[0] == socket.AF_INET6]
        if not addresses:
            raise ProbeConstructionError(f"no address found for {host}")
        logging.debug(f"Resolved {host} -> {addresses[0]}")
        return addresses[0]

    def create_probe(self, host: str) -> IcmpProbe:
        """Bind a new probe to host."""
        address = self.resolve(host)
        return IcmpProbe(
            host,
            address,
            count=self.count,
            timeout_ms=self.timeout_ms,
            ping_func=self._ping_func,
        )


def whole_milliseconds(value_ms: float) -> float:
    """Truncate a round-trip time to whole milliseconds."""
    return float(math.floor(value_ms))
