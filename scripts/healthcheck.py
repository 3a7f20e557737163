#!/usr/bin/env python3
"""
Standalone health check script for Docker/Kubernetes.
Performs an HTTP GET request to the metrics endpoint and checks that the
ping series are exposed.
"""

import os
import sys
import urllib.request


def build_url(metrics_addr: str, check_host: str = "localhost") -> str:
    """Turn a bind address such as ``:2112`` into a URL reachable from inside the container."""
    host, _, port = metrics_addr.rpartition(":")
    host = host.strip("[]")
    if host in ("", "0.0.0.0", "::"):
        host = check_host
    if ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}/metrics"


def main() -> None:
    addr = os.environ.get("METRICS_ADDR", ":2112")
    check_host = os.environ.get("METRICS_ADDR_CHECK", "localhost")
    url = build_url(addr, check_host)

    try:
        with urllib.request.urlopen(url, timeout=5) as response:
            body = response.read().decode("utf-8", errors="replace")
            if response.status != 200:
                print(f"Health check failed: HTTP {response.status}")
                sys.exit(1)
    except Exception as e:
        print(f"Health check error: {e}")
        sys.exit(1)

    if "ping_rtt_ms" not in body:
        print("Health check failed: ping_rtt_ms not exposed")
        sys.exit(1)

    print("OK")
    sys.exit(0)


if __name__ == "__main__":
    main()
