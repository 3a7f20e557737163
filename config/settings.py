"""
Application constants.

Values here are fixed by the metrics contract and by the probe budget; anything
an operator may change lives in ``settings_model.Settings`` instead.
"""

# ─────────────────────────────────────────────────────────────────────────────
# Version
# ─────────────────────────────────────────────────────────────────────────────

VERSION = "1.0.0"

# ─────────────────────────────────────────────────────────────────────────────
# Targets
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_TARGET_HOSTS = (
    "1.1.1.1",
    "8.8.8.8",
    "google.com",
    "wikipedia.org",
)

# ─────────────────────────────────────────────────────────────────────────────
# Probe Settings
# ─────────────────────────────────────────────────────────────────────────────

PING_COUNT = 1              # echo requests per probe
PING_TIMEOUT_MS = 30000     # 30 seconds
DEFAULT_PROBE_INTERVAL_MS = 10000

# ─────────────────────────────────────────────────────────────────────────────
# Metrics
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_METRICS_ADDR = ":2112"
METRICS_PATH = "/metrics"

RTT_METRIC_NAME = "ping_rtt_ms"
FAILURES_METRIC_NAME = "ping_failures_total"
TARGET_HOST_LABEL = "target_host"

RTT_BUCKETS_MS = (
    0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100,
    200, 400, 600, 800, 1000,
    5000, 10000,
    20000, 30000,
)

# ─────────────────────────────────────────────────────────────────────────────
# HTTP Server Timeouts (seconds)
# ─────────────────────────────────────────────────────────────────────────────

SERVER_READ_TIMEOUT = 10.0
SERVER_WRITE_TIMEOUT = 10.0
SERVER_IDLE_TIMEOUT = 60.0
SERVER_READ_HEADER_TIMEOUT = 5.0

# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
