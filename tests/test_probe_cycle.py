from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import ProbeStrategy
from core import MetricsHandler, OutcomeKind, PingHandler, ProbeCycleExecutor
from infrastructure import PingMetrics
from services import ProbeConstructionError, ProbeStats, ProbeTransportError

NO_REPLY = ProbeStats(packets_sent=1, packets_recv=0, avg_rtt_ms=None)


def reply(ms: float) -> ProbeStats:
    return ProbeStats(packets_sent=1, packets_recv=1, avg_rtt_ms=ms)


class FakeProbe:
    def __init__(self, result) -> None:
        self.result = result
        self.runs = 0

    def run(self) -> ProbeStats:
        self.runs += 1
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class FakeFactory:
    """Hands out FakeProbes; an exception value means construction fails."""

    def __init__(self, results: dict) -> None:
        self.results = results
        self.probes: dict[str, FakeProbe] = {}
        self.created: list[str] = []

    def __call__(self, host: str) -> FakeProbe:
        self.created.append(host)
        result = self.results[host]
        if isinstance(result, ProbeConstructionError):
            raise result
        probe = FakeProbe(result)
        self.probes[host] = probe
        return probe

    def runs(self, host: str) -> int:
        probe = self.probes.get(host)
        return probe.runs if probe else 0


def failures(metrics: PingMetrics, host: str) -> float | None:
    return metrics.registry.get_sample_value("ping_failures_total", {"target_host": host})


def rtt_count(metrics: PingMetrics, host: str) -> float | None:
    return metrics.registry.get_sample_value("ping_rtt_ms_count", {"target_host": host})


def rtt_sum(metrics: PingMetrics, host: str) -> float | None:
    return metrics.registry.get_sample_value("ping_rtt_ms_sum", {"target_host": host})


def make_cycle(results: dict, strategy: ProbeStrategy, targets=None):
    metrics = PingMetrics()
    factory = FakeFactory(results)
    cycle = ProbeCycleExecutor(
        targets if targets is not None else list(results),
        strategy,
        factory,
        MetricsHandler(metrics),
    )
    return cycle, factory, metrics


# ── fallover ────────────────────────────────────────────────────────────


def test_fallover_stops_at_first_success() -> None:
    cycle, factory, metrics = make_cycle(
        {"A": NO_REPLY, "B": reply(23.7), "C": reply(5.0)},
        ProbeStrategy.FALLOVER,
    )

    outcomes = cycle.run_cycle()

    assert [o.target for o in outcomes] == ["A", "B"]
    assert [o.kind for o in outcomes] == [OutcomeKind.NO_REPLY, OutcomeKind.SUCCESS]
    assert factory.runs("A") == 1
    assert factory.runs("B") == 1
    assert factory.runs("C") == 0

    assert failures(metrics, "A") == 1.0
    assert rtt_count(metrics, "A") is None
    assert rtt_count(metrics, "B") == 1.0
    assert rtt_sum(metrics, "B") == 23.0
    assert failures(metrics, "B") is None
    assert failures(metrics, "C") is None
    assert rtt_count(metrics, "C") is None


def test_fallover_first_host_success_probes_only_it() -> None:
    cycle, factory, metrics = make_cycle(
        {"A": reply(1.0), "B": reply(2.0)},
        ProbeStrategy.FALLOVER,
    )

    outcomes = cycle.run_cycle()

    assert len(outcomes) == 1
    assert factory.runs("B") == 0
    assert rtt_count(metrics, "A") == 1.0


def test_fallover_all_fail_attempts_every_target() -> None:
    cycle, factory, metrics = make_cycle(
        {"A": NO_REPLY, "B": ProbeTransportError("network is unreachable"), "C": NO_REPLY},
        ProbeStrategy.FALLOVER,
    )

    outcomes = cycle.run_cycle()

    assert len(outcomes) == 3
    assert all(o.is_failure for o in outcomes)
    for host in ("A", "B", "C"):
        assert failures(metrics, host) == 1.0
        assert rtt_count(metrics, host) is None


def test_construction_failure_never_stops_fallover() -> None:
    cycle, factory, metrics = make_cycle(
        {"bad.invalid": ProbeConstructionError("Name or service not known"), "B": reply(9.0)},
        ProbeStrategy.FALLOVER,
    )

    outcomes = cycle.run_cycle()

    assert [o.kind for o in outcomes] == [OutcomeKind.CONSTRUCTION_ERROR, OutcomeKind.SUCCESS]
    assert failures(metrics, "bad.invalid") == 1.0
    assert rtt_count(metrics, "B") == 1.0


def test_construction_failures_counted_before_probing() -> None:
    # every probe is built up front, so a bad host after the first success still counts
    cycle, factory, metrics = make_cycle(
        {"A": reply(3.0), "bad.invalid": ProbeConstructionError("no address")},
        ProbeStrategy.FALLOVER,
    )

    cycle.run_cycle()

    assert factory.created == ["A", "bad.invalid"]
    assert failures(metrics, "bad.invalid") == 1.0
    assert rtt_count(metrics, "A") == 1.0


# ── all ─────────────────────────────────────────────────────────────────


def test_all_attempts_every_target_when_all_fail() -> None:
    cycle, factory, metrics = make_cycle(
        {"A": NO_REPLY, "B": NO_REPLY, "C": ProbeTransportError("timeout")},
        ProbeStrategy.ALL,
    )

    outcomes = cycle.run_cycle()

    assert [o.target for o in outcomes] == ["A", "B", "C"]
    for host in ("A", "B", "C"):
        assert factory.runs(host) == 1
        assert failures(metrics, host) == 1.0
        assert rtt_count(metrics, host) is None


def test_all_does_not_stop_after_success() -> None:
    cycle, factory, metrics = make_cycle(
        {"A": reply(10.0), "B": NO_REPLY, "C": reply(250.4)},
        ProbeStrategy.ALL,
    )

    outcomes = cycle.run_cycle()

    assert [o.kind for o in outcomes] == [OutcomeKind.SUCCESS, OutcomeKind.NO_REPLY, OutcomeKind.SUCCESS]
    assert rtt_count(metrics, "A") == 1.0
    assert failures(metrics, "B") == 1.0
    assert rtt_sum(metrics, "C") == 250.0


def test_duplicate_targets_probed_each_time() -> None:
    cycle, factory, metrics = make_cycle({"A": NO_REPLY}, ProbeStrategy.ALL, targets=["A", "A"])

    cycle.run_cycle()

    assert failures(metrics, "A") == 2.0


# ── outcomes ────────────────────────────────────────────────────────────


def test_zero_replies_never_recorded_as_zero_latency() -> None:
    cycle, factory, metrics = make_cycle({"A": NO_REPLY}, ProbeStrategy.ALL)

    cycle.run_cycle()

    assert rtt_count(metrics, "A") is None
    assert metrics.registry.get_sample_value(
        "ping_rtt_ms_bucket", {"target_host": "A", "le": "0.0"}
    ) is None
    assert failures(metrics, "A") == 1.0


@pytest.mark.parametrize("error", [PermissionError("operation not permitted"), OSError("network down")])
def test_os_errors_are_transport_errors(error) -> None:
    outcome = PingHandler("A", FakeProbe(error)).execute()
    assert outcome.kind is OutcomeKind.TRANSPORT_ERROR
    assert outcome.rtt_ms is None


def test_success_rtt_truncated_to_whole_ms() -> None:
    outcome = PingHandler("A", FakeProbe(reply(12.9))).execute()
    assert outcome.is_success
    assert outcome.rtt_ms == 12.0


def test_sub_millisecond_reply_is_success_in_zero_bucket() -> None:
    cycle, factory, metrics = make_cycle({"A": reply(0.4)}, ProbeStrategy.ALL)

    cycle.run_cycle()

    assert rtt_count(metrics, "A") == 1.0
    assert metrics.registry.get_sample_value(
        "ping_rtt_ms_bucket", {"target_host": "A", "le": "0.0"}
    ) == 1.0
    assert failures(metrics, "A") is None


def test_repeated_cycles_accumulate() -> None:
    cycle, factory, metrics = make_cycle({"A": NO_REPLY, "B": reply(40.0)}, ProbeStrategy.FALLOVER)

    previous = (0.0, 0.0)
    for expected in (1.0, 2.0, 3.0):
        cycle.run_cycle()
        current = (failures(metrics, "A"), rtt_count(metrics, "B"))
        assert current == (expected, expected)
        assert current >= previous
        previous = current
