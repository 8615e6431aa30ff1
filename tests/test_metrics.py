"""Tests for Prometheus Metrics.

Tests cover:
- Helper functions update the right series
- Circuit state gauge values
- Build info setting
"""

from prometheus_client import REGISTRY

from superparty.observability.metrics import (
    record_cache_hit,
    record_cascade_fallback,
    record_circuit_state,
    record_error,
    record_janitor_deletions,
    record_tts_latency,
    record_tts_request,
    set_build_info,
    update_provider_available,
)


def sample(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestCounters:
    """Tests for counter helpers."""

    def test_record_tts_request(self):
        labels = {"provider": "metrics-test", "outcome": "failure"}
        before = sample("superparty_tts_requests_total", labels)
        record_tts_request("metrics-test", "failure")
        assert sample("superparty_tts_requests_total", labels) == before + 1

    def test_record_cache_hit_counts_request(self):
        before_hits = sample("superparty_tts_cache_hits_total", {"provider": "metrics-test"})
        before_req = sample(
            "superparty_tts_requests_total",
            {"provider": "metrics-test", "outcome": "cache_hit"},
        )
        record_cache_hit("metrics-test")
        assert sample(
            "superparty_tts_cache_hits_total", {"provider": "metrics-test"}
        ) == before_hits + 1
        assert sample(
            "superparty_tts_requests_total",
            {"provider": "metrics-test", "outcome": "cache_hit"},
        ) == before_req + 1

    def test_record_cascade_fallback(self):
        before = sample("superparty_cascade_fallbacks_total")
        record_cascade_fallback()
        assert sample("superparty_cascade_fallbacks_total") == before + 1

    def test_record_janitor_deletions_ignores_zero(self):
        before = sample("superparty_janitor_deleted_files_total")
        record_janitor_deletions(0)
        record_janitor_deletions(3)
        assert sample("superparty_janitor_deleted_files_total") == before + 3

    def test_record_error(self):
        labels = {"component": "tts", "type": "MetricsTestError"}
        before = sample("superparty_errors_total", labels)
        record_error("tts", "MetricsTestError")
        assert sample("superparty_errors_total", labels) == before + 1


class TestGauges:
    """Tests for gauges and histograms."""

    def test_circuit_state_values(self):
        labels = {"provider": "metrics-test"}
        record_circuit_state("metrics-test", "open")
        assert sample("superparty_circuit_state", labels) == 2
        record_circuit_state("metrics-test", "half_open")
        assert sample("superparty_circuit_state", labels) == 1
        record_circuit_state("metrics-test", "closed")
        assert sample("superparty_circuit_state", labels) == 0

    def test_provider_available(self):
        update_provider_available("metrics-test", True)
        assert sample("superparty_tts_provider_available", {"provider": "metrics-test"}) == 1
        update_provider_available("metrics-test", False)
        assert sample("superparty_tts_provider_available", {"provider": "metrics-test"}) == 0

    def test_latency_recorded_in_seconds(self):
        labels = {"provider": "metrics-test"}
        before = sample("superparty_tts_latency_seconds_sum", labels)
        record_tts_latency("metrics-test", 1500.0)
        assert sample("superparty_tts_latency_seconds_sum", labels) == before + 1.5

    def test_set_build_info(self):
        set_build_info("1.0.0", "abc123", "2026-01-01")
        assert sample(
            "superparty_build_info",
            {"version": "1.0.0", "commit": "abc123", "build_time": "2026-01-01"},
        ) == 1
