"""Prometheus Metrics - TTS layer observability.

Exports:
- Synthesis requests by provider and outcome
- Remote synthesis latency
- Circuit state per provider
- Cache hits
- Cascade fallbacks to the built-in voice
- Janitor deletions
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# -----------------------------------------------------------------------------
# Latency Histograms
# -----------------------------------------------------------------------------

TTS_LATENCY = Histogram(
    "superparty_tts_latency_seconds",
    "Remote TTS synthesis latency",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0, 20.0, 30.0],
)

# -----------------------------------------------------------------------------
# Counters
# -----------------------------------------------------------------------------

TTS_REQUESTS = Counter(
    "superparty_tts_requests_total",
    "TTS synthesis attempts by provider",
    ["provider", "outcome"],  # success, failure, cache_hit, skipped
)

TTS_CACHE_HITS = Counter(
    "superparty_tts_cache_hits_total",
    "Synthesis requests served from the audio cache",
    ["provider"],
)

CIRCUIT_TRANSITIONS = Counter(
    "superparty_circuit_transitions_total",
    "Circuit breaker state transitions",
    ["provider", "state"],
)

CASCADE_FALLBACKS = Counter(
    "superparty_cascade_fallbacks_total",
    "Turns where every provider failed and the built-in voice was used",
)

JANITOR_DELETIONS = Counter(
    "superparty_janitor_deleted_files_total",
    "Temp files removed by the janitor",
)

ERRORS = Counter(
    "superparty_errors_total",
    "Total errors by component",
    ["component", "type"],
)

# -----------------------------------------------------------------------------
# Gauges
# -----------------------------------------------------------------------------

# 0 = closed, 1 = half_open, 2 = open
CIRCUIT_STATE = Gauge(
    "superparty_circuit_state",
    "Circuit breaker state per provider",
    ["provider"],
)

PROVIDER_AVAILABLE = Gauge(
    "superparty_tts_provider_available",
    "Whether the provider reported itself available on the last probe",
    ["provider"],
)

# -----------------------------------------------------------------------------
# Info
# -----------------------------------------------------------------------------

BUILD_INFO = Info(
    "superparty_build",
    "Build information",
)

_CIRCUIT_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def record_tts_request(provider: str, outcome: str) -> None:
    """Record one synthesis attempt outcome."""
    TTS_REQUESTS.labels(provider=provider, outcome=outcome).inc()


def record_tts_latency(provider: str, latency_ms: float) -> None:
    """Record remote synthesis latency in milliseconds."""
    TTS_LATENCY.labels(provider=provider).observe(latency_ms / 1000.0)


def record_cache_hit(provider: str) -> None:
    """Record a cache hit."""
    TTS_CACHE_HITS.labels(provider=provider).inc()
    TTS_REQUESTS.labels(provider=provider, outcome="cache_hit").inc()


def record_circuit_state(provider: str, state: str) -> None:
    """Record a circuit transition and update the state gauge."""
    CIRCUIT_TRANSITIONS.labels(provider=provider, state=state).inc()
    CIRCUIT_STATE.labels(provider=provider).set(_CIRCUIT_STATE_VALUES.get(state, 0))


def record_cascade_fallback() -> None:
    """Record a turn that fell back to the built-in voice."""
    CASCADE_FALLBACKS.inc()


def record_janitor_deletions(count: int) -> None:
    """Record files removed by one janitor sweep."""
    if count > 0:
        JANITOR_DELETIONS.inc(count)


def record_error(component: str, error_type: str) -> None:
    """Record error by component."""
    ERRORS.labels(component=component, type=error_type).inc()


def update_provider_available(provider: str, available: bool) -> None:
    """Update provider availability gauge."""
    PROVIDER_AVAILABLE.labels(provider=provider).set(1 if available else 0)


def set_build_info(version: str, commit: str, build_time: str) -> None:
    """Set build information."""
    BUILD_INFO.info({
        "version": version,
        "commit": commit,
        "build_time": build_time,
    })
