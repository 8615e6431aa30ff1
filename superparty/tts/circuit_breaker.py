"""Circuit Breaker - Explicit 3-state guard for one remote TTS provider.

States:
- CLOSED: Requests flow normally; failures are counted
- OPEN: Requests are rejected until the reset timeout elapses
- HALF_OPEN: One probe request is in flight; everybody else is rejected

Transitions:
    CLOSED    --failure (count reaches threshold)--> OPEN
    OPEN      --try_acquire() after reset timeout--> HALF_OPEN
    HALF_OPEN --success--> CLOSED
    HALF_OPEN --failure--> OPEN (timestamp refreshed)
    HALF_OPEN --release()--> OPEN (probe abandoned, counters untouched)
    any       --success--> CLOSED

An OPEN circuit whose reset timeout has elapsed is "probe-able":
should_attempt() returns True, and the first caller to try_acquire() owns
the probe. The breaker does no I/O and never awaits, so on a single event
loop every method runs atomically with respect to other coroutines.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from superparty.config.constants import TTS
from superparty.observability.logging import CircuitLogger
from superparty.observability.metrics import record_circuit_state


class CircuitState(Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class UsageStats:
    """Request counters for one provider.

    Invariant: total_requests == total_successes + total_failures.
    Cache hits are counted as zero-latency successes.
    """

    total_requests: int = 0
    total_successes: int = 0
    total_failures: int = 0
    total_latency_ms: float = 0.0
    cache_hits: int = 0
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None

    @property
    def average_latency_ms(self) -> float:
        """Mean latency over successes, 0.0 before the first success."""
        if self.total_successes == 0:
            return 0.0
        return self.total_latency_ms / self.total_successes

    @property
    def success_rate(self) -> float:
        """Percentage of requests that succeeded, 0.0 before any request."""
        if self.total_requests == 0:
            return 0.0
        return self.total_successes / self.total_requests * 100.0

    def record_success(self, latency_ms: float) -> None:
        """Count a success and its latency."""
        self.total_requests += 1
        self.total_successes += 1
        self.total_latency_ms += max(0.0, latency_ms)
        self.last_success_at = datetime.now(timezone.utc)

    def record_failure(self) -> None:
        """Count a failure."""
        self.total_requests += 1
        self.total_failures += 1
        self.last_failure_at = datetime.now(timezone.utc)

    def record_cache_hit(self) -> None:
        """Count a cache hit as a zero-latency success."""
        self.cache_hits += 1
        self.record_success(0.0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for dashboards."""
        return {
            "requests": self.total_requests,
            "successes": self.total_successes,
            "failures": self.total_failures,
            "cache_hits": self.cache_hits,
            "average_latency_ms": round(self.average_latency_ms, 2),
            "success_rate": round(self.success_rate, 2),
            "last_success_at": (
                self.last_success_at.isoformat() if self.last_success_at else None
            ),
            "last_failure_at": (
                self.last_failure_at.isoformat() if self.last_failure_at else None
            ),
        }


class CircuitBreaker:
    """Failure-counting circuit breaker with single-probe recovery.

    Usage:
        breaker = CircuitBreaker("coqui")

        if breaker.try_acquire():
            try:
                result = await call_remote()
            except TransportError as e:
                breaker.record_failure(e)
            else:
                breaker.record_success()
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = TTS.FAILURE_THRESHOLD,
        reset_timeout_s: float = TTS.RESET_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if reset_timeout_s <= 0:
            raise ValueError("reset_timeout_s must be > 0")

        self._name = name
        self._failure_threshold = failure_threshold
        self._reset_timeout_s = reset_timeout_s
        self._clock = clock
        self._logger = CircuitLogger(name)

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure_at: float | None = None

    @property
    def name(self) -> str:
        """Name of the guarded provider."""
        return self._name

    @property
    def state(self) -> CircuitState:
        """Current stored state."""
        return self._state

    @property
    def consecutive_failures(self) -> int:
        """Length of the current failure streak."""
        return self._consecutive_failures

    @property
    def last_failure_at(self) -> float | None:
        """Clock reading of the most recent failure."""
        return self._last_failure_at

    @property
    def failure_threshold(self) -> int:
        """Failures needed to open the circuit."""
        return self._failure_threshold

    @property
    def reset_timeout_s(self) -> float:
        """Cooldown before an open circuit may be probed."""
        return self._reset_timeout_s

    def elapsed_since_failure(self) -> float | None:
        """Seconds since the last failure, None if there never was one."""
        if self._last_failure_at is None:
            return None
        return self._clock() - self._last_failure_at

    def is_probeable(self) -> bool:
        """OPEN and the reset timeout has elapsed."""
        if self._state is not CircuitState.OPEN:
            return False
        elapsed = self.elapsed_since_failure()
        return elapsed is not None and elapsed >= self._reset_timeout_s

    def should_attempt(self) -> bool:
        """Whether a request may go out right now. No side effects."""
        if self._state is CircuitState.CLOSED:
            return True
        if self._state is CircuitState.HALF_OPEN:
            return False  # Probe already in flight
        return self.is_probeable()

    def try_acquire(self) -> bool:
        """Claim permission for one remote call.

        In CLOSED this always succeeds. In a probe-able OPEN circuit the
        first caller moves the breaker to HALF_OPEN and owns the probe.

        Returns:
            True if the caller may make the remote call
        """
        if not self.should_attempt():
            return False

        if self._state is CircuitState.OPEN:
            self._transition(CircuitState.HALF_OPEN)
            self._logger.half_open()

        return True

    def release(self) -> None:
        """Hand back an unused probe slot (HALF_OPEN -> OPEN)."""
        if self._state is CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
            self._logger.probe_released()

    def record_success(self) -> None:
        """Reset the failure streak and close the circuit."""
        previous = self._state
        self._consecutive_failures = 0
        if previous is not CircuitState.CLOSED:
            self._transition(CircuitState.CLOSED)
            self._logger.closed(previous.value)

    def record_failure(self, error: BaseException | str | None = None) -> None:
        """Count a failure and open the circuit at the threshold.

        A failed probe re-opens the circuit and refreshes the timestamp.
        """
        self._consecutive_failures += 1
        self._last_failure_at = self._clock()

        if self._state is CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
            self._logger.opened(self._consecutive_failures, self._reset_timeout_s)
            return

        if (
            self._state is CircuitState.CLOSED
            and self._consecutive_failures >= self._failure_threshold
        ):
            self._transition(CircuitState.OPEN)
            self._logger.opened(self._consecutive_failures, self._reset_timeout_s)
            return

        if self._state is CircuitState.CLOSED:
            self._logger.failure_recorded(
                self._consecutive_failures,
                self._failure_threshold,
                str(error) if error else "unknown",
            )

    def _transition(self, new_state: CircuitState) -> None:
        self._state = new_state
        record_circuit_state(self._name, new_state.value)

    def to_dict(self) -> dict[str, Any]:
        """Serialize breaker state for dashboards."""
        return {
            "circuit_state": self._state.value,
            "consecutive_failures": self._consecutive_failures,
            "failure_threshold": self._failure_threshold,
            "reset_timeout_s": self._reset_timeout_s,
        }
