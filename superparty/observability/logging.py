"""Structured Logging - JSON logs with provider correlation.

Provides structured logging for:
- Circuit breaker transitions (opened, probing, closed)
- Synthesis failures
- Cascade fallthrough
- Janitor sweeps

Breaker logs carry the provider name for correlation.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    level = "WARNING" if level.upper() == "WARN" else level.upper()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also configure standard logging for third-party libraries
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_call(call_sid: str) -> None:
    """Bind the telephony call id to all logs in current context.

    Args:
        call_sid: Call identifier supplied by the telephony layer
    """
    structlog.contextvars.bind_contextvars(call_sid=call_sid)


def unbind_call() -> None:
    """Remove call_sid from log context."""
    structlog.contextvars.unbind_contextvars("call_sid")


# -----------------------------------------------------------------------------
# Event-specific logging functions
# -----------------------------------------------------------------------------


class CircuitLogger:
    """Logger for circuit breaker events of one provider."""

    def __init__(self, provider: str) -> None:
        self._provider = provider
        self._log = get_logger("circuit").bind(provider=provider)

    def failure_recorded(
        self,
        consecutive_failures: int,
        threshold: int,
        error: str,
    ) -> None:
        """Log a failure that did not open the circuit."""
        self._log.warning(
            "circuit_failure_recorded",
            event_type="circuit.failure",
            consecutive_failures=consecutive_failures,
            threshold=threshold,
            error=error,
        )

    def opened(self, consecutive_failures: int, reset_timeout_s: float) -> None:
        """Log circuit opening."""
        self._log.error(
            "circuit_opened",
            event_type="circuit.opened",
            consecutive_failures=consecutive_failures,
            retry_in_s=reset_timeout_s,
        )

    def half_open(self) -> None:
        """Log the probe slot being claimed."""
        self._log.info(
            "circuit_half_open",
            event_type="circuit.half_open",
        )

    def closed(self, previous_state: str) -> None:
        """Log circuit recovery."""
        self._log.info(
            "circuit_closed",
            event_type="circuit.closed",
            previous_state=previous_state,
        )

    def probe_released(self) -> None:
        """Log an abandoned probe handing the slot back."""
        self._log.debug(
            "circuit_probe_released",
            event_type="circuit.probe_released",
        )


class CascadeLogger:
    """Logger for cascade provider selection."""

    def __init__(self) -> None:
        self._log = get_logger("cascade")

    def provider_skipped(self, provider: str) -> None:
        """Log a provider skipped because it is unavailable."""
        self._log.debug(
            "cascade_provider_skipped",
            event_type="cascade.skipped",
            provider=provider,
        )

    def provider_failed(self, provider: str, error: str | None = None) -> None:
        """Log a provider that returned no audio."""
        fields: dict[str, Any] = {"event_type": "cascade.failed", "provider": provider}
        if error:
            fields["error"] = error
        self._log.warning("cascade_provider_failed", **fields)

    def provider_succeeded(self, provider: str, attempts: int) -> None:
        """Log the provider that produced audio."""
        self._log.info(
            "cascade_provider_succeeded",
            event_type="cascade.succeeded",
            provider=provider,
            attempts=attempts,
        )

    def exhausted(self, attempts: int, text_length: int) -> None:
        """Log a turn where no provider produced audio."""
        self._log.warning(
            "cascade_exhausted",
            event_type="cascade.exhausted",
            attempts=attempts,
            text_length=text_length,
        )


# Initialize default logging configuration
def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
