"""TTS Constants - Default thresholds and timeouts for the synthesis layer.

These values define the circuit breaker policy and the timeouts applied to
every remote call. Settings may override them per deployment.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class TTSConstants:
    """Immutable TTS defaults.

    All durations in seconds unless otherwise noted.
    """

    # Circuit breaker
    FAILURE_THRESHOLD: Final[int] = 3  # Consecutive failures before OPEN
    RESET_TIMEOUT_S: Final[float] = 60.0  # OPEN cooldown before a probe

    # Background probing
    HEALTH_CHECK_INTERVAL_S: Final[float] = 30.0  # Liveness probe while CLOSED

    # Remote call timeouts
    SYNTHESIS_TIMEOUT_S: Final[float] = 30.0
    PROBE_TIMEOUT_S: Final[float] = 5.0

    # Temp directory janitor
    TEMP_RETENTION_S: Final[float] = 3600.0  # 1 hour
    JANITOR_INTERVAL_S: Final[float] = 600.0

    # Cache layout
    AUDIO_URL_PREFIX: Final[str] = "/audio"


# Singleton instance for import convenience
TTS = TTSConstants()
