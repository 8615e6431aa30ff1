"""TTSProvider Interface - Canonical TTS provider abstraction.

All providers in the cascade implement this interface. The cascade is
blind to which vendor sits behind a provider.

Contract:
- is_available() is cheap and does no I/O
- synthesize() never raises; None means "no audio from me"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from superparty.tts.cache import AudioCache, AudioRef
from superparty.tts.circuit_breaker import UsageStats


class TTSProvider(ABC):
    """Canonical interface for TTS providers.

    Usage:
        provider = CoquiBackend(config, cache)
        await provider.start()

        if provider.is_available():
            ref = await provider.synthesize("Bună ziua!")

        await provider.shutdown()
    """

    _cache: AudioCache | None = None

    def __init__(self, priority: int = 0) -> None:
        self._priority = priority
        self._stats = UsageStats()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier.

        Returns:
            String identifier (e.g., "coqui", "elevenlabs", "mock")
        """
        ...

    @property
    def priority(self) -> int:
        """Static rank; higher is tried first."""
        return self._priority

    @property
    def cache(self) -> AudioCache | None:
        """Audio cache this provider writes to."""
        return self._cache

    @property
    def stats(self) -> UsageStats:
        """Usage counters of this provider."""
        return self._stats

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured and willing to take a request."""
        ...

    @abstractmethod
    async def synthesize(self, text: str) -> AudioRef | None:
        """Synthesize text to a cached audio file.

        Args:
            text: Text to speak

        Returns:
            Reference to the audio, or None if this provider failed
        """
        ...

    async def start(self) -> None:
        """Start the provider (open sessions, background tasks).

        Default implementation does nothing.
        """
        pass

    async def shutdown(self) -> None:
        """Stop the provider and release resources.

        Default implementation does nothing.
        """
        pass

    def get_stats(self) -> dict[str, Any]:
        """Stats for dashboards."""
        return {
            "provider": self.name,
            "priority": self._priority,
            "available": self.is_available(),
            **self._stats.to_dict(),
        }
