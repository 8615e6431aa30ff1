"""Mock TTS Backend - For testing and development.

Generates silent WAV audio with a duration proportional to the text.
Does not require any external services.
"""

from __future__ import annotations

import io
import wave

from superparty.observability.logging import get_logger
from superparty.observability.metrics import (
    record_cache_hit,
    record_error,
    record_tts_request,
)
from superparty.tts.backends.interface import TTSProvider
from superparty.tts.cache import AudioCache, AudioRef, fingerprint

logger = get_logger(__name__)


class MockBackend(TTSProvider):
    """Mock TTS backend for testing.

    Always available. Useful for development without vendor credentials.
    """

    def __init__(
        self,
        cache: AudioCache | None = None,
        priority: int = 0,
        sample_rate: int = 8000,
        chars_per_second: float = 15.0,
    ) -> None:
        """Initialize mock backend.

        Args:
            cache: Audio cache (defaults to ./cache/mock)
            priority: Cascade rank
            sample_rate: Audio sample rate
            chars_per_second: Simulated speech rate
        """
        super().__init__(priority)
        self._cache = cache or AudioCache("cache", namespace=self.name, suffix=".wav")
        self._sample_rate = sample_rate
        self._chars_per_second = chars_per_second

    @property
    def name(self) -> str:
        """Backend name identifier."""
        return "mock"

    def is_available(self) -> bool:
        """Always available."""
        return True

    async def synthesize(self, text: str) -> AudioRef | None:
        """Write silence for text into the cache.

        Args:
            text: Text to "speak"

        Returns:
            Reference to the silent WAV file, or None if the cache write fails
        """
        key = fingerprint(text)
        ref = self._cache.lookup(key)
        if ref is not None:
            self._stats.record_cache_hit()
            record_cache_hit(self.name)
            return ref

        try:
            ref = await self._cache.write(key, self.render(text))
        except OSError as e:
            logger.error("mock_cache_write_failed", key=key, error=str(e))
            self._stats.record_failure()
            record_tts_request(self.name, "failure")
            record_error("cache", type(e).__name__)
            return None

        self._stats.record_success(0.0)
        record_tts_request(self.name, "success")
        return ref

    def render(self, text: str) -> bytes:
        """Silent 16-bit mono WAV sized to the text length."""
        duration_s = max(0.1, len(text) / self._chars_per_second)
        samples = int(duration_s * self._sample_rate)

        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(self._sample_rate)
            wav.writeframes(b"\x00\x00" * samples)  # 16-bit silence
        return buffer.getvalue()
