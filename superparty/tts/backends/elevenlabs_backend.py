"""ElevenLabs TTS Backend - Premium cloud neural text-to-speech.

Top tier of the cascade: best quality, billed per character. Audio is
cached by text fingerprint, so a repeated phrase is paid for once.

Reference: https://elevenlabs.io/docs/api-reference/text-to-speech
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from elevenlabs import VoiceSettings
from elevenlabs.client import AsyncElevenLabs

from superparty.config.constants import TTS
from superparty.exceptions import TTSUpstreamError
from superparty.observability.logging import get_logger
from superparty.observability.metrics import (
    record_cache_hit,
    record_error,
    record_tts_latency,
    record_tts_request,
)
from superparty.tts.backends.interface import TTSProvider
from superparty.tts.cache import AudioCache, AudioRef, fingerprint

logger = get_logger(__name__)


@dataclass
class ElevenLabsConfig:
    """Configuration for ElevenLabs TTS."""

    api_key: str | None = None
    voice_id: str = "QtObtrglHRaER8xlDZsr"
    model_id: str = "eleven_multilingual_v2"
    stability: float = 0.7  # Voice consistency
    similarity_boost: float = 0.75  # Voice clarity
    style: float = 0.5
    use_speaker_boost: bool = True
    output_format: str = "mp3_44100_128"
    request_timeout_s: float = TTS.SYNTHESIS_TIMEOUT_S


class ElevenLabsBackend(TTSProvider):
    """ElevenLabs cloud TTS backend.

    Available only when an API key is configured.

    Usage:
        backend = ElevenLabsBackend(ElevenLabsConfig(api_key="..."), cache)
        await backend.start()

        ref = await backend.synthesize("Bună ziua!")
    """

    def __init__(
        self,
        config: ElevenLabsConfig | None = None,
        cache: AudioCache | None = None,
        priority: int = 0,
        client: AsyncElevenLabs | None = None,
    ) -> None:
        super().__init__(priority)
        self._config = config or ElevenLabsConfig()
        self._cache = cache or AudioCache("cache", namespace=self.name, suffix=".mp3")
        self._client = client

    @property
    def name(self) -> str:
        """Backend identifier."""
        return "elevenlabs"

    @property
    def configured(self) -> bool:
        """Whether an API key was supplied."""
        return bool(self._config.api_key)

    async def start(self) -> None:
        """Create the ElevenLabs client if a key is configured."""
        if not self.configured:
            logger.info("elevenlabs_not_configured")
            return

        if self._client is None:
            self._client = AsyncElevenLabs(
                api_key=self._config.api_key,
                timeout=self._config.request_timeout_s,
            )
        logger.info(
            "elevenlabs_initialized",
            voice_id=self._config.voice_id,
            model=self._config.model_id,
        )

    async def shutdown(self) -> None:
        """Drop the ElevenLabs client."""
        if self._client:
            # ElevenLabs client doesn't need explicit cleanup
            self._client = None
            logger.info("elevenlabs_shutdown")

    def is_available(self) -> bool:
        """Configured and started."""
        return self.configured and self._client is not None

    async def synthesize(self, text: str) -> AudioRef | None:
        """Synthesize text via ElevenLabs.

        Args:
            text: Text to speak

        Returns:
            Reference to cached MP3 audio, or None on failure
        """
        if not self.is_available():
            logger.debug("elevenlabs_unavailable")
            return None

        key = fingerprint(text)
        ref = self._cache.lookup(key)
        if ref is not None:
            self._stats.record_cache_hit()
            record_cache_hit(self.name)
            return ref

        logger.debug(
            "elevenlabs_generating_speech",
            text_length=len(text),
            voice_id=self._config.voice_id,
        )
        start = time.monotonic()

        try:
            audio = await self._convert(text)
            if not audio:
                raise TTSUpstreamError(self.name, 200, "no audio data received")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "elevenlabs_synthesis_failed",
                error=str(e),
                text_preview=text[:50],
            )
            self._stats.record_failure()
            record_tts_request(self.name, "failure")
            record_error("tts", type(e).__name__)
            return None

        latency_ms = (time.monotonic() - start) * 1000.0
        self._stats.record_success(latency_ms)
        record_tts_request(self.name, "success")
        record_tts_latency(self.name, latency_ms)

        try:
            ref = await self._cache.write(key, audio)
        except OSError as e:
            logger.error("elevenlabs_cache_write_failed", key=key, error=str(e))
            record_error("cache", type(e).__name__)
            return None

        logger.info("elevenlabs_speech_generated", size_bytes=len(audio))
        return ref

    async def _convert(self, text: str) -> bytes:
        """Call text_to_speech.convert and collect the streamed chunks."""
        chunks: list[bytes] = []
        async for chunk in self._client.text_to_speech.convert(
            voice_id=self._config.voice_id,
            text=text,
            model_id=self._config.model_id,
            voice_settings=VoiceSettings(
                stability=self._config.stability,
                similarity_boost=self._config.similarity_boost,
                style=self._config.style,
                use_speaker_boost=self._config.use_speaker_boost,
            ),
            output_format=self._config.output_format,
        ):
            if chunk:
                chunks.append(chunk)
        return b"".join(chunks)


def create_elevenlabs_backend(
    api_key: str | None,
    cache: AudioCache,
    voice_id: str | None = None,
    model_id: str | None = None,
    priority: int = 0,
) -> ElevenLabsBackend:
    """Factory function to create ElevenLabs backend.

    Args:
        api_key: ElevenLabs API key (None leaves the backend unavailable)
        cache: Audio cache for the backend
        voice_id: Optional voice ID
        model_id: Optional model ID
        priority: Cascade rank

    Returns:
        Configured ElevenLabs backend
    """
    config = ElevenLabsConfig(api_key=api_key)
    if voice_id:
        config.voice_id = voice_id
    if model_id:
        config.model_id = model_id

    return ElevenLabsBackend(config, cache, priority=priority)
