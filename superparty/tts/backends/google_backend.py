"""Google Cloud TTS Backend - Mid-tier cloud text-to-speech.

Uses the Google Cloud Text-to-Speech async client with a Romanian
WaveNet voice tuned for telephony playback.

Credentials come from either an inline service account JSON document or a
service account file path. Without either, the backend stays unavailable.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass

from google.cloud import texttospeech
from google.oauth2 import service_account

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
class GoogleTTSConfig:
    """Configuration for Google Cloud TTS."""

    credentials_json: str | None = None  # Inline service account JSON
    credentials_path: str | None = None  # Service account file
    language_code: str = "ro-RO"
    voice_name: str = "ro-RO-Wavenet-A"
    speaking_rate: float = 0.95
    pitch: float = 2.0
    effects_profile: str = "telephony-class-application"
    request_timeout_s: float = TTS.SYNTHESIS_TIMEOUT_S


class GoogleTTSBackend(TTSProvider):
    """Google Cloud Text-to-Speech backend.

    Usage:
        backend = GoogleTTSBackend(GoogleTTSConfig(credentials_path="sa.json"), cache)
        await backend.start()

        ref = await backend.synthesize("Bună ziua!")
    """

    def __init__(
        self,
        config: GoogleTTSConfig | None = None,
        cache: AudioCache | None = None,
        priority: int = 0,
        client: texttospeech.TextToSpeechAsyncClient | None = None,
    ) -> None:
        super().__init__(priority)
        self._config = config or GoogleTTSConfig()
        self._cache = cache or AudioCache("cache", namespace=self.name, suffix=".mp3")
        self._client = client

    @property
    def name(self) -> str:
        """Backend identifier."""
        return "google"

    @property
    def configured(self) -> bool:
        """Whether credentials were supplied."""
        return bool(self._config.credentials_json or self._config.credentials_path)

    async def start(self) -> None:
        """Create the async client from the configured credentials.

        Invalid credentials leave the backend unavailable instead of failing
        startup; the cascade simply skips it.
        """
        if self._client is not None:
            return

        if not self.configured:
            logger.info("google_tts_not_configured")
            return

        try:
            self._client = texttospeech.TextToSpeechAsyncClient(
                credentials=self._load_credentials()
            )
        except Exception as e:
            logger.error("google_tts_init_failed", error=str(e))
            record_error("tts", type(e).__name__)
            self._client = None
            return

        logger.info("google_tts_initialized", voice=self._config.voice_name)

    def _load_credentials(self) -> service_account.Credentials:
        """Build service account credentials from JSON or a file path."""
        if self._config.credentials_json:
            info = json.loads(self._config.credentials_json)
            return service_account.Credentials.from_service_account_info(info)
        return service_account.Credentials.from_service_account_file(
            self._config.credentials_path
        )

    async def shutdown(self) -> None:
        """Close the gRPC transport."""
        if self._client is not None:
            await self._client.transport.close()
            self._client = None
            logger.info("google_tts_shutdown")

    def is_available(self) -> bool:
        """Client initialised."""
        return self._client is not None

    async def synthesize(self, text: str) -> AudioRef | None:
        """Synthesize text via Google Cloud TTS.

        Args:
            text: Text to speak

        Returns:
            Reference to cached MP3 audio, or None on failure
        """
        if not self.is_available():
            logger.debug("google_tts_unavailable")
            return None

        key = fingerprint(text)
        ref = self._cache.lookup(key)
        if ref is not None:
            self._stats.record_cache_hit()
            record_cache_hit(self.name)
            return ref

        start = time.monotonic()
        try:
            response = await self._client.synthesize_speech(
                input=texttospeech.SynthesisInput(text=text),
                voice=texttospeech.VoiceSelectionParams(
                    language_code=self._config.language_code,
                    name=self._config.voice_name,
                    ssml_gender=texttospeech.SsmlVoiceGender.FEMALE,
                ),
                audio_config=texttospeech.AudioConfig(
                    audio_encoding=texttospeech.AudioEncoding.MP3,
                    speaking_rate=self._config.speaking_rate,
                    pitch=self._config.pitch,
                    effects_profile_id=[self._config.effects_profile],
                ),
                timeout=self._config.request_timeout_s,
            )
            audio = response.audio_content
            if not audio:
                raise TTSUpstreamError(self.name, 200, "empty audio_content")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("google_tts_synthesis_failed", error=str(e))
            self._stats.record_failure()
            record_tts_request(self.name, "failure")
            record_error("tts", type(e).__name__)
            return None

        latency_ms = (time.monotonic() - start) * 1000.0
        self._stats.record_success(latency_ms)
        record_tts_request(self.name, "success")
        record_tts_latency(self.name, latency_ms)

        try:
            return await self._cache.write(key, audio)
        except OSError as e:
            logger.error("google_tts_cache_write_failed", key=key, error=str(e))
            record_error("cache", type(e).__name__)
            return None
