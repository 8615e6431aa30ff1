"""Tests for the ElevenLabs and Google Cloud TTS backends.

Vendor clients are replaced with mocks; no network access.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from superparty.tts.backends.elevenlabs_backend import (
    ElevenLabsBackend,
    ElevenLabsConfig,
    create_elevenlabs_backend,
)
from superparty.tts.backends.google_backend import GoogleTTSBackend, GoogleTTSConfig
from superparty.tts.cache import AudioCache, fingerprint


def audio_stream(*chunks: bytes):
    """Async iterator standing in for ElevenLabs' streamed response."""

    async def gen():
        for chunk in chunks:
            yield chunk

    return gen()


class TestElevenLabsBackend:
    """Tests for ElevenLabsBackend."""

    @pytest.fixture
    def cache(self, cache_root):
        return AudioCache(cache_root, namespace="elevenlabs", suffix=".mp3")

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.text_to_speech.convert = MagicMock(
            side_effect=lambda **kwargs: audio_stream(b"ID3", b"", b"frames")
        )
        return client

    def test_unconfigured_is_unavailable(self, cache):
        backend = ElevenLabsBackend(ElevenLabsConfig(), cache)
        assert backend.name == "elevenlabs"
        assert backend.configured is False
        assert backend.is_available() is False

    @pytest.mark.asyncio
    async def test_start_without_key_stays_unavailable(self, cache):
        backend = ElevenLabsBackend(ElevenLabsConfig(), cache)
        await backend.start()
        assert backend.is_available() is False
        assert await backend.synthesize("salut") is None

    @pytest.mark.asyncio
    async def test_start_creates_client(self, cache):
        with patch(
            "superparty.tts.backends.elevenlabs_backend.AsyncElevenLabs"
        ) as client_cls:
            backend = ElevenLabsBackend(ElevenLabsConfig(api_key="sk-test"), cache)
            await backend.start()

        client_cls.assert_called_once_with(api_key="sk-test", timeout=30.0)
        assert backend.is_available() is True

        await backend.shutdown()
        assert backend.is_available() is False

    @pytest.mark.asyncio
    async def test_synthesize_collects_chunks(self, cache, client):
        backend = ElevenLabsBackend(ElevenLabsConfig(api_key="sk-test"), cache, client=client)
        ref = await backend.synthesize("Bună ziua")

        assert ref.path.read_bytes() == b"ID3frames"
        assert ref.url.endswith(".mp3")
        kwargs = client.text_to_speech.convert.call_args.kwargs
        assert kwargs["voice_id"] == "QtObtrglHRaER8xlDZsr"
        assert kwargs["model_id"] == "eleven_multilingual_v2"
        assert kwargs["text"] == "Bună ziua"
        assert kwargs["voice_settings"].stability == 0.7
        assert backend.stats.total_successes == 1

    @pytest.mark.asyncio
    async def test_cache_hit_not_billed(self, cache, client):
        """A cached phrase never reaches the vendor."""
        await cache.write(fingerprint("salut"), b"cached")
        backend = ElevenLabsBackend(ElevenLabsConfig(api_key="sk-test"), cache, client=client)

        ref = await backend.synthesize("salut")
        assert ref.path.read_bytes() == b"cached"
        client.text_to_speech.convert.assert_not_called()
        assert backend.stats.cache_hits == 1

    @pytest.mark.asyncio
    async def test_vendor_error_returns_none(self, cache):
        client = MagicMock()
        client.text_to_speech.convert = MagicMock(side_effect=RuntimeError("quota exceeded"))
        backend = ElevenLabsBackend(ElevenLabsConfig(api_key="sk-test"), cache, client=client)

        assert await backend.synthesize("salut") is None
        assert backend.stats.total_failures == 1

    @pytest.mark.asyncio
    async def test_empty_audio_returns_none(self, cache):
        client = MagicMock()
        client.text_to_speech.convert = MagicMock(side_effect=lambda **kw: audio_stream())
        backend = ElevenLabsBackend(ElevenLabsConfig(api_key="sk-test"), cache, client=client)

        assert await backend.synthesize("salut") is None
        assert not list(cache.directory.iterdir())

    def test_factory(self, cache):
        backend = create_elevenlabs_backend("sk", cache, voice_id="v1", model_id="m1", priority=3)
        assert backend._config.voice_id == "v1"
        assert backend._config.model_id == "m1"
        assert backend.priority == 3


class TestGoogleTTSBackend:
    """Tests for GoogleTTSBackend."""

    @pytest.fixture
    def cache(self, cache_root):
        return AudioCache(cache_root, namespace="google", suffix=".mp3")

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.synthesize_speech = AsyncMock(return_value=MagicMock(audio_content=b"mp3audio"))
        client.transport.close = AsyncMock()
        return client

    def test_unconfigured_is_unavailable(self, cache):
        backend = GoogleTTSBackend(GoogleTTSConfig(), cache)
        assert backend.name == "google"
        assert backend.configured is False
        assert backend.is_available() is False

    @pytest.mark.asyncio
    async def test_start_without_credentials(self, cache):
        backend = GoogleTTSBackend(GoogleTTSConfig(), cache)
        await backend.start()
        assert backend.is_available() is False

    @pytest.mark.asyncio
    async def test_invalid_credentials_leave_backend_unavailable(self, cache):
        """Bad credentials do not fail startup."""
        backend = GoogleTTSBackend(GoogleTTSConfig(credentials_json="{not json"), cache)
        await backend.start()
        assert backend.is_available() is False

    @pytest.mark.asyncio
    async def test_start_builds_client_from_json(self, cache):
        module = "superparty.tts.backends.google_backend"
        with patch(f"{module}.service_account.Credentials") as creds_cls, \
             patch(f"{module}.texttospeech.TextToSpeechAsyncClient") as client_cls:
            backend = GoogleTTSBackend(
                GoogleTTSConfig(credentials_json='{"type": "service_account"}'), cache
            )
            await backend.start()

        creds_cls.from_service_account_info.assert_called_once_with({"type": "service_account"})
        client_cls.assert_called_once_with(
            credentials=creds_cls.from_service_account_info.return_value
        )
        assert backend.is_available() is True

    @pytest.mark.asyncio
    async def test_synthesize(self, cache, client):
        backend = GoogleTTSBackend(GoogleTTSConfig(), cache, client=client)
        ref = await backend.synthesize("Bună ziua")

        assert ref.path.read_bytes() == b"mp3audio"
        kwargs = client.synthesize_speech.call_args.kwargs
        assert kwargs["input"].text == "Bună ziua"
        assert kwargs["voice"].language_code == "ro-RO"
        assert kwargs["voice"].name == "ro-RO-Wavenet-A"
        assert kwargs["timeout"] == 30.0

    @pytest.mark.asyncio
    async def test_cache_hit_skips_vendor(self, cache, client):
        await cache.write(fingerprint("salut"), b"cached")
        backend = GoogleTTSBackend(GoogleTTSConfig(), cache, client=client)

        ref = await backend.synthesize("salut")
        assert ref.path.read_bytes() == b"cached"
        client.synthesize_speech.assert_not_called()

    @pytest.mark.asyncio
    async def test_vendor_error_returns_none(self, cache, client):
        client.synthesize_speech.side_effect = RuntimeError("permission denied")
        backend = GoogleTTSBackend(GoogleTTSConfig(), cache, client=client)

        assert await backend.synthesize("salut") is None
        assert backend.stats.total_failures == 1

    @pytest.mark.asyncio
    async def test_shutdown_closes_transport(self, cache, client):
        backend = GoogleTTSBackend(GoogleTTSConfig(), cache, client=client)
        await backend.shutdown()
        client.transport.close.assert_awaited_once()
        assert backend.is_available() is False
