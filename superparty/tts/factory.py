"""TTS Factory - Config-based cascade construction.

Builds the provider list once at startup from settings. Order comes
from tts_provider_order; the first name gets the highest priority.

Default order (cost and quality decrease down the list):
1. ElevenLabs - premium paid vendor
2. Google Cloud TTS - mid-tier cloud vendor
3. Coqui - self-hosted, circuit-breaker protected
"""

from __future__ import annotations

from pathlib import Path

from superparty.config.settings import Settings
from superparty.exceptions import InvalidConfigError
from superparty.observability.logging import get_logger
from superparty.tts.backends.interface import TTSProvider
from superparty.tts.cache import AudioCache
from superparty.tts.cascade import TTSCascade
from superparty.tts.janitor import TempFileJanitor

logger = get_logger(__name__)

# Cached audio format per provider
AUDIO_SUFFIXES: dict[str, str] = {
    "elevenlabs": ".mp3",
    "google": ".mp3",
    "coqui": ".wav",
    "mock": ".wav",
}


def create_provider(name: str, settings: Settings, priority: int) -> TTSProvider:
    """Create one provider by name.

    Args:
        name: Provider identifier
        settings: Application settings
        priority: Cascade rank

    Returns:
        Configured provider (not started)

    Raises:
        InvalidConfigError: If provider is unknown
    """
    if name not in AUDIO_SUFFIXES:
        raise InvalidConfigError(
            "tts_provider_order",
            name,
            f"Unknown TTS provider: {name}. "
            f"Available: {', '.join(AUDIO_SUFFIXES)}",
        )

    cache = AudioCache(
        Path(settings.tts_cache_dir),
        namespace=name,
        suffix=AUDIO_SUFFIXES[name],
        url_prefix=settings.audio_url_prefix,
    )

    if name == "mock":
        from superparty.tts.backends.mock_backend import MockBackend

        return MockBackend(cache, priority=priority)

    if name == "coqui":
        from superparty.tts.backends.coqui_backend import create_coqui_backend

        return create_coqui_backend(
            settings.coqui_api_url,
            cache,
            priority=priority,
            failure_threshold=settings.tts_failure_threshold,
            reset_timeout_s=settings.tts_reset_timeout_s,
            health_check_interval_s=settings.tts_health_check_interval_s,
            request_timeout_s=settings.tts_synthesis_timeout_s,
            probe_timeout_s=settings.tts_probe_timeout_s,
        )

    if name == "elevenlabs":
        from superparty.tts.backends.elevenlabs_backend import (
            create_elevenlabs_backend,
        )

        return create_elevenlabs_backend(
            settings.elevenlabs_api_key,
            cache,
            voice_id=settings.elevenlabs_voice_id,
            model_id=settings.elevenlabs_model_id,
            priority=priority,
        )

    from superparty.tts.backends.google_backend import (
        GoogleTTSBackend,
        GoogleTTSConfig,
    )

    config = GoogleTTSConfig(
        credentials_json=settings.google_credentials_json,
        credentials_path=settings.google_application_credentials,
        language_code=settings.google_language_code,
        voice_name=settings.google_voice_name,
        request_timeout_s=settings.tts_synthesis_timeout_s,
    )
    return GoogleTTSBackend(config, cache, priority=priority)


def create_tts_cascade(settings: Settings) -> TTSCascade:
    """Factory function to create the TTS cascade.

    Args:
        settings: Application settings

    Returns:
        Cascade with providers ranked per tts_provider_order

    Examples:
        # Production: premium first, self-hosted last
        cascade = create_tts_cascade(get_settings())

        # Development with mock
        cascade = create_tts_cascade(Settings(tts_provider_order=["mock"]))
    """
    order = settings.tts_provider_order
    providers = [
        create_provider(name, settings, priority=len(order) - index)
        for index, name in enumerate(order)
    ]
    logger.info("tts_cascade_created", order=order)
    return TTSCascade(providers)


def create_janitor(settings: Settings) -> TempFileJanitor:
    """Factory function to create the temp file janitor."""
    return TempFileJanitor(
        Path(settings.tts_temp_dir),
        max_age_s=settings.temp_retention_s,
        interval_s=settings.janitor_interval_s,
    )
