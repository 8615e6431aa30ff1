"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.

Vendor credentials are optional: a provider without credentials reports
itself unavailable and the cascade skips it.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from superparty.config.constants import TTS

KNOWN_PROVIDERS = ("elevenlabs", "google", "coqui", "mock")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8082, ge=1024, le=65535, description="API port")
    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment name"
    )

    # Cascade
    tts_provider_order: list[str] = Field(
        default=["elevenlabs", "google", "coqui"],
        description="Providers in descending priority (JSON list in env)",
    )

    # Storage
    tts_cache_dir: str = Field(
        default="cache", description="Root of the content-addressed audio cache"
    )
    tts_temp_dir: str = Field(
        default="temp", description="Scratch directory swept by the janitor"
    )
    audio_url_prefix: str = Field(
        default=TTS.AUDIO_URL_PREFIX,
        description="URL path prefix under which cached audio is served",
    )

    # Coqui (self-hosted, circuit-breaker protected)
    coqui_api_url: str = Field(
        default="http://localhost:5002",
        description="Coqui TTS service base URL",
    )
    tts_failure_threshold: int = Field(
        default=TTS.FAILURE_THRESHOLD,
        ge=1,
        le=100,
        description="Consecutive failures before the circuit opens",
    )
    tts_reset_timeout_s: float = Field(
        default=TTS.RESET_TIMEOUT_S,
        gt=0,
        description="Seconds an open circuit waits before a probe",
    )
    tts_health_check_interval_s: float = Field(
        default=TTS.HEALTH_CHECK_INTERVAL_S,
        gt=0,
        description="Seconds between liveness probes while closed",
    )
    tts_synthesis_timeout_s: float = Field(
        default=TTS.SYNTHESIS_TIMEOUT_S,
        gt=0,
        description="Timeout for one remote synthesis call",
    )
    tts_probe_timeout_s: float = Field(
        default=TTS.PROBE_TIMEOUT_S,
        gt=0,
        description="Timeout for one liveness probe",
    )

    # Janitor
    temp_retention_s: float = Field(
        default=TTS.TEMP_RETENTION_S,
        gt=0,
        description="Temp files older than this are deleted",
    )
    janitor_interval_s: float = Field(
        default=TTS.JANITOR_INTERVAL_S,
        gt=0,
        description="Seconds between janitor sweeps",
    )

    # ElevenLabs (optional)
    elevenlabs_api_key: str | None = Field(
        default=None, description="ElevenLabs API key"
    )
    elevenlabs_voice_id: str = Field(
        default="QtObtrglHRaER8xlDZsr", description="ElevenLabs voice ID"
    )
    elevenlabs_model_id: str = Field(
        default="eleven_multilingual_v2", description="ElevenLabs model ID"
    )

    # Google Cloud TTS (optional)
    google_credentials_json: str | None = Field(
        default=None,
        description="Inline service account JSON for Google Cloud TTS",
    )
    google_application_credentials: str | None = Field(
        default=None,
        description="Path to a service account file for Google Cloud TTS",
    )
    google_language_code: str = Field(
        default="ro-RO", description="Google TTS language code"
    )
    google_voice_name: str = Field(
        default="ro-RO-Wavenet-A", description="Google TTS voice name"
    )

    # Observability
    metrics_enabled: bool = Field(default=True, description="Expose /metrics")

    @field_validator("tts_provider_order", mode="after")
    @classmethod
    def validate_provider_order(cls, v: list[str]) -> list[str]:
        """Provider names must be known and unique."""
        names = [name.strip().lower() for name in v]
        unknown = [name for name in names if name not in KNOWN_PROVIDERS]
        if unknown:
            raise ValueError(
                f"Unknown TTS providers: {', '.join(unknown)}. "
                f"Available: {', '.join(KNOWN_PROVIDERS)}"
            )
        if len(set(names)) != len(names):
            raise ValueError("tts_provider_order contains duplicates")
        return names

    def model_post_init(self, __context) -> None:
        """Validate conditional requirements after model creation."""
        if not self.tts_provider_order:
            raise ValueError("tts_provider_order must name at least one provider")

        if not self.audio_url_prefix.startswith("/"):
            raise ValueError("audio_url_prefix must start with '/'")

        # Mock audio is silence; never ship it
        if self.environment == "production" and "mock" in self.tts_provider_order:
            raise ValueError("mock TTS provider is not allowed in production")

    @property
    def google_configured(self) -> bool:
        """Whether any Google credentials were supplied."""
        return bool(self.google_credentials_json or self.google_application_credentials)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
