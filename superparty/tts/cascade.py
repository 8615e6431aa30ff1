"""TTS Cascade - Ordered multi-provider fallback.

Providers are tried in descending priority order (premium vendor first,
self-hosted last). The first provider to return audio wins; at most one
successful vendor call happens per conversational turn. When every
provider fails the cascade returns None and the caller falls back to the
telephony platform's built-in voice.

Usage:
    cascade = TTSCascade([elevenlabs, google, coqui])
    await cascade.start()

    ref = await cascade.synthesize("Bună ziua!")
    if ref is None:
        ...  # use the built-in voice

    await cascade.shutdown()
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from superparty.observability.logging import CascadeLogger, get_logger
from superparty.observability.metrics import record_cascade_fallback, record_error
from superparty.tts.backends.interface import TTSProvider
from superparty.tts.cache import AudioRef

logger = get_logger(__name__)


class TTSCascade:
    """Fixed, priority-ordered chain of interchangeable TTS providers."""

    def __init__(self, providers: Sequence[TTSProvider]) -> None:
        """Initialize cascade.

        Args:
            providers: Providers in any order; sorted by descending priority
                (stable for equal priorities)
        """
        names = [p.name for p in providers]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate provider names: {names}")

        self._providers: tuple[TTSProvider, ...] = tuple(
            sorted(providers, key=lambda p: p.priority, reverse=True)
        )
        self._log = CascadeLogger()
        self._started = False

    @property
    def providers(self) -> tuple[TTSProvider, ...]:
        """Providers in the order they are tried."""
        return self._providers

    def get_provider(self, name: str) -> TTSProvider | None:
        """Look up a provider by name."""
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def is_available(self) -> bool:
        """Whether any provider can currently take a request."""
        return any(p.is_available() for p in self._providers)

    async def start(self) -> None:
        """Start every provider.

        A provider that fails to start is logged and left in place; it
        reports itself unavailable and gets skipped.
        """
        if self._started:
            return

        for provider in self._providers:
            try:
                await provider.start()
            except Exception as e:
                logger.error(
                    "cascade_provider_start_failed",
                    provider=provider.name,
                    error=str(e),
                )
                record_error("tts", type(e).__name__)

        self._started = True
        logger.info(
            "cascade_started",
            order=[p.name for p in self._providers],
            available=[p.name for p in self._providers if p.is_available()],
        )

    async def shutdown(self) -> None:
        """Stop every provider."""
        for provider in self._providers:
            try:
                await provider.shutdown()
            except Exception as e:
                logger.warning(
                    "cascade_provider_shutdown_failed",
                    provider=provider.name,
                    error=str(e),
                )
        self._started = False
        logger.info("cascade_shutdown")

    async def synthesize(self, text: str) -> AudioRef | None:
        """Return audio from the first provider that produces any.

        Args:
            text: Text to speak

        Returns:
            Audio reference, or None if every provider failed
        """
        if not text or not text.strip():
            logger.warning("cascade_empty_text")
            return None

        attempts = 0
        for provider in self._providers:
            if not provider.is_available():
                self._log.provider_skipped(provider.name)
                continue

            attempts += 1
            try:
                ref = await provider.synthesize(text)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Contract says synthesize() never raises; contain it anyway
                self._log.provider_failed(provider.name, error=str(e))
                record_error("tts", type(e).__name__)
                continue

            if ref is not None:
                self._log.provider_succeeded(provider.name, attempts)
                return ref

            self._log.provider_failed(provider.name)

        self._log.exhausted(attempts, len(text))
        record_cascade_fallback()
        return None

    def get_stats(self) -> dict[str, Any]:
        """Per-provider stats keyed by provider name, in cascade order."""
        return {p.name: p.get_stats() for p in self._providers}
