"""Coqui Backend - Self-hosted Coqui TTS behind a circuit breaker.

Connects to a running Coqui TTS service:
- POST /synthesize {"text": ...} -> audio bytes
- GET  /health                  -> {"status": "healthy"}

Every call is guarded by a CircuitBreaker. Audio is stored in a
content-addressed AudioCache, so repeated phrases (greetings, prompts)
cost one remote call ever.

Background tasks, owned by the backend and started/stopped with it:
- health loop: probes /health every health_check_interval_s while CLOSED
- reset loop: every reset_timeout_s, probes /health if the circuit is OPEN
  and its cooldown has elapsed, closing it on success
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable

import aiohttp

from superparty.config.constants import TTS
from superparty.exceptions import (
    TTSError,
    TTSTransportError,
    TTSUnavailableError,
    TTSUpstreamError,
)
from superparty.observability.logging import get_logger
from superparty.observability.metrics import (
    record_cache_hit,
    record_error,
    record_tts_latency,
    record_tts_request,
    update_provider_available,
)
from superparty.tts.backends.interface import TTSProvider
from superparty.tts.cache import AudioCache, AudioRef, fingerprint
from superparty.tts.circuit_breaker import CircuitBreaker, CircuitState

logger = get_logger(__name__)


@dataclass
class CoquiConfig:
    """Configuration for Coqui backend."""

    # Server connection
    server_url: str = "http://localhost:5002"

    # Circuit breaker
    failure_threshold: int = TTS.FAILURE_THRESHOLD
    reset_timeout_s: float = TTS.RESET_TIMEOUT_S

    # Background probing
    health_check_interval_s: float = TTS.HEALTH_CHECK_INTERVAL_S

    # Timeouts
    request_timeout_s: float = TTS.SYNTHESIS_TIMEOUT_S
    probe_timeout_s: float = TTS.PROBE_TIMEOUT_S

    # Cached audio format
    audio_suffix: str = ".wav"


class CoquiBackend(TTSProvider):
    """Circuit-breaker-protected client for the Coqui TTS service.

    synthesize() never raises: transport errors, timeouts and non-2xx
    answers are recorded against the breaker and reported as None.

    Concurrent requests for the same text share one remote call; every
    caller receives the same AudioRef.

    Usage:
        cache = AudioCache(Path("cache"), namespace="coqui")
        backend = CoquiBackend(CoquiConfig(server_url=url), cache)
        await backend.start()

        ref = await backend.synthesize("Bună ziua!")
        stats = backend.get_stats()

        await backend.shutdown()
    """

    def __init__(
        self,
        config: CoquiConfig | None = None,
        cache: AudioCache | None = None,
        priority: int = 0,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize Coqui backend.

        Args:
            config: Coqui configuration
            cache: Audio cache (defaults to ./cache/coqui)
            priority: Cascade rank
            session: Shared HTTP session; created on start() if omitted
            clock: Monotonic clock in seconds (injectable for tests)
        """
        super().__init__(priority)
        self._config = config or CoquiConfig()
        self._cache = cache or AudioCache(
            "cache", namespace=self.name, suffix=self._config.audio_suffix
        )
        self._clock = clock
        self._breaker = CircuitBreaker(
            self.name,
            failure_threshold=self._config.failure_threshold,
            reset_timeout_s=self._config.reset_timeout_s,
            clock=clock,
        )

        self._session = session
        self._owns_session = session is None
        self._enabled = False
        self._last_error: str | None = None

        # Single-flight: fingerprint -> pending remote synthesis
        self._inflight: dict[str, asyncio.Future[AudioRef | None]] = {}

        # Background tasks
        self._running = False
        self._health_task: asyncio.Task | None = None
        self._reset_task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        """Backend name identifier."""
        return "coqui"

    @property
    def breaker(self) -> CircuitBreaker:
        """Circuit breaker guarding the service."""
        return self._breaker

    @property
    def enabled(self) -> bool:
        """Result of the last health probe."""
        return self._enabled

    @property
    def last_error(self) -> str | None:
        """Most recent failure message."""
        return self._last_error

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Open the HTTP session, probe once and start background tasks."""
        if self._running:
            return

        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        self._running = True
        await self.check_availability()

        self._health_task = asyncio.create_task(self._health_loop())
        self._reset_task = asyncio.create_task(self._reset_loop())

        logger.info(
            "coqui_backend_started",
            server_url=self._config.server_url,
            enabled=self._enabled,
        )

    async def shutdown(self) -> None:
        """Stop background tasks and close the session if we own it."""
        self._running = False

        for task in (self._health_task, self._reset_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._health_task = None
        self._reset_task = None

        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

        logger.info("coqui_backend_shutdown")

    @property
    def is_running(self) -> bool:
        """Whether background tasks are active."""
        return self._running

    # -------------------------------------------------------------------------
    # Circuit breaker + stats recorder
    # -------------------------------------------------------------------------

    def should_attempt(self) -> bool:
        """Whether the circuit currently lets a request through."""
        return self._breaker.should_attempt()

    def record_success(self, latency_ms: float) -> None:
        """Record a successful remote call."""
        self._breaker.record_success()
        self._stats.record_success(latency_ms)
        record_tts_request(self.name, "success")

        logger.debug(
            "coqui_success",
            latency_ms=round(latency_ms, 1),
            avg_latency_ms=round(self._stats.average_latency_ms, 1),
        )

    def record_failure(self, error: BaseException | str) -> None:
        """Record a failed remote call."""
        self._last_error = str(error)
        self._breaker.record_failure(error)
        self._stats.record_failure()
        record_tts_request(self.name, "failure")
        record_error("tts", type(error).__name__)

    def is_available(self) -> bool:
        """Enabled by the last probe and the circuit lets requests through."""
        return self._enabled and self._breaker.should_attempt()

    # -------------------------------------------------------------------------
    # Synthesis
    # -------------------------------------------------------------------------

    async def synthesize(self, text: str) -> AudioRef | None:
        """Synthesize text with circuit breaker protection.

        Args:
            text: Text to speak

        Returns:
            Reference to cached audio, or None if unavailable or failed
        """
        if not self._breaker.should_attempt():
            logger.warning("coqui_circuit_open_skip")
            record_tts_request(self.name, "skipped")
            return None

        if not self._enabled:
            logger.warning("coqui_service_unavailable", last_error=self._last_error)
            record_tts_request(self.name, "skipped")
            return None

        key = fingerprint(text)

        ref = self._cache.lookup(key)
        if ref is not None:
            logger.debug("coqui_cache_hit", key=key)
            self._stats.record_cache_hit()
            record_cache_hit(self.name)
            return ref

        pending = self._inflight.get(key)
        if pending is not None:
            ref = await asyncio.shield(pending)
            if ref is not None:
                self._stats.record_cache_hit()
                record_cache_hit(self.name)
            return ref

        if not self._breaker.try_acquire():
            # Another coroutine owns the half-open probe
            record_tts_request(self.name, "skipped")
            return None
        probing = self._breaker.state is CircuitState.HALF_OPEN

        future: asyncio.Future[AudioRef | None] = (
            asyncio.get_running_loop().create_future()
        )
        self._inflight[key] = future
        ref = None
        try:
            ref = await self._synthesize_uncached(key, text)
        except asyncio.CancelledError:
            if probing:
                self._breaker.release()
            raise
        finally:
            self._inflight.pop(key, None)
            if not future.done():
                future.set_result(ref)

        return ref

    async def _synthesize_uncached(self, key: str, text: str) -> AudioRef | None:
        """Remote call, cache write and bookkeeping for a cache miss."""
        logger.info(
            "coqui_generating_speech",
            text_preview=text[:50],
            text_length=len(text),
        )
        start = self._clock()

        try:
            audio = await self._post_synthesize(text)
        except TTSError as e:
            logger.warning("coqui_synthesis_failed", error=str(e))
            self.record_failure(e)
            return None
        except Exception as e:
            logger.error("coqui_synthesis_error", error=str(e), exc_info=e)
            self.record_failure(e)
            return None

        latency_ms = (self._clock() - start) * 1000.0
        self.record_success(latency_ms)
        record_tts_latency(self.name, latency_ms)

        try:
            return await self._cache.write(key, audio)
        except OSError as e:
            logger.error("coqui_cache_write_failed", key=key, error=str(e))
            record_error("cache", type(e).__name__)
            return None

    async def _post_synthesize(self, text: str) -> bytes:
        """POST /synthesize and return the audio body.

        Raises:
            TTSTransportError: On network failure or timeout
            TTSUpstreamError: On a non-2xx status or empty body
            TTSUnavailableError: If the backend was never started
        """
        if self._session is None:
            raise TTSUnavailableError(self.name, "backend not started")

        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_s)
        try:
            async with self._session.post(
                f"{self._config.server_url}/synthesize",
                json={"text": text},
                timeout=timeout,
            ) as response:
                if response.status // 100 != 2:
                    body = await response.text()
                    raise TTSUpstreamError(self.name, response.status, body[:200])

                audio = await response.read()
                if not audio:
                    raise TTSUpstreamError(self.name, response.status, "empty audio body")
                return audio

        except asyncio.TimeoutError as e:
            raise TTSTransportError(
                self.name,
                f"timed out after {self._config.request_timeout_s}s",
            ) from e
        except aiohttp.ClientError as e:
            raise TTSTransportError(self.name, str(e)) from e

    # -------------------------------------------------------------------------
    # Health probing
    # -------------------------------------------------------------------------

    async def check_availability(self) -> bool:
        """Probe /health and feed the result to the recorder.

        Returns:
            True if the service reported healthy
        """
        was_enabled = self._enabled
        start = self._clock()

        try:
            data = await self._get_health()
            if data.get("status") != "healthy":
                raise TTSUpstreamError(self.name, 200, f"status={data.get('status')!r}")
        except TTSError as e:
            self._enabled = False
            update_provider_available(self.name, False)
            logger.warning("coqui_health_check_failed", error=str(e))
            self.record_failure(e)
            return False

        self._enabled = True
        update_provider_available(self.name, True)
        latency_ms = (self._clock() - start) * 1000.0

        # The circuit may have opened while the health check was in flight
        if self._breaker.state is CircuitState.CLOSED or self._breaker.is_probeable():
            self.record_success(latency_ms)
        else:
            self._stats.record_success(latency_ms)
            record_tts_request(self.name, "success")
            logger.debug(
                "coqui_health_check_ignored_by_circuit",
                circuit_state=self._breaker.state.value,
            )

        if not was_enabled:
            logger.info("coqui_service_available", server_url=self._config.server_url)
        return True

    async def _get_health(self) -> dict[str, Any]:
        """GET /health.

        Raises:
            TTSTransportError: On network failure, timeout or invalid JSON
            TTSUpstreamError: On a non-2xx status
            TTSUnavailableError: If the backend was never started
        """
        if self._session is None:
            raise TTSUnavailableError(self.name, "backend not started")

        timeout = aiohttp.ClientTimeout(total=self._config.probe_timeout_s)
        try:
            async with self._session.get(
                f"{self._config.server_url}/health",
                timeout=timeout,
            ) as response:
                if response.status // 100 != 2:
                    raise TTSUpstreamError(self.name, response.status)
                data = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            raise TTSTransportError(
                self.name,
                f"health probe timed out after {self._config.probe_timeout_s}s",
            ) from e
        except aiohttp.ClientError as e:
            raise TTSTransportError(self.name, str(e)) from e
        except ValueError as e:
            raise TTSTransportError(self.name, f"invalid health payload: {e}") from e

        if not isinstance(data, dict):
            raise TTSTransportError(self.name, "invalid health payload")
        return data

    async def _health_loop(self) -> None:
        """Background loop probing liveness while the circuit is closed."""
        interval_s = self._config.health_check_interval_s

        while self._running:
            try:
                await asyncio.sleep(interval_s)

                if not self._running:
                    break

                if self._breaker.state is CircuitState.CLOSED:
                    await self.check_availability()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning("coqui_health_loop_error", error=str(e))
                continue

    async def _reset_loop(self) -> None:
        """Background loop probing an open circuit once its cooldown passed."""
        interval_s = self._config.reset_timeout_s

        while self._running:
            try:
                await asyncio.sleep(interval_s)

                if not self._running:
                    break

                if self._breaker.is_probeable():
                    logger.info("coqui_attempting_circuit_close")
                    await self.check_availability()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning("coqui_reset_loop_error", error=str(e))
                continue

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        """Usage and circuit stats for dashboards."""
        return {
            **super().get_stats(),
            **self._breaker.to_dict(),
            "enabled": self._enabled,
            "last_error": self._last_error,
        }


def create_coqui_backend(
    server_url: str,
    cache: AudioCache,
    priority: int = 0,
    **kwargs,
) -> CoquiBackend:
    """Factory function to create Coqui backend.

    Args:
        server_url: Coqui service base URL
        cache: Audio cache for the backend
        priority: Cascade rank
        **kwargs: Additional CoquiConfig fields

    Returns:
        Configured CoquiBackend
    """
    config = CoquiConfig(
        server_url=server_url.rstrip("/"),
        **{k: v for k, v in kwargs.items() if hasattr(CoquiConfig, k)},
    )
    return CoquiBackend(config, cache, priority=priority)
