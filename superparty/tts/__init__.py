"""Text-to-Speech module.

Provides the provider cascade, the circuit breaker guarding the
self-hosted Coqui service, and the content-addressed audio cache.

Usage:
    from superparty.tts import create_tts_cascade

    cascade = create_tts_cascade(get_settings())
    await cascade.start()
    ref = await cascade.synthesize("Bună ziua!")
"""

from superparty.tts.cache import AudioCache, AudioRef, fingerprint
from superparty.tts.cascade import TTSCascade
from superparty.tts.circuit_breaker import CircuitBreaker, CircuitState, UsageStats
from superparty.tts.factory import create_janitor, create_tts_cascade
from superparty.tts.janitor import TempFileJanitor

__all__ = [
    # Cache
    "AudioCache",
    "AudioRef",
    "fingerprint",
    # Circuit breaker
    "CircuitBreaker",
    "CircuitState",
    "UsageStats",
    # Cascade
    "TTSCascade",
    "TempFileJanitor",
    # Factory
    "create_tts_cascade",
    "create_janitor",
]
