"""TTS Backends - Pluggable TTS provider implementations.

All backends implement the TTSProvider interface.

Available backends:
- ElevenLabsBackend: Premium cloud voice (requires API key)
- GoogleTTSBackend: Google Cloud TTS (requires service account)
- CoquiBackend: Self-hosted Coqui service behind a circuit breaker
- MockBackend: For testing (generates silence)
"""

from superparty.tts.backends.interface import TTSProvider
from superparty.tts.backends.mock_backend import MockBackend

__all__ = [
    # Interface
    "TTSProvider",
    # Backends
    "MockBackend",
    "CoquiBackend",
    "ElevenLabsBackend",
    "GoogleTTSBackend",
]


# Lazy imports for vendor backends
def __getattr__(name: str):
    """Lazy import for vendor backends."""
    if name == "CoquiBackend":
        from superparty.tts.backends.coqui_backend import CoquiBackend
        return CoquiBackend

    if name == "ElevenLabsBackend":
        from superparty.tts.backends.elevenlabs_backend import ElevenLabsBackend
        return ElevenLabsBackend

    if name == "GoogleTTSBackend":
        from superparty.tts.backends.google_backend import GoogleTTSBackend
        return GoogleTTSBackend

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
