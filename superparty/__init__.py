"""SuperParty Voice - Speech synthesis layer for the SuperParty phone assistant."""

__version__ = "1.0.0"

# Export exception hierarchy for easy importing
from superparty.exceptions import (
    SuperPartyError,
    ConfigurationError,
    InvalidConfigError,
    TTSError,
    TTSTransportError,
    TTSUpstreamError,
    TTSUnavailableError,
)

__all__ = [
    "__version__",
    # Base
    "SuperPartyError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    # TTS
    "TTSError",
    "TTSTransportError",
    "TTSUpstreamError",
    "TTSUnavailableError",
]
