"""SuperParty Exception Hierarchy.

Provides structured exception classes for the speech-synthesis layer.

Hierarchy:
    SuperPartyError (base)
    ├── ConfigurationError
    │   └── InvalidConfigError
    └── TTSError
        ├── TTSTransportError
        ├── TTSUpstreamError
        └── TTSUnavailableError

TTS errors are raised inside the backends and absorbed by their
synthesize() methods, which report failure as None. They never reach the
telephony layer.
"""

from typing import Any


class SuperPartyError(Exception):
    """Base exception for all SuperParty errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(SuperPartyError):
    """Base exception for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
    ) -> None:
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={
                "config_key": config_key,
                "value": str(value),
                "reason": reason,
            },
            recoverable=False,
        )


# =============================================================================
# TTS Errors
# =============================================================================


class TTSError(SuperPartyError):
    """Base exception for TTS-related errors."""

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        details = details or {}
        if backend:
            details["backend"] = backend
        super().__init__(message, details, recoverable)
        self.backend = backend


class TTSTransportError(TTSError):
    """Raised on network failures and timeouts talking to a TTS backend."""

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(
            message=f"Transport error talking to TTS backend {backend}: {reason}",
            backend=backend,
            details={"reason": reason},
            recoverable=True,  # Next turn or next probe retries
        )


class TTSUpstreamError(TTSError):
    """Raised when a TTS backend answers with a non-2xx status."""

    def __init__(
        self,
        backend: str,
        status_code: int,
        body: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"status_code": status_code}
        if body:
            details["body"] = body
        super().__init__(
            message=f"TTS backend {backend} returned HTTP {status_code}",
            backend=backend,
            details=details,
            recoverable=status_code >= 500,
        )
        self.status_code = status_code


class TTSUnavailableError(TTSError):
    """Raised when a backend is not configured or its circuit is open."""

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(
            message=f"TTS backend {backend} unavailable: {reason}",
            backend=backend,
            details={"reason": reason},
            recoverable=True,
        )
