"""Tests for the exception hierarchy."""

import pytest

from superparty import (
    ConfigurationError,
    InvalidConfigError,
    SuperPartyError,
    TTSError,
    TTSTransportError,
    TTSUnavailableError,
    TTSUpstreamError,
)


class TestSuperPartyError:
    """Tests for the base exception."""

    def test_message_only(self):
        err = SuperPartyError("boom")
        assert str(err) == "boom"
        assert err.details == {}
        assert err.recoverable is False

    def test_details_in_str(self):
        err = SuperPartyError("boom", details={"k": "v"})
        assert str(err) == "boom ({'k': 'v'})"

    def test_to_dict(self):
        err = SuperPartyError("boom", details={"k": 1}, recoverable=True)
        assert err.to_dict() == {
            "type": "SuperPartyError",
            "message": "boom",
            "details": {"k": 1},
            "recoverable": True,
        }


class TestConfigErrors:
    """Tests for configuration errors."""

    def test_invalid_config(self):
        err = InvalidConfigError("TTS_PROVIDER_ORDER", ["polly"], "unknown provider")
        assert isinstance(err, ConfigurationError)
        assert err.message == "Invalid configuration for TTS_PROVIDER_ORDER: unknown provider"
        assert err.details["value"] == "['polly']"
        assert err.details["reason"] == "unknown provider"


class TestTTSErrors:
    """Tests for TTS errors."""

    def test_hierarchy(self):
        for cls in (TTSTransportError, TTSUpstreamError, TTSUnavailableError):
            assert issubclass(cls, TTSError)
            assert issubclass(cls, SuperPartyError)

    def test_transport_error_recoverable(self):
        err = TTSTransportError("coqui", "connection refused")
        assert err.backend == "coqui"
        assert err.recoverable is True
        assert err.details == {"reason": "connection refused", "backend": "coqui"}

    @pytest.mark.parametrize("status,recoverable", [(500, True), (503, True), (400, False)])
    def test_upstream_error_recoverable_on_5xx(self, status, recoverable):
        err = TTSUpstreamError("coqui", status, "body")
        assert err.status_code == status
        assert err.recoverable is recoverable
        assert f"HTTP {status}" in str(err)

    def test_upstream_error_without_body(self):
        err = TTSUpstreamError("google", 429)
        assert "body" not in err.details

    def test_unavailable_error(self):
        err = TTSUnavailableError("elevenlabs", "no API key")
        assert "no API key" in err.message
        assert err.recoverable is True
