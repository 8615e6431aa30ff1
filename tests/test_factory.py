"""Tests for cascade construction from settings."""

import pytest

from superparty.config.settings import Settings
from superparty.exceptions import ConfigurationError, InvalidConfigError
from superparty.tts.backends.coqui_backend import CoquiBackend
from superparty.tts.backends.elevenlabs_backend import ElevenLabsBackend
from superparty.tts.backends.google_backend import GoogleTTSBackend
from superparty.tts.backends.mock_backend import MockBackend
from superparty.tts.factory import create_janitor, create_provider, create_tts_cascade


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        tts_provider_order=["elevenlabs", "google", "coqui"],
        tts_cache_dir=str(tmp_path / "cache"),
        tts_temp_dir=str(tmp_path / "temp"),
        coqui_api_url="http://coqui:5002/",
        tts_failure_threshold=5,
    )


class TestCreateTTSCascade:
    """Tests for create_tts_cascade."""

    def test_default_order_and_priorities(self, settings):
        cascade = create_tts_cascade(settings)
        assert [p.name for p in cascade.providers] == ["elevenlabs", "google", "coqui"]
        assert [p.priority for p in cascade.providers] == [3, 2, 1]

    def test_provider_types(self, settings):
        cascade = create_tts_cascade(settings)
        assert isinstance(cascade.get_provider("elevenlabs"), ElevenLabsBackend)
        assert isinstance(cascade.get_provider("google"), GoogleTTSBackend)
        assert isinstance(cascade.get_provider("coqui"), CoquiBackend)

    def test_custom_order(self, tmp_path):
        settings = Settings(
            _env_file=None,
            tts_provider_order=["coqui", "mock"],
            tts_cache_dir=str(tmp_path / "cache"),
        )
        cascade = create_tts_cascade(settings)
        assert [p.name for p in cascade.providers] == ["coqui", "mock"]

    def test_settings_flow_into_coqui(self, settings):
        coqui = create_tts_cascade(settings).get_provider("coqui")
        assert coqui.breaker.failure_threshold == 5
        assert coqui._config.server_url == "http://coqui:5002"

    def test_cache_namespaces(self, settings, tmp_path):
        cascade = create_tts_cascade(settings)
        assert cascade.get_provider("coqui").cache.directory == tmp_path / "cache" / "coqui"
        assert cascade.get_provider("google").cache.suffix == ".mp3"

    def test_unconfigured_vendors_unavailable(self, settings):
        cascade = create_tts_cascade(settings)
        assert cascade.get_provider("elevenlabs").is_available() is False
        assert cascade.get_provider("google").is_available() is False


class TestCreateProvider:
    """Tests for create_provider."""

    def test_mock(self, settings):
        assert isinstance(create_provider("mock", settings, priority=1), MockBackend)

    def test_unknown_raises(self, settings):
        with pytest.raises(InvalidConfigError, match="Unknown TTS provider") as exc_info:
            create_provider("polly", settings, priority=1)

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.details["config_key"] == "tts_provider_order"
        assert exc_info.value.details["value"] == "polly"


def test_create_janitor(settings, tmp_path):
    janitor = create_janitor(settings)
    assert janitor.temp_dir == tmp_path / "temp"
    assert janitor.temp_dir.is_dir()
