"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing settings
os.environ.update({
    "ENVIRONMENT": "development",
    "TTS_PROVIDER_ORDER": '["mock"]',  # Use mock TTS for testing
    "LOG_LEVEL": "DEBUG",
})


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Provide an isolated cache root."""
    return tmp_path / "cache"


@pytest.fixture
def test_settings(tmp_path: Path):
    """Provide test settings instance."""
    from superparty.config.settings import Settings

    return Settings(
        _env_file=None,
        tts_provider_order=["mock"],
        tts_cache_dir=str(tmp_path / "cache"),
        tts_temp_dir=str(tmp_path / "temp"),
    )


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    """Provide FastAPI test client backed by the mock provider."""
    from superparty.config.settings import get_settings

    monkeypatch.setenv("TTS_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("TTS_TEMP_DIR", str(tmp_path / "temp"))
    get_settings.cache_clear()

    from superparty.main import create_app

    with TestClient(create_app()) as c:
        yield c

    get_settings.cache_clear()
