"""Tests for the content-addressed audio cache."""

import hashlib

import pytest

from superparty.tts.cache import AudioCache, AudioRef, fingerprint, is_fingerprint


class TestFingerprint:
    """Tests for fingerprint helpers."""

    def test_sha256_of_utf8(self):
        """Key is the SHA-256 hex digest of the UTF-8 text."""
        text = "Bună ziua! Cu ce vă pot ajuta?"
        assert fingerprint(text) == hashlib.sha256(text.encode("utf-8")).hexdigest()

    def test_deterministic_and_distinct(self):
        assert fingerprint("salut") == fingerprint("salut")
        assert fingerprint("salut") != fingerprint("salut ")

    def test_is_fingerprint(self):
        assert is_fingerprint(fingerprint("x")) is True
        assert is_fingerprint("../etc/passwd") is False
        assert is_fingerprint("ABC") is False


class TestAudioCache:
    """Tests for AudioCache."""

    @pytest.fixture
    def cache(self, cache_root):
        return AudioCache(cache_root, namespace="coqui", suffix=".wav", url_prefix="/audio")

    def test_creates_namespace_directory(self, cache, cache_root):
        assert cache.directory == cache_root / "coqui"
        assert cache.directory.is_dir()

    def test_miss_returns_none(self, cache):
        assert cache.lookup(fingerprint("nothing")) is None
        assert cache.exists(fingerprint("nothing")) is False

    def test_ref_layout(self, cache, cache_root):
        """Path and URL follow <provider>/<key><suffix>."""
        key = fingerprint("salut")
        ref = cache.ref(key)
        assert ref == AudioRef(
            key=key,
            path=cache_root / "coqui" / f"{key}.wav",
            url=f"/audio/coqui/{key}.wav",
            provider="coqui",
        )

    def test_url_prefix_trailing_slash(self, cache_root):
        cache = AudioCache(cache_root, namespace="mock", url_prefix="/audio/")
        assert cache.ref("k").url == "/audio/mock/k.wav"

    @pytest.mark.asyncio
    async def test_write_then_lookup(self, cache):
        """Written bytes are found on lookup."""
        key = fingerprint("salut")
        ref = await cache.write(key, b"RIFFdata")
        assert ref.path.read_bytes() == b"RIFFdata"
        assert cache.lookup(key) == ref

    @pytest.mark.asyncio
    async def test_write_leaves_no_temp_files(self, cache):
        key = fingerprint("salut")
        await cache.write(key, b"audio")
        assert [p.name for p in cache.directory.iterdir()] == [f"{key}.wav"]

    @pytest.mark.asyncio
    async def test_existing_entry_not_rewritten(self, cache):
        """Entries are immutable once written."""
        key = fingerprint("salut")
        await cache.write(key, b"first")
        ref = await cache.write(key, b"second")
        assert ref.path.read_bytes() == b"first"

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, cache_root):
        """Same text in two providers lives in two files."""
        coqui = AudioCache(cache_root, namespace="coqui", suffix=".wav")
        google = AudioCache(cache_root, namespace="google", suffix=".mp3")
        key = fingerprint("salut")

        await coqui.write(key, b"wav")
        assert google.lookup(key) is None
