"""Content-addressed audio cache.

Audio is stored as one file per unique input text, named by the SHA-256
digest of that text, under a per-provider namespace directory:

    <root>/<namespace>/<fingerprint><suffix>

Entries never expire. Once the final file exists it is never rewritten,
so concurrent writers of the same fingerprint are harmless. Writes go to a
temporary file in the same directory and are moved into place with
os.replace(), so a reader never observes a partially written file.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from superparty.config.constants import TTS

_FINGERPRINT_RE = re.compile(r"^[0-9a-f]{64}$")


def fingerprint(text: str) -> str:
    """Deterministic cache key for the exact text to synthesize."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def is_fingerprint(value: str) -> bool:
    """Whether value looks like a key produced by fingerprint()."""
    return bool(_FINGERPRINT_RE.match(value))


@dataclass(frozen=True)
class AudioRef:
    """Reference to a cached audio artifact."""

    key: str
    path: Path
    url: str  # Public path the telephony layer hands to the caller
    provider: str


class AudioCache:
    """Content-addressed file store scoped to one provider namespace.

    Usage:
        cache = AudioCache(Path("cache"), namespace="coqui", suffix=".wav")

        key = fingerprint(text)
        ref = cache.lookup(key)
        if ref is None:
            ref = await cache.write(key, audio_bytes)
    """

    def __init__(
        self,
        root: Path | str,
        namespace: str,
        suffix: str = ".wav",
        url_prefix: str = TTS.AUDIO_URL_PREFIX,
    ) -> None:
        self._namespace = namespace
        self._suffix = suffix
        self._url_prefix = url_prefix.rstrip("/")
        self._dir = Path(root) / namespace
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        """Directory holding this namespace's audio files."""
        return self._dir

    @property
    def namespace(self) -> str:
        """Namespace (provider name) of this cache."""
        return self._namespace

    @property
    def suffix(self) -> str:
        """File suffix of stored audio."""
        return self._suffix

    def path_for(self, key: str) -> Path:
        """Filesystem path for a fingerprint."""
        return self._dir / f"{key}{self._suffix}"

    def ref(self, key: str) -> AudioRef:
        """Build the reference for a fingerprint (existing or not)."""
        return AudioRef(
            key=key,
            path=self.path_for(key),
            url=f"{self._url_prefix}/{self._namespace}/{key}{self._suffix}",
            provider=self._namespace,
        )

    def exists(self, key: str) -> bool:
        """Whether a finished entry exists for the fingerprint."""
        return self.path_for(key).is_file()

    def lookup(self, key: str) -> AudioRef | None:
        """Return the reference for a cached entry, or None on a miss."""
        if self.exists(key):
            return self.ref(key)
        return None

    async def write(self, key: str, data: bytes) -> AudioRef:
        """Persist audio bytes under the fingerprint.

        Args:
            key: Fingerprint of the synthesized text
            data: Audio bytes

        Returns:
            Reference to the cached file

        Raises:
            OSError: If the file cannot be written
        """
        await asyncio.to_thread(self._write_atomic, self.path_for(key), data)
        return self.ref(key)

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Write via temp file + rename. Existing entries are left untouched."""
        if path.exists():
            return

        fd, tmp_name = tempfile.mkstemp(
            dir=self._dir,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
