"""TTS endpoints.

- POST /tts: synthesize one conversational turn through the cascade
- GET /tts/stats: per-provider usage and circuit stats
- GET /audio/{provider}/{filename}: serve a cached audio file

The telephony layer plays audio_url when present and falls back to the
platform's built-in voice when fallback is true.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from superparty.observability.logging import bind_call, get_logger, unbind_call
from superparty.tts.cache import is_fingerprint
from superparty.tts.cascade import TTSCascade

logger = get_logger(__name__)

router = APIRouter(tags=["tts"])

MEDIA_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
}


class SynthesizeRequest(BaseModel):
    """Text for one assistant turn."""

    text: str = Field(..., min_length=1, max_length=5000)
    call_sid: str | None = Field(default=None, max_length=128)


class SynthesizeResponse(BaseModel):
    """Audio for one assistant turn, or a fallback signal."""

    audio_url: str | None = None
    provider: str | None = None
    fallback: bool = False


def get_cascade(request: Request) -> TTSCascade:
    """Cascade created by the application lifespan."""
    cascade = getattr(request.app.state, "cascade", None)
    if cascade is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="TTS cascade not initialized",
        )
    return cascade


@router.post("/tts", response_model=SynthesizeResponse)
async def synthesize(
    body: SynthesizeRequest,
    cascade: TTSCascade = Depends(get_cascade),
) -> SynthesizeResponse:
    """Synthesize text with the first provider that succeeds."""
    if body.call_sid:
        bind_call(body.call_sid)
    try:
        ref = await cascade.synthesize(body.text)
    finally:
        if body.call_sid:
            unbind_call()

    if ref is None:
        logger.warning("tts_fallback_builtin_voice", text_length=len(body.text))
        return SynthesizeResponse(fallback=True)

    return SynthesizeResponse(audio_url=ref.url, provider=ref.provider)


@router.get("/tts/stats")
async def stats(cascade: TTSCascade = Depends(get_cascade)) -> dict[str, Any]:
    """Per-provider stats for dashboards."""
    return {"providers": cascade.get_stats()}


@router.get("/audio/{provider}/{filename}")
async def audio(
    provider: str,
    filename: str,
    cascade: TTSCascade = Depends(get_cascade),
) -> FileResponse:
    """Serve a cached audio file.

    Only "<fingerprint><suffix>" names of a known provider are served.
    """
    backend = cascade.get_provider(provider)
    if backend is None:
        raise HTTPException(status_code=404, detail="Unknown provider")

    cache = backend.cache
    key, dot, suffix = filename.partition(".")
    if (
        cache is None
        or not dot
        or f".{suffix}" != cache.suffix
        or not is_fingerprint(key)
    ):
        raise HTTPException(status_code=404, detail="Not found")

    ref = cache.lookup(key)
    if ref is None:
        raise HTTPException(status_code=404, detail="Not found")

    return FileResponse(ref.path, media_type=MEDIA_TYPES.get(cache.suffix))
