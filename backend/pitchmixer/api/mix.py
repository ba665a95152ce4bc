"""
Mix API Routes

Upload a reference track and a voice sample, get back a WAV of the voice
following the reference melody.
"""

import asyncio
from typing import Optional, List

from fastapi import APIRouter, HTTPException, UploadFile, File, Form
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..core import config
from ..core.audio_io import decode_audio
from ..core.errors import DecodeFailure, NoMelodyDetected
from ..engines.melody_mixer import MelodyMixer, MixOptions
from ..engines.pitch_engine import MelodyExtractor, median_pitch, frequency_to_note
from ..engines.wave_encoder import WaveEncoder

router = APIRouter(prefix="/mix", tags=["Mix"])


# =============================================================================
# SCHEMAS
# =============================================================================

class MelodyPoint(BaseModel):
    """One voiced frame of an extracted melody."""
    time: float
    pitch: float
    note: str
    confidence: float


class MelodyAnalysisResponse(BaseModel):
    """Melody extracted from an uploaded track."""
    sample_rate: int
    duration: float
    num_channels: int
    point_count: int
    median_pitch: Optional[float] = None
    median_note: Optional[str] = None
    points: List[MelodyPoint] = Field(default_factory=list)


# =============================================================================
# HELPERS
# =============================================================================

async def _read_upload(upload: UploadFile, label: str, max_mb: int) -> bytes:
    """Read an upload after checking its type and size."""
    content_type = upload.content_type or ""
    if content_type and not content_type.startswith("audio/"):
        raise HTTPException(400, f"{label} must be an audio file (got {content_type})")

    raw = await upload.read()
    size_mb = len(raw) / (1024 * 1024)
    if size_mb > max_mb:
        raise HTTPException(413, f"{label} exceeds {max_mb}MB ({size_mb:.1f}MB)")
    if not raw:
        raise HTTPException(400, f"{label} is empty")
    return raw


def _print_progress(percent: int, step: str):
    print(f"[MIX] {percent:3d}% {step}")


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("")
async def create_mix(
    reference: UploadFile = File(..., description="Track the melody is taken from"),
    voice: UploadFile = File(..., description="Voice sample that gets looped"),
    reference_volume: float = Form(default=config.DEFAULT_REFERENCE_VOLUME, ge=0.0, le=1.0),
    voice_volume: float = Form(default=config.DEFAULT_VOICE_VOLUME, ge=0.0, le=1.0),
):
    """
    Fit the voice to the reference melody and mix both.

    Returns the mix as 16-bit PCM WAV, same length and channel count as
    the reference.
    """
    reference_bytes = await _read_upload(reference, "Reference", config.MAX_REFERENCE_UPLOAD_MB)
    voice_bytes = await _read_upload(voice, "Voice", config.MAX_VOICE_UPLOAD_MB)

    options = MixOptions(reference_volume=reference_volume, voice_volume=voice_volume)
    mixer = MelodyMixer()

    print(f"[API] Mix request: {reference.filename} + {voice.filename} {options.to_dict()}")

    try:
        wav_bytes = await asyncio.to_thread(
            mixer.transform_bytes,
            reference_bytes,
            voice_bytes,
            _print_progress,
            options,
        )
    except DecodeFailure as e:
        raise HTTPException(400, str(e))
    except NoMelodyDetected as e:
        raise HTTPException(422, str(e))

    header = WaveEncoder.read_header(wav_bytes)
    headers = {
        "Content-Disposition": 'attachment; filename="pitchmix.wav"',
        "X-Sample-Rate": str(header.sample_rate),
        "X-Channels": str(header.num_channels),
        "X-Duration": f"{header.duration:.3f}",
    }
    if mixer.last_stats:
        headers["X-Voice-Base-Pitch"] = f"{mixer.last_stats.voice_base_pitch:.2f}"

    return Response(content=wav_bytes, media_type="audio/wav", headers=headers)


@router.post("/analyze", response_model=MelodyAnalysisResponse)
async def analyze_melody(
    audio: UploadFile = File(..., description="Track to analyze"),
    hop_size: int = Form(default=1024, ge=256, le=8192),
    min_freq: float = Form(default=80.0, gt=0),
    max_freq: float = Form(default=800.0, gt=0),
):
    """
    Preview the melody a mix would follow.

    Uses the same extractor settings as the mixer's reference pass by default.
    """
    if min_freq >= max_freq:
        raise HTTPException(400, "min_freq must be below max_freq")

    raw = await _read_upload(audio, "Audio", config.MAX_REFERENCE_UPLOAD_MB)

    try:
        decoded = await asyncio.to_thread(decode_audio, raw)
    except DecodeFailure as e:
        raise HTTPException(400, str(e))

    melody = await asyncio.to_thread(
        MelodyExtractor().extract,
        decoded.mono(),
        decoded.sample_rate,
        2048,
        hop_size,
        min_freq,
        max_freq,
    )

    median = median_pitch(melody) if melody else None

    return MelodyAnalysisResponse(
        sample_rate=decoded.sample_rate,
        duration=round(decoded.duration, 3),
        num_channels=decoded.num_channels,
        point_count=len(melody),
        median_pitch=round(median, 2) if median else None,
        median_note=frequency_to_note(median) if median else None,
        points=[MelodyPoint(**point.to_dict()) for point in melody],
    )
