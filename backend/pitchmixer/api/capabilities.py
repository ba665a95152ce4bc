from __future__ import annotations

from fastapi import APIRouter

from ..core import config

router = APIRouter(prefix="/capabilities", tags=["Capabilities"])


@router.get("")
async def get_capabilities():
    return {
        "api_version": "1",
        "features": {
            "mix": True,
            "melody_analysis": True,
        },
        "limits": {
            "max_reference_mb": config.MAX_REFERENCE_UPLOAD_MB,
            "max_voice_mb": config.MAX_VOICE_UPLOAD_MB,
            "semitone_range": [-12, 12],
        },
        "defaults": {
            "reference_volume": config.DEFAULT_REFERENCE_VOLUME,
            "voice_volume": config.DEFAULT_VOICE_VOLUME,
        },
        "formats": {
            "input": config.SUPPORTED_FORMATS,
            "output": ".wav",
        },
    }
