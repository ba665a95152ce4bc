"""
Runtime settings.

Everything is read from PITCHMIXER_* environment variables at import time.
"""

import os


DEFAULT_REFERENCE_VOLUME = float(os.getenv("PITCHMIXER_REFERENCE_VOLUME", "0.3"))
DEFAULT_VOICE_VOLUME = float(os.getenv("PITCHMIXER_VOICE_VOLUME", "1.0"))

MAX_REFERENCE_UPLOAD_MB = int(os.getenv("PITCHMIXER_MAX_REFERENCE_MB", "50"))
MAX_VOICE_UPLOAD_MB = int(os.getenv("PITCHMIXER_MAX_VOICE_MB", "10"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("PITCHMIXER_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

HOST = os.getenv("PITCHMIXER_HOST", "0.0.0.0")
PORT = int(os.getenv("PITCHMIXER_PORT", "8000"))

# Containers libsndfile decodes
SUPPORTED_FORMATS = [".mp3", ".wav", ".ogg", ".flac"]
