"""
PitchMixer API

Thin HTTP host around the MelodyMixer engine:
- Multipart upload of reference + voice
- WAV download of the mix
- Melody preview
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core import config
from .api import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Print startup/shutdown markers; the engines hold no shared state."""
    print("[STARTUP] Initializing PitchMixer...")
    print(f"[STARTUP] Upload limits: reference {config.MAX_REFERENCE_UPLOAD_MB}MB, "
          f"voice {config.MAX_VOICE_UPLOAD_MB}MB")
    print("[STARTUP] Ready!")

    yield

    print("[SHUTDOWN] Complete")


# Create FastAPI app
app = FastAPI(
    title="PitchMixer API",
    description="Loops a voice sample over a track, following its melody",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "PitchMixer API", "docs": "/docs", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
