"""
Pytest configuration and fixtures for PitchMixer tests.
"""

import io
import numpy as np
import pytest
import soundfile as sf


def make_sine(frequency: float, duration: float, sr: int, amplitude: float = 0.8) -> np.ndarray:
    """Pure sine as float32."""
    t = np.arange(int(sr * duration)) / sr
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def to_wav_bytes(audio: np.ndarray, sr: int) -> bytes:
    """Encode [channels, samples] or mono float audio as 16-bit WAV bytes."""
    buf = io.BytesIO()
    data = audio.T if audio.ndim == 2 else audio
    sf.write(buf, data, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()


@pytest.fixture
def sine():
    """Factory fixture: sine(frequency, duration, sr, amplitude=0.8)."""
    return make_sine


@pytest.fixture
def wav_bytes():
    """Factory fixture: wav_bytes(audio, sr)."""
    return to_wav_bytes


@pytest.fixture
def reference_wav():
    """One second of a 200Hz tone at 8kHz, stereo."""
    sr = 8000
    tone = make_sine(200.0, 1.0, sr)
    return to_wav_bytes(np.stack([tone, tone * 0.5]), sr)


@pytest.fixture
def voice_wav():
    """Half a second of a 150Hz tone at 8kHz, mono."""
    sr = 8000
    return to_wav_bytes(make_sine(150.0, 0.5, sr, amplitude=0.5), sr)


@pytest.fixture
def silent_wav():
    """One second of digital silence at 8kHz."""
    sr = 8000
    return to_wav_bytes(np.zeros(sr, dtype=np.float32), sr)
