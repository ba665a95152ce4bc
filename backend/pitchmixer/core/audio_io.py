"""
Audio decoding boundary.

Raw uploads come in as bytes and leave as channel-first float32 buffers.
"""

import io
from dataclasses import dataclass

import numpy as np
import librosa
import soundfile as sf

from .errors import DecodeFailure


@dataclass
class DecodedAudio:
    """Decoded audio, channels shaped [channels, samples]."""
    channels: np.ndarray
    sample_rate: int
    duration: float

    @classmethod
    def from_array(cls, audio: np.ndarray, sample_rate: int) -> 'DecodedAudio':
        """Wrap an in-memory buffer (1-D mono or [channels, samples])."""
        audio = np.asarray(audio, dtype=np.float32)
        if audio.ndim == 1:
            audio = audio[np.newaxis, :]
        return cls(
            channels=audio,
            sample_rate=int(sample_rate),
            duration=audio.shape[1] / sample_rate
        )

    @property
    def num_channels(self) -> int:
        return self.channels.shape[0]

    @property
    def num_samples(self) -> int:
        return self.channels.shape[1]

    def mono(self) -> np.ndarray:
        return to_mono(self.channels)


def decode_audio(raw: bytes) -> DecodedAudio:
    """
    Decode an in-memory audio file.

    Args:
        raw: File contents (any container libsndfile understands)

    Returns:
        DecodedAudio

    Raises:
        DecodeFailure: empty input, unreadable data or a stream without frames
    """
    if not raw:
        raise DecodeFailure("Audio decoding failed: empty input")

    try:
        data, sr = sf.read(io.BytesIO(raw), dtype='float32', always_2d=True)
    except RuntimeError as e:
        print(f"[DECODE] soundfile rejected input ({len(raw)} bytes): {e}")
        raise DecodeFailure(f"Audio decoding failed: {e}") from e

    if data.shape[0] == 0:
        raise DecodeFailure("Audio decoding failed: no audio frames")

    return DecodedAudio.from_array(np.ascontiguousarray(data.T), sr)


def to_mono(channels: np.ndarray) -> np.ndarray:
    """Average all channels into one."""
    channels = np.asarray(channels, dtype=np.float32)
    if channels.ndim == 1:
        return channels
    if channels.shape[0] == 1:
        return channels[0]
    return librosa.to_mono(channels)


def align_sample_rate(samples: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """Resample a mono buffer to `target_sr` (no-op when rates already match)."""
    if orig_sr == target_sr or len(samples) == 0:
        return samples
    print(f"[DECODE] Resampling voice {orig_sr}Hz -> {target_sr}Hz")
    return librosa.resample(samples, orig_sr=orig_sr, target_sr=target_sr).astype(np.float32)
