"""
WaveEncoder - Canonical 16-bit PCM WAV serialisation.

Layout: 44-byte RIFF/WAVE header followed by interleaved little-endian
int16 frames. Floats are clamped to [-1, 1]; negatives scale by 32768 and
non-negatives by 32767.
"""

import struct
from dataclasses import dataclass

import numpy as np


HEADER_SIZE = 44
PCM_FORMAT = 1
BIT_DEPTH = 16

# RIFF tag, RIFF size, WAVE tag, fmt tag, fmt size, format, channels,
# sample rate, byte rate, block align, bits per sample, data tag, data size
_HEADER = struct.Struct('<4sI4s4sIHHIIHH4sI')


@dataclass
class WavHeader:
    """Fields of a canonical PCM header."""
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bit_depth: int
    data_length: int
    audio_format: int = PCM_FORMAT

    @property
    def num_samples(self) -> int:
        """Frames per channel."""
        return self.data_length // self.block_align if self.block_align else 0

    @property
    def duration(self) -> float:
        return self.num_samples / self.sample_rate if self.sample_rate else 0.0

    def to_dict(self) -> dict:
        return {
            'num_channels': self.num_channels,
            'sample_rate': self.sample_rate,
            'bit_depth': self.bit_depth,
            'data_length': self.data_length,
            'num_samples': self.num_samples,
            'duration': round(self.duration, 3)
        }


class WaveEncoder:
    """Serialises channel-first float buffers into WAV bytes."""

    def encode(self, channels: np.ndarray, sr: int) -> bytes:
        """
        Encode audio as 16-bit PCM WAV.

        Args:
            channels: Float samples, shape [channels, samples] (1-D is mono)
            sr: Sample rate

        Returns:
            Complete WAV file contents
        """
        channels = np.asarray(channels, dtype=np.float64)
        if channels.ndim == 1:
            channels = channels[np.newaxis, :]

        num_channels, length = channels.shape
        block_align = num_channels * (BIT_DEPTH // 8)
        data_length = length * block_align

        header = _HEADER.pack(
            b'RIFF', 36 + data_length, b'WAVE',
            b'fmt ', 16, PCM_FORMAT, num_channels, sr,
            sr * block_align, block_align, BIT_DEPTH,
            b'data', data_length
        )

        clamped = np.clip(channels, -1.0, 1.0)
        scaled = np.where(clamped < 0, clamped * 0x8000, clamped * 0x7FFF)
        # astype truncates toward zero; frames interleave channel by channel
        pcm = scaled.T.reshape(-1).astype('<i2')

        return header + pcm.tobytes()

    @staticmethod
    def read_header(blob: bytes) -> WavHeader:
        """Parse the header of a canonical WAV produced by `encode`."""
        if len(blob) < HEADER_SIZE:
            raise ValueError(f"WAV data too short: {len(blob)} bytes")

        (riff, _, wave, fmt, _, audio_format, num_channels, sample_rate,
         byte_rate, block_align, bit_depth, data_tag, data_length) = _HEADER.unpack_from(blob)

        if riff != b'RIFF' or wave != b'WAVE' or fmt != b'fmt ' or data_tag != b'data':
            raise ValueError("Not a canonical PCM WAV header")

        return WavHeader(
            num_channels=num_channels,
            sample_rate=sample_rate,
            byte_rate=byte_rate,
            block_align=block_align,
            bit_depth=bit_depth,
            data_length=data_length,
            audio_format=audio_format
        )
