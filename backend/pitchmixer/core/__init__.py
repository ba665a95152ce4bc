"""
PitchMixer Core

Settings, error taxonomy and the audio decoding boundary.
"""

from .errors import PitchMixerError, DecodeFailure, NoMelodyDetected
from .audio_io import DecodedAudio, decode_audio, to_mono, align_sample_rate

__all__ = [
    'PitchMixerError',
    'DecodeFailure',
    'NoMelodyDetected',
    'DecodedAudio',
    'decode_audio',
    'to_mono',
    'align_sample_rate',
]
