"""
PitchMixer Engine Suite
Numeric core of the voice-to-melody mixer.

Engines:
- PitchEstimator: Time-domain autocorrelation pitch estimation
- MelodyExtractor: Energy-gated framewise melody extraction
- PitchShifter: PSOLA-style fixed-length pitch shifting
- MelodyMixer: Main orchestrator
- WaveEncoder: 16-bit PCM WAV serialisation
"""

from .pitch_engine import (
    PitchEstimator, MelodyExtractor, PitchObservation,
    median_pitch, calculate_pitch_shift, frequency_to_note
)
from .pitch_shifter import PitchShifter
from .melody_mixer import MelodyMixer, MixOptions, MixStats, normalize_peak
from .wave_encoder import WaveEncoder, WavHeader

__all__ = [
    'PitchEstimator',
    'MelodyExtractor',
    'PitchObservation',
    'median_pitch',
    'calculate_pitch_shift',
    'frequency_to_note',
    'PitchShifter',
    'MelodyMixer',
    'MixOptions',
    'MixStats',
    'normalize_peak',
    'WaveEncoder',
    'WavHeader',
]
