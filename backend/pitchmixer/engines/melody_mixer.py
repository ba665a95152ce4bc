"""
MelodyMixer - Voice-to-Melody Orchestrator

Makes a short voice sample "sing" the melody of a reference track:
1. Extract the reference melody
2. Fold the voice to mono
3. Estimate the voice's base pitch
4. Walk the output in 100ms segments, looping the voice and shifting
   each segment towards the melody pitch
5. Mix voice over the reference and normalise each channel
6. Encode as 16-bit WAV
"""

import math
import time
import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Callable

from ..core import config
from ..core.audio_io import DecodedAudio, decode_audio, to_mono, align_sample_rate
from ..core.errors import NoMelodyDetected
from .pitch_engine import (
    MelodyExtractor, PitchObservation, median_pitch,
    calculate_pitch_shift, frequency_to_note, DEFAULT_BASE_PITCH
)
from .pitch_shifter import PitchShifter
from .wave_encoder import WaveEncoder


ProgressCallback = Callable[[int, str], None]

SEGMENT_DURATION = 0.1      # seconds per pitch decision
LOOKAHEAD = 0.2             # seconds past a segment start before the melody scan stops
MAX_FADE_SAMPLES = 256
NORMALIZE_PEAK = 0.9
NORMALIZE_FLOOR = 0.001


@dataclass
class MixOptions:
    """Gains applied at the final mix."""
    reference_volume: float = field(default_factory=lambda: config.DEFAULT_REFERENCE_VOLUME)
    voice_volume: float = field(default_factory=lambda: config.DEFAULT_VOICE_VOLUME)

    def __post_init__(self):
        for name in ('reference_volume', 'voice_volume'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

    def to_dict(self) -> dict:
        return {
            'reference_volume': self.reference_volume,
            'voice_volume': self.voice_volume
        }


@dataclass
class MixStats:
    """Bookkeeping from the last transform run."""
    reference_duration: float = 0.0
    voice_duration: float = 0.0
    sample_rate: int = 0
    melody_points: int = 0
    voice_base_pitch: float = DEFAULT_BASE_PITCH
    segments_total: int = 0
    segments_voiced: int = 0
    processing_time_seconds: float = 0.0

    def to_dict(self) -> dict:
        return {
            'reference_duration': round(self.reference_duration, 3),
            'voice_duration': round(self.voice_duration, 3),
            'sample_rate': self.sample_rate,
            'melody_points': self.melody_points,
            'voice_base_pitch': round(self.voice_base_pitch, 2),
            'voice_base_note': frequency_to_note(self.voice_base_pitch),
            'segments_total': self.segments_total,
            'segments_voiced': self.segments_voiced,
            'processing_time_seconds': round(self.processing_time_seconds, 2)
        }


class MelodyMixer:
    """
    Orchestrates melody extraction, per-segment pitch shifting and the
    final mix. Each run owns its buffers; one instance can serve many runs
    as long as they are not concurrent on the same instance (`last_stats`
    is overwritten).

    Example:
        mixer = MelodyMixer()
        wav_bytes = mixer.transform(
            reference, voice,
            progress_callback=lambda pct, step: print(pct, step),
            options=MixOptions(reference_volume=0.3, voice_volume=1.0)
        )
    """

    def __init__(
        self,
        extractor: Optional[MelodyExtractor] = None,
        shifter: Optional[PitchShifter] = None,
        encoder: Optional[WaveEncoder] = None
    ):
        self.extractor = extractor or MelodyExtractor()
        self.shifter = shifter or PitchShifter()
        self.encoder = encoder or WaveEncoder()
        self.last_stats: Optional[MixStats] = None

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def transform_bytes(
        self,
        reference_bytes: bytes,
        voice_bytes: bytes,
        progress_callback: Optional[ProgressCallback] = None,
        options: Optional[MixOptions] = None
    ) -> bytes:
        """Decode both uploads and run `transform`."""
        reference = decode_audio(reference_bytes)
        voice = decode_audio(voice_bytes)
        return self.transform(reference, voice, progress_callback, options)

    def transform(
        self,
        reference: DecodedAudio,
        voice: DecodedAudio,
        progress_callback: Optional[ProgressCallback] = None,
        options: Optional[MixOptions] = None
    ) -> bytes:
        """
        Fit the voice to the reference melody and mix both.

        Args:
            reference: Track supplying melody, duration and channel layout
            voice: Sample that gets looped and pitch-shifted
            progress_callback: Optional callback(percent, step)
            options: Mix gains

        Returns:
            16-bit PCM WAV bytes, floor(reference.duration * sr) frames long

        Raises:
            NoMelodyDetected: the reference has no voiced frames in 80-800Hz
        """
        start_time = time.perf_counter()
        options = options or MixOptions()
        report = progress_callback or (lambda percent, step: None)
        sr = reference.sample_rate

        # 1. Reference melody
        report(10, 'Analyzing reference melody')
        melody = self.extractor.extract(
            reference.mono(), sr,
            hop_size=1024, min_freq=80, max_freq=800
        )
        if not melody:
            raise NoMelodyDetected()

        # 2. Voice
        report(20, 'Loading voice sample')
        voice_samples = align_sample_rate(voice.mono(), voice.sample_rate, sr)
        print(f"[MIX] Voice: {voice.duration:.2f}s, reference: {reference.duration:.2f}s")

        # 3. Voice base pitch
        report(30, 'Analyzing voice pitch')
        base_pitch = self.estimate_base_pitch(voice_samples, sr)
        print(f"[MIX] Voice base pitch: {base_pitch:.1f}Hz ({frequency_to_note(base_pitch)})")

        # 4. Segment loop
        report(40, 'Fitting voice to melody')
        output_length = int(math.floor(reference.duration * sr))
        voice_track, voiced = self.render_voice_track(
            melody, voice_samples, base_pitch, sr,
            reference.duration, output_length, report
        )

        # 5. Final mix
        report(90, 'Mixing')
        mixed = self.mix(reference.channels, voice_track, options)

        # 6. Encode
        wav_bytes = self.encoder.encode(mixed, sr)

        self.last_stats = MixStats(
            reference_duration=reference.duration,
            voice_duration=voice.duration,
            sample_rate=sr,
            melody_points=len(melody),
            voice_base_pitch=base_pitch,
            segments_total=math.ceil(reference.duration / SEGMENT_DURATION),
            segments_voiced=voiced,
            processing_time_seconds=time.perf_counter() - start_time
        )
        print(f"[MIX] Done: {voiced}/{self.last_stats.segments_total} segments voiced "
              f"in {self.last_stats.processing_time_seconds:.2f}s")

        report(100, 'Complete')
        return wav_bytes

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    def estimate_base_pitch(self, voice_samples: np.ndarray, sr: int) -> float:
        """Median voice pitch in 80-500Hz, 200Hz when nothing is voiced."""
        voice_melody = self.extractor.extract(
            voice_samples, sr,
            hop_size=2048, min_freq=80, max_freq=500
        )
        if not voice_melody:
            print(f"[MIX] No pitch found in voice, assuming {DEFAULT_BASE_PITCH:.0f}Hz")
        return median_pitch(voice_melody)

    @staticmethod
    def melody_pitch_at(melody: list[PitchObservation], time_s: float) -> Optional[float]:
        """
        Pitch of the observation closest to `time_s`.

        The scan stops at the first observation past `time_s + LOOKAHEAD`, so
        the match is approximate when the melody has gaps.
        """
        if not melody:
            return None

        closest = melody[0]
        min_diff = math.inf
        for point in melody:
            diff = abs(point.time - time_s)
            if diff < min_diff:
                min_diff = diff
                closest = point
            if point.time > time_s + LOOKAHEAD:
                break

        return closest.pitch or None

    # =========================================================================
    # SEGMENT RENDERING
    # =========================================================================

    def render_voice_track(
        self,
        melody: list[PitchObservation],
        voice_samples: np.ndarray,
        base_pitch: float,
        sr: int,
        duration: float,
        output_length: int,
        report: ProgressCallback
    ) -> tuple[np.ndarray, int]:
        """
        Build the mono voice track segment by segment.

        Returns:
            (voice track of output_length samples, number of voiced segments)
        """
        track = np.zeros(output_length, dtype=np.float32)
        segment_samples = int(math.floor(SEGMENT_DURATION * sr))
        num_segments = math.ceil(duration / SEGMENT_DURATION)
        voice_length = len(voice_samples)

        voice_position = 0
        voiced = 0

        for i in range(num_segments):
            if i % 20 == 0:
                fraction = i / num_segments
                report(40 + int(fraction * 50), f'Fitting voice to melody ({int(fraction * 100)}%)')

            segment_start = i * segment_samples
            segment_end = min(segment_start + segment_samples, output_length)
            target_pitch = self.melody_pitch_at(melody, i * SEGMENT_DURATION)

            if target_pitch is not None and voice_length > 0 and segment_end > segment_start:
                semitones = calculate_pitch_shift(base_pitch, target_pitch)
                segment = self.extract_voice_segment(voice_samples, voice_position, segment_samples)
                shifted = self.shifter.shift(segment, semitones, sr)
                self.mix_segment_with_crossfade(track, shifted, segment_start, segment_end - segment_start)
                voiced += 1

            # Advance even for skipped segments to keep the loop phase
            if voice_length > 0:
                voice_position = (voice_position + segment_samples) % voice_length

        return track, voiced

    @staticmethod
    def extract_voice_segment(voice_samples: np.ndarray, start: int, length: int) -> np.ndarray:
        """Read `length` samples from `start`, wrapping around the voice."""
        return np.take(voice_samples, np.arange(start, start + length), mode='wrap')

    @staticmethod
    def mix_segment_with_crossfade(
        output: np.ndarray,
        segment: np.ndarray,
        start: int,
        length: int
    ) -> None:
        """Add `segment[:length]` into `output` at `start` with linear edge ramps."""
        length = min(length, len(output) - start)
        if length <= 0:
            return

        fade_length = min(MAX_FADE_SAMPLES, length / 4)
        idx = np.arange(length, dtype=np.float64)
        fade = np.ones(length, dtype=np.float64)

        fade_in = idx < fade_length
        fade_out = ~fade_in & (idx > length - fade_length)
        fade[fade_in] = idx[fade_in] / fade_length
        fade[fade_out] = (length - idx[fade_out]) / fade_length

        # Shorter segments repeat their last sample
        src = np.minimum(np.arange(length), len(segment) - 1)
        output[start:start + length] += segment[src] * fade

    # =========================================================================
    # FINAL MIX
    # =========================================================================

    @staticmethod
    def mix(
        reference_channels: np.ndarray,
        voice_track: np.ndarray,
        options: MixOptions
    ) -> np.ndarray:
        """
        Weighted sum of each reference channel with the mono voice track,
        then per-channel peak normalisation.
        """
        output_length = len(voice_track)
        num_channels = reference_channels.shape[0]
        mixed = np.zeros((num_channels, output_length), dtype=np.float32)

        for channel in range(num_channels):
            reference = reference_channels[channel, :output_length]
            mixed[channel, :len(reference)] = reference * options.reference_volume
            mixed[channel] += voice_track * options.voice_volume
            normalize_peak(mixed[channel])

        return mixed


def normalize_peak(samples: np.ndarray, peak: float = NORMALIZE_PEAK) -> np.ndarray:
    """Scale `samples` in place so the loudest sample sits at `peak`."""
    max_abs = float(np.max(np.abs(samples))) if len(samples) else 0.0
    if max_abs > NORMALIZE_FLOOR:
        samples *= peak / max_abs
    return samples
