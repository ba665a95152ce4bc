"""
PitchEngine - Melody Extraction for the Voice Mixer

Features:
- Time-domain autocorrelation pitch estimation per frame
- Energy-gated melody extraction with fixed hop framing
- Median base-pitch estimation for a voice sample
- Semitone / note-name helpers
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Optional
import librosa


DEFAULT_BASE_PITCH = 200.0   # Hz, used when a voice yields no usable pitch
SILENCE_RMS = 0.01


@dataclass
class PitchObservation:
    """A single voiced frame of a melody."""
    time: float          # Frame start in seconds
    pitch: float         # Estimated fundamental (Hz)
    confidence: float    # Frame RMS energy

    def to_dict(self) -> dict:
        return {
            'time': round(self.time, 4),
            'pitch': round(self.pitch, 2),
            'note': frequency_to_note(self.pitch),
            'confidence': round(self.confidence, 4)
        }


class PitchEstimator:
    """
    Autocorrelation pitch estimator.

    Scores every lag from `min_offset` up to half the frame with
    1 - mean(|x[i] - x[i + lag]|) and walks the scores greedily: the first
    lag scoring above the threshold starts a climb, and the scan stops as
    soon as the score stops improving.
    """

    def __init__(self, min_offset: int = 20, threshold: float = 0.9):
        self.min_offset = min_offset
        self.threshold = threshold

    def iter_scores(self, frame: np.ndarray, chunk: int = 64):
        """
        Yield similarity scores lag by lag, starting at `min_offset`.

        Lags are scored `chunk` at a time, so a scan that stops early never
        builds the full lag-by-sample difference matrix.
        """
        frame = np.asarray(frame, dtype=np.float64)
        half = len(frame) // 2
        if half <= self.min_offset:
            return

        # Row k holds frame[k:k + half]
        windows = np.lib.stride_tricks.sliding_window_view(frame, half)
        head = frame[:half]
        for start in range(self.min_offset, half, chunk):
            shifted = windows[start:min(start + chunk, half)]
            yield from 1.0 - np.abs(shifted - head).mean(axis=1)

    def correlation_scores(self, frame: np.ndarray) -> np.ndarray:
        """Similarity score per lag, index 0 corresponds to `min_offset`."""
        return np.fromiter(self.iter_scores(frame), dtype=np.float64)

    def estimate(self, frame: np.ndarray, sr: int) -> Optional[float]:
        """
        Estimate the fundamental frequency of a mono frame.

        Args:
            frame: Mono samples
            sr: Sample rate

        Returns:
            Frequency in Hz, or None when no lag clears the threshold
        """
        scores = self.iter_scores(frame)

        best_offset = -1
        best_score = 0.0
        found = False

        for k, score in enumerate(scores):
            if score > self.threshold and score > best_score:
                best_score = score
                best_offset = k + self.min_offset
                found = True
            elif found:
                break

        if best_offset == -1:
            return None

        return sr / best_offset


class MelodyExtractor:
    """
    Slides a fixed window over a mono signal and keeps one observation per
    voiced frame whose pitch falls strictly inside (min_freq, max_freq).
    """

    def __init__(self, estimator: Optional[PitchEstimator] = None):
        self.estimator = estimator or PitchEstimator()

    def extract(
        self,
        audio: np.ndarray,
        sr: int,
        frame_size: int = 2048,
        hop_size: int = 512,
        min_freq: float = 80.0,
        max_freq: float = 2000.0
    ) -> list[PitchObservation]:
        """
        Extract a melody from mono audio.

        Args:
            audio: Mono samples
            sr: Sample rate
            frame_size: Analysis window size
            hop_size: Hop between frame starts
            min_freq: Lower pitch bound (exclusive)
            max_freq: Upper pitch bound (exclusive)

        Returns:
            Time-ordered observations; empty when nothing is voiced
        """
        if audio.ndim > 1:
            audio = librosa.to_mono(audio)
        audio = np.ascontiguousarray(audio, dtype=np.float32)

        # The last full frame is left out of the analysis
        num_frames = (len(audio) - frame_size) // hop_size
        if num_frames <= 0:
            return []

        frames = librosa.util.frame(audio, frame_length=frame_size, hop_length=hop_size)[:, :num_frames]
        rms = librosa.feature.rms(
            y=audio, frame_length=frame_size, hop_length=hop_size, center=False
        )[0][:num_frames]

        melody = []
        for i in range(num_frames):
            if rms[i] < SILENCE_RMS:
                continue

            pitch = self.estimator.estimate(frames[:, i], sr)
            if pitch is None:
                continue

            if min_freq < pitch < max_freq:
                start = i * hop_size
                melody.append(PitchObservation(
                    time=start / sr,
                    pitch=float(pitch),
                    confidence=float(rms[i])
                ))

        print(f"[MELODY] Extracted {len(melody)} pitch points from {num_frames} frames")
        return melody


def median_pitch(melody: list[PitchObservation], default: float = DEFAULT_BASE_PITCH) -> float:
    """
    Representative pitch of a melody.

    Even-length sets return the upper-middle element rather than the mean of
    the two middle values.
    """
    pitches = sorted(
        m.pitch for m in melody
        if m.pitch > 0 and m.confidence > SILENCE_RMS
    )
    if not pitches:
        return default
    return pitches[len(pitches) // 2]


def calculate_pitch_shift(from_pitch: float, to_pitch: float, limit: int = 12) -> int:
    """Whole-semitone distance between two pitches, clamped to +/- limit."""
    semitones = 12 * math.log2(to_pitch / from_pitch)
    semitones = min(limit, max(-limit, semitones))
    # Half-up rounding, so -2.5 -> -2 and 2.5 -> 3
    return int(math.floor(semitones + 0.5))


def frequency_to_note(frequency: float) -> str:
    """Note name with octave (e.g. 'A4'); '-' for sub-audio values."""
    if frequency < 20:
        return '-'
    return str(librosa.hz_to_note(frequency, unicode=False))
