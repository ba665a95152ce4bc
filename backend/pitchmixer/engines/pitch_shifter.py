"""
PitchShifter - Overlap-Add Pitch Resynthesis

Fixed-length pitch shifting for short voice segments:
- Hann-windowed overlap-add with a pitch-dependent output hop
- Window-sum normalisation for uneven overlap coverage
- Linear-interpolation resampling back to the input length
- Circular linear resampling for inputs shorter than one frame
"""

import numpy as np


class PitchShifter:
    """
    PSOLA-style pitch shifter.

    Every output buffer has exactly the input's length, so callers can treat
    shifted segments as drop-in replacements. Values are never clipped here.

    Example:
        shifter = PitchShifter()
        shifted = shifter.shift(segment, semitones=3, sr=44100)
    """

    def __init__(self, frame_size: int = 2048, hop_size: int = 512):
        """
        Initialize pitch shifter.

        Args:
            frame_size: Overlap-add frame length
            hop_size: Analysis hop between input frames
        """
        self.frame_size = frame_size
        self.hop_size = hop_size
        # Symmetric Hann, 0.5 * (1 - cos(2*pi*n / (N - 1)))
        self.window = np.hanning(frame_size)

    def shift(self, samples: np.ndarray, semitones: float, sr: int) -> np.ndarray:
        """
        Shift a mono buffer by a number of semitones.

        Args:
            samples: Mono input
            semitones: Pitch change (+/- semitones)
            sr: Sample rate

        Returns:
            New buffer with len(samples) samples
        """
        samples = np.asarray(samples, dtype=np.float32)

        if abs(semitones) < 0.01:
            return samples.copy()

        if len(samples) < self.frame_size:
            return self.resample_shift(samples, semitones)

        return self.psola_shift(samples, semitones)

    def psola_shift(self, samples: np.ndarray, semitones: float) -> np.ndarray:
        """Windowed overlap-add followed by a stretch back to the input length."""
        pitch_factor = 2.0 ** (semitones / 12.0)
        output_hop = int(round(self.hop_size / pitch_factor))

        num_frames = (len(samples) - self.frame_size) // self.hop_size + 1
        output_length = (num_frames - 1) * output_hop + self.frame_size

        output = np.zeros(output_length, dtype=np.float64)
        window_sum = np.zeros(output_length, dtype=np.float64)

        for frame in range(num_frames):
            in_start = frame * self.hop_size
            out_start = frame * output_hop
            chunk = samples[in_start:in_start + self.frame_size]

            output[out_start:out_start + self.frame_size] += chunk * self.window
            window_sum[out_start:out_start + self.frame_size] += self.window

        covered = window_sum > 0.001
        output[covered] /= window_sum[covered]

        return self._stretch(output, len(samples))

    def resample_shift(self, samples: np.ndarray, semitones: float) -> np.ndarray:
        """
        Cheap resampling shift.

        Reads the input at the pitch ratio with linear interpolation. The read
        position wraps around the buffer so the output keeps the input length.
        """
        samples = np.asarray(samples, dtype=np.float32)
        length = len(samples)
        if length == 0 or abs(semitones) < 0.01:
            return samples.copy()

        pitch_ratio = 2.0 ** (semitones / 12.0)
        positions = np.mod(np.arange(length) * pitch_ratio, length)
        index1 = np.floor(positions).astype(np.int64)
        index2 = (index1 + 1) % length
        frac = positions - index1

        shifted = samples[index1] * (1 - frac) + samples[index2] * frac
        return shifted.astype(np.float32)

    @staticmethod
    def _stretch(buffer: np.ndarray, target_length: int) -> np.ndarray:
        """Linear-interpolation resample of `buffer` to `target_length` samples."""
        ratio = len(buffer) / target_length
        positions = np.arange(target_length) * ratio
        index1 = np.floor(positions).astype(np.int64)
        index2 = np.minimum(index1 + 1, len(buffer) - 1)
        frac = positions - index1

        stretched = buffer[index1] * (1 - frac) + buffer[index2] * frac
        return stretched.astype(np.float32)
