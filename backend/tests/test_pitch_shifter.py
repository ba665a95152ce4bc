"""
Tests for the overlap-add pitch shifter.
"""

import numpy as np
import pytest

from pitchmixer.engines.pitch_shifter import PitchShifter


@pytest.fixture
def shifter():
    return PitchShifter()


@pytest.fixture
def noise():
    rng = np.random.default_rng(42)
    return rng.uniform(-0.5, 0.5, 4410).astype(np.float32)


class TestIdentity:
    """Tests for the zero-shift fast path."""

    def test_zero_semitones_is_identity(self, shifter, noise):
        """Shifting by 0 returns the same samples."""
        shifted = shifter.shift(noise, 0, 44100)
        np.testing.assert_array_equal(shifted, noise)

    def test_tiny_shift_is_identity(self, shifter, noise):
        """Shifts under 0.01 semitones are treated as zero."""
        np.testing.assert_array_equal(shifter.shift(noise, 0.005, 44100), noise)

    def test_identity_returns_new_buffer(self, shifter, noise):
        """Output never aliases the input."""
        shifted = shifter.shift(noise, 0, 44100)
        shifted[0] = 99.0
        assert noise[0] != 99.0


class TestLength:
    """Tests for the fixed-length contract."""

    @pytest.mark.parametrize("semitones", range(-12, 13))
    def test_psola_keeps_length(self, shifter, noise, semitones):
        assert len(shifter.shift(noise, semitones, 44100)) == len(noise)

    @pytest.mark.parametrize("length", [1, 100, 2047, 2048, 2049, 10000])
    @pytest.mark.parametrize("semitones", [-12, -5, 7, 12])
    def test_any_length(self, shifter, length, semitones):
        samples = np.linspace(-0.5, 0.5, length).astype(np.float32)
        assert len(shifter.shift(samples, semitones, 44100)) == length

    def test_empty_input(self, shifter):
        assert len(shifter.shift(np.zeros(0, dtype=np.float32), 5, 44100)) == 0


class TestResynthesis:
    """Tests for the overlap-add and fallback paths."""

    @pytest.mark.parametrize("semitones", [-7, 3, 12])
    def test_silence_in_silence_out(self, shifter, semitones):
        for length in (800, 4410):
            shifted = shifter.shift(np.zeros(length, dtype=np.float32), semitones, 44100)
            assert not np.any(shifted)

    def test_no_clipping(self, shifter):
        """Values above full scale survive; clipping happens at encode time."""
        loud = np.full(4410, 1.5, dtype=np.float32)
        shifted = shifter.shift(loud, 4, 44100)
        assert shifted.max() == pytest.approx(1.5, rel=1e-5)

    def test_constant_signal_reconstructed(self, shifter):
        """Window-sum normalisation gives back a flat signal between the edges."""
        flat = np.full(8192, 0.25, dtype=np.float32)
        shifted = shifter.shift(flat, -3, 44100)
        np.testing.assert_allclose(shifted[100:-100], 0.25, rtol=1e-4)

    def test_resample_shift_octave_up(self, shifter):
        """The fallback reads at the pitch ratio, wrapping at the end."""
        n = np.arange(1024)
        samples = np.sin(2 * np.pi * n / 64).astype(np.float32)
        expected = np.sin(2 * np.pi * n / 32).astype(np.float32)

        shifted = shifter.resample_shift(samples, 12)

        np.testing.assert_allclose(shifted, expected, atol=1e-5)

    def test_short_input_uses_fallback(self, shifter):
        """Inputs shorter than one frame take the resampling path."""
        n = np.arange(800)
        samples = np.sin(2 * np.pi * n / 80).astype(np.float32)

        np.testing.assert_array_equal(
            shifter.shift(samples, 5, 44100),
            shifter.resample_shift(samples, 5)
        )
