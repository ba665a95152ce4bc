"""
Tests for the decoding boundary.
"""

import numpy as np
import pytest

from pitchmixer.core.audio_io import DecodedAudio, decode_audio, to_mono, align_sample_rate
from pitchmixer.core.errors import DecodeFailure, PitchMixerError


class TestDecode:
    """Tests for decode_audio."""

    def test_decode_mono(self, sine, wav_bytes):
        tone = sine(220.0, 0.5, 8000)

        decoded = decode_audio(wav_bytes(tone, 8000))

        assert decoded.sample_rate == 8000
        assert decoded.num_channels == 1
        assert decoded.num_samples == 4000
        assert decoded.duration == pytest.approx(0.5)
        assert decoded.channels.dtype == np.float32

    def test_decode_stereo_channel_first(self, sine, wav_bytes):
        tone = sine(220.0, 0.25, 8000)

        decoded = decode_audio(wav_bytes(np.stack([tone, -tone]), 8000))

        assert decoded.channels.shape == (2, 2000)
        np.testing.assert_allclose(decoded.channels[0], -decoded.channels[1], atol=1e-4)

    def test_garbage_raises(self):
        with pytest.raises(DecodeFailure):
            decode_audio(b'\x00\x01 definitely not audio ' * 20)

    def test_empty_raises(self):
        with pytest.raises(DecodeFailure):
            decode_audio(b'')

    def test_decode_failure_is_mix_error(self):
        assert issubclass(DecodeFailure, PitchMixerError)


class TestBuffers:
    """Tests for mono folding and rate alignment."""

    def test_from_array_mono(self):
        audio = DecodedAudio.from_array(np.zeros(441), 44100)
        assert audio.channels.shape == (1, 441)
        assert audio.duration == pytest.approx(0.01)

    def test_to_mono_averages(self):
        channels = np.array([[1.0, 0.0, 0.5], [0.0, 1.0, 0.5], [0.5, 0.5, 0.5]], dtype=np.float32)
        np.testing.assert_allclose(to_mono(channels), [0.5, 0.5, 0.5])

    def test_to_mono_single_channel(self):
        channels = np.array([[0.1, 0.2]], dtype=np.float32)
        np.testing.assert_array_equal(to_mono(channels), np.array([0.1, 0.2], dtype=np.float32))

    def test_align_same_rate_noop(self):
        samples = np.ones(100, dtype=np.float32)
        assert align_sample_rate(samples, 8000, 8000) is samples

    def test_align_resamples(self, sine):
        samples = sine(200.0, 0.5, 16000)

        resampled = align_sample_rate(samples, 16000, 8000)

        assert len(resampled) == 4000
        assert resampled.dtype == np.float32
