"""
Failure taxonomy for a mix run.

Only these two conditions abort a transform. Everything else (silent
segments, a voice without usable pitch) is absorbed with defaults or skips.
"""


class PitchMixerError(Exception):
    """Base class for fatal mix errors."""


class DecodeFailure(PitchMixerError):
    """Input bytes could not be turned into samples."""


class NoMelodyDetected(PitchMixerError):
    """The reference signal produced no pitch observations."""

    def __init__(self, message: str = "No melody could be extracted from the reference audio. Try a track with a clearer melody."):
        super().__init__(message)
