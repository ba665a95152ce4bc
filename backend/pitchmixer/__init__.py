"""
PitchMixer - loops a voice sample over a track, following its melody.
"""

__version__ = "1.0.0"
