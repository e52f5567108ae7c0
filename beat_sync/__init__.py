"""
Beat Sync
Beat detection and beat-synced animation scheduling.
"""

from .analyzer import TrackAnalysis, analyze_audio, analyze_track
from .audio_loader import (
    AudioDecodeError,
    DecodedAudio,
    InvalidSoundSourceError,
    SoundSourceError,
)
from .beat_detector import BeatDetector, detect_beats
from .descriptors import AudioDescriptors, analyze_descriptors
from .tempo import estimate_tempo

__all__ = [
    'TrackAnalysis',
    'analyze_audio',
    'analyze_track',
    'AudioDecodeError',
    'DecodedAudio',
    'InvalidSoundSourceError',
    'SoundSourceError',
    'BeatDetector',
    'detect_beats',
    'AudioDescriptors',
    'analyze_descriptors',
    'estimate_tempo',
]
