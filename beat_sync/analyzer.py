"""
Track analysis: decode, beats, tempo and descriptors in one pass.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np

from .audio_loader import DecodedAudio, decode_sound
from .beat_detector import BeatDetector
from .config import DetectionConfig
from .descriptors import AudioDescriptors, analyze_descriptors
from .tempo import estimate_tempo

logger = logging.getLogger(__name__)


@dataclass
class TrackAnalysis:
    """Everything the engine derives from one track."""

    duration: float
    beats: List[float] = field(default_factory=list)
    tempo: int = 120
    descriptors: Optional[AudioDescriptors] = None

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "beat_count": len(self.beats),
            "beats": list(self.beats),
            "tempo": self.tempo,
            "descriptors": self.descriptors.to_dict() if self.descriptors else None,
        }


def analyze_audio(
    audio: DecodedAudio,
    config: Optional[DetectionConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> TrackAnalysis:
    """Analyze already-decoded audio."""
    mono = audio.mono()
    beats = BeatDetector(config).detect(mono, audio.sample_rate)
    tempo = estimate_tempo(beats)
    descriptors = analyze_descriptors(mono, beats, tempo, rng=rng)

    logger.info(f"Analysis: {len(beats)} beats, {tempo} BPM over {audio.duration:.1f}s")
    return TrackAnalysis(
        duration=audio.duration, beats=beats, tempo=tempo, descriptors=descriptors
    )


def analyze_track(
    sound: Any,
    config: Optional[DetectionConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> TrackAnalysis:
    """
    Decode a sound reference and analyze it.

    Raises:
        SoundSourceError: The sound could not be resolved or decoded
    """
    return analyze_audio(decode_sound(sound), config, rng)
