"""
Perceptual descriptors for a track.

Energy, valence and danceability are derived from the signal, the beat list
and the tempo estimate. Acousticness, instrumentalness and liveness are NOT:
there is no spectral or vocal analysis behind them. They are energy-scaled
random draws kept as low-confidence placeholders and are listed in
AudioDescriptors.heuristic_fields so callers can treat them accordingly.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from .tempo import MAX_BPM, MIN_BPM

logger = logging.getLogger(__name__)

# Mean-square amplitude is tiny for real material; scale before clamping
ENERGY_SCALE = 100.0

IDEAL_DANCE_BPM = 115.0

HEURISTIC_FIELDS: Tuple[str, ...] = ("acousticness", "instrumentalness", "liveness")


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return float(min(high, max(low, value)))


@dataclass
class AudioDescriptors:
    """Heuristic scalar summary of a track (all values 0-1 except tempo)."""

    tempo: int
    energy: float
    valence: float
    danceability: float

    # Low-confidence placeholders, see module docstring
    acousticness: float
    instrumentalness: float
    liveness: float

    heuristic_fields: Tuple[str, ...] = field(default=HEURISTIC_FIELDS)

    def is_heuristic(self, name: str) -> bool:
        """True when the named descriptor is a placeholder rather than a measurement."""
        return name in self.heuristic_fields

    def to_dict(self) -> dict:
        data = asdict(self)
        data["heuristic_fields"] = list(self.heuristic_fields)
        return data


def signal_energy(samples: np.ndarray) -> float:
    """Normalized mean-squared amplitude, clamped to 0-1."""
    if len(samples) == 0:
        return 0.0
    mean_square = float(np.mean(np.square(samples.astype(np.float64))))
    return _clamp(mean_square * ENERGY_SCALE)


def valence(energy: float, tempo: float) -> float:
    """Fast, energetic music reads as more positive."""
    tempo_factor = (tempo - MIN_BPM) / (MAX_BPM - MIN_BPM)
    return _clamp(0.5 + 0.3 * energy + 0.2 * tempo_factor)


def rhythm_regularity(beats: Sequence[float]) -> float:
    """1 - coefficient of variation of beat intervals; 0.5 with too few beats."""
    if len(beats) < 4:
        return 0.5

    intervals = np.diff(np.asarray(beats, dtype=np.float64))
    mean = float(np.mean(intervals))
    if mean <= 0:
        return 0.5
    return _clamp(1.0 - float(np.std(intervals)) / mean)


def danceability(beats: Sequence[float], tempo: float, energy: float) -> float:
    tempo_factor = 1.0 - abs((tempo - IDEAL_DANCE_BPM) / IDEAL_DANCE_BPM)
    return _clamp(0.3 * rhythm_regularity(beats) + 0.4 * energy + 0.3 * tempo_factor)


def analyze_descriptors(
    samples: np.ndarray,
    beats: Sequence[float],
    tempo: int,
    rng: Optional[np.random.Generator] = None,
) -> AudioDescriptors:
    """
    Compute descriptors for a mono signal.

    Args:
        samples: Mono audio samples
        beats: Beat timestamps from the BeatDetector
        tempo: Tempo estimate in BPM
        rng: Random source for the placeholder descriptors. Pass a seeded
             generator for reproducible output.

    Returns:
        AudioDescriptors
    """
    rng = rng if rng is not None else np.random.default_rng()

    energy = signal_energy(samples)

    descriptors = AudioDescriptors(
        tempo=int(tempo),
        energy=energy,
        valence=valence(energy, tempo),
        danceability=danceability(beats, tempo, energy),
        acousticness=float(rng.random()) * (1.0 - energy * 0.5),
        instrumentalness=float(rng.random()),
        liveness=float(rng.random()) * energy,
    )

    logger.debug(
        f"Descriptors: energy={descriptors.energy:.2f}, valence={descriptors.valence:.2f}, "
        f"danceability={descriptors.danceability:.2f}"
    )
    return descriptors
