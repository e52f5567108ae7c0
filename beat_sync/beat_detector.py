"""
Offline beat detection over a decoded waveform.

Windowed bass energy is compared against a rolling average of recent
windows. Hysteresis keeps one sustained transient from being reported as
several beats: a peak opens when energy crosses the threshold and only
closes once energy drops well below it.
"""

import logging
from collections import deque
from typing import List, Optional, Sequence

import numpy as np

from .config import DetectionConfig
from .signal_filter import low_pass

logger = logging.getLogger(__name__)


class BeatDetector:
    """
    Energy-based beat detector with an adaptive threshold.

    Usage:
        detector = BeatDetector()
        beats = detector.detect(samples, sample_rate)
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def window_energies(self, filtered: np.ndarray, sample_rate: int) -> np.ndarray:
        """
        Mean squared amplitude per non-overlapping window.

        The trailing partial window is kept; it is averaged over its own length.
        """
        window = int(self.config.window_seconds * sample_rate)
        if window <= 0:
            raise ValueError(f"Window of {self.config.window_seconds}s is empty at {sample_rate}Hz")

        squared = np.square(filtered.astype(np.float64))
        starts = np.arange(0, len(squared), window)
        sums = np.add.reduceat(squared, starts)
        lengths = np.minimum(window, len(squared) - starts)
        return sums / lengths

    def detect(self, samples: np.ndarray, sample_rate: int) -> List[float]:
        """
        Detect beats in a mono signal.

        Args:
            samples: Mono audio samples (-1 to 1)
            sample_rate: Audio sample rate in Hz

        Returns:
            Ascending beat timestamps in seconds. Empty for silence or audio
            shorter than one window.
        """
        cfg = self.config
        window = int(cfg.window_seconds * sample_rate)
        if len(samples) < max(window, 1):
            logger.debug(f"Audio shorter than one {cfg.window_seconds}s window, no beats")
            return []

        filtered = low_pass(samples, sample_rate, cfg.low_pass_hz)
        energies = self.window_energies(filtered, sample_rate)

        beats = self.pick_beats(energies, window / sample_rate)
        logger.debug(f"Detected {len(beats)} beats over {len(energies)} windows")
        return beats

    def pick_beats(self, energies: Sequence[float], window_duration: float) -> List[float]:
        """
        Hysteresis peak picking over window energies.

        Args:
            energies: Energy per window, in time order
            window_duration: Seconds per window

        Returns:
            Start time of each window that opens a peak
        """
        cfg = self.config
        beats: List[float] = []
        history: deque = deque(maxlen=cfg.history_size)
        is_peak = False

        for index, energy in enumerate(energies):
            average = sum(history) / len(history) if history else 0.0
            threshold = max(cfg.min_threshold, average * cfg.threshold_ratio)

            if energy > threshold and not is_peak:
                is_peak = True
                beats.append(index * window_duration)
            elif energy < threshold * cfg.release_ratio:
                is_peak = False

            history.append(float(energy))

        return beats


def detect_beats(
    samples: np.ndarray, sample_rate: int, config: Optional[DetectionConfig] = None
) -> List[float]:
    """Convenience wrapper around BeatDetector.detect()."""
    return BeatDetector(config).detect(samples, sample_rate)
