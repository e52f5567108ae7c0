"""
Tempo estimation from detected beats.
"""

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_BPM = 120
MIN_BPM = 60
MAX_BPM = 200  # Exclusive
MIN_BEATS = 4


def estimate_tempo(beats: Sequence[float]) -> int:
    """
    Estimate tempo from a beat list.

    Uses the median inter-beat interval, which shrugs off the odd missed or
    spurious beat, then folds octave errors back into the 60-200 BPM range.

    Args:
        beats: Ascending beat timestamps in seconds

    Returns:
        Integer BPM in [60, 200). 120 when there are fewer than 4 beats.
    """
    if len(beats) < MIN_BEATS:
        return DEFAULT_BPM

    intervals = np.diff(np.asarray(beats, dtype=np.float64))
    intervals = intervals[intervals > 0]
    if len(intervals) == 0:
        return DEFAULT_BPM

    tempo = 60.0 / float(np.median(intervals))

    # Octave correction
    while tempo < MIN_BPM:
        tempo *= 2
    while tempo >= MAX_BPM:
        tempo /= 2

    bpm = min(int(round(tempo)), MAX_BPM - 1)
    logger.debug(f"Tempo estimate: {bpm} BPM from {len(intervals)} intervals")
    return bpm
