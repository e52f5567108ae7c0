"""
Signal filtering for beat detection.
Isolates the bass range of a waveform, where kick drums and other
rhythmic onsets carry most of their energy.
"""

import logging
from typing import Tuple

import numpy as np
from scipy.signal import lfilter

logger = logging.getLogger(__name__)


def lowpass_coefficients(
    sample_rate: int, cutoff_hz: float, q: float = 1.0
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute second-order lowpass coefficients (RBJ audio EQ cookbook).

    Args:
        sample_rate: Audio sample rate in Hz
        cutoff_hz: Corner frequency in Hz
        q: Resonance. 1.0 gives a slight bump at the corner.

    Returns:
        (b, a) normalized so that a[0] == 1, ready for scipy.signal.lfilter
    """
    w0 = 2.0 * np.pi * cutoff_hz / sample_rate
    cos_w0 = np.cos(w0)
    alpha = np.sin(w0) / (2.0 * q)

    b = np.array([(1.0 - cos_w0) / 2.0, 1.0 - cos_w0, (1.0 - cos_w0) / 2.0], dtype=np.float64)
    a = np.array([1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha], dtype=np.float64)

    return b / a[0], a / a[0]


def low_pass(
    samples: np.ndarray, sample_rate: int, cutoff_hz: float = 150.0, q: float = 1.0
) -> np.ndarray:
    """
    Run a mono signal through a biquad lowpass.

    Args:
        samples: Mono audio samples
        sample_rate: Audio sample rate in Hz
        cutoff_hz: Lowpass cutoff frequency
        q: Filter resonance

    Returns:
        Filtered float32 samples, same length as the input
    """
    mono = np.asarray(samples, dtype=np.float64)
    if mono.size == 0:
        return np.zeros(0, dtype=np.float32)

    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got: {sample_rate}")

    nyquist = sample_rate / 2.0
    if cutoff_hz <= 0 or cutoff_hz >= nyquist:
        # Nothing to attenuate within the representable band
        logger.debug(f"Cutoff {cutoff_hz}Hz outside (0, {nyquist}Hz), passing signal through")
        return mono.astype(np.float32)

    b, a = lowpass_coefficients(sample_rate, cutoff_hz, q)
    return lfilter(b, a, mono).astype(np.float32)
