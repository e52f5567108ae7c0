"""Shared fixtures: synthetic signals and fake collaborators."""

import numpy as np
import pytest

from beat_sync.audio_loader import DecodedAudio

SAMPLE_RATE = 8000
WINDOW_SECONDS = 0.35


def pulse_track(
    pulse_windows,
    total_windows: int,
    sample_rate: int = SAMPLE_RATE,
    freq: float = 60.0,
    amplitude: float = 0.9,
) -> np.ndarray:
    """
    Bass tone bursts aligned to the default detection grid.

    Each window index in pulse_windows holds a full-window sine burst;
    everything else is silence.
    """
    window = int(WINDOW_SECONDS * sample_rate)
    signal = np.zeros(window * total_windows, dtype=np.float32)
    t = np.arange(window) / sample_rate
    burst = (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
    for index in pulse_windows:
        signal[index * window:(index + 1) * window] = burst
    return signal


@pytest.fixture
def sample_rate():
    return SAMPLE_RATE


@pytest.fixture
def make_pulse_track():
    """Factory for pulse tracks (see pulse_track)."""
    return pulse_track


@pytest.fixture
def every_other_window_audio():
    """Bursts on every other window: 8 beats, 0.7s apart."""
    return DecodedAudio.from_mono(pulse_track(range(0, 16, 2), 16), SAMPLE_RATE)


@pytest.fixture
def silent_audio():
    return DecodedAudio.from_mono(np.zeros(SAMPLE_RATE * 3, dtype=np.float32), SAMPLE_RATE)


class FakeTime:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_time():
    return FakeTime()


class AnimationRecorder:
    """Stand-in for the host's apply-animation function."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    @property
    def element_ids(self):
        return [call[-2] for call in self.calls]


@pytest.fixture
def recorder():
    return AnimationRecorder()
