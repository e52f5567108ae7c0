"""
Audio loading boundary.

This is the only module in the engine that touches files. Everything
downstream takes a DecodedAudio (or plain sample arrays), never paths.

Usage:
    from beat_sync.audio_loader import decode_sound
    audio = decode_sound({"url": "/path/to/track.wav"})
    mono = audio.mono()
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union
from urllib.parse import unquote, urlparse

import numpy as np
import soundfile as sf

logger = logging.getLogger(__name__)

# Primary field first, then fallbacks used by platform-specific sound records
URL_FIELDS = ("url", "play_url", "playUrl")


class SoundSourceError(Exception):
    """Base class for failures resolving or decoding a sound."""


class InvalidSoundSourceError(SoundSourceError):
    """The sound reference carries no usable URL."""


class AudioDecodeError(SoundSourceError):
    """The audio could not be read or decoded."""


@dataclass(frozen=True, eq=False)
class DecodedAudio:
    """Decoded PCM audio. Samples are float32, shape (frames, channels)."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        if self.samples.ndim != 2:
            raise ValueError(f"Expected (frames, channels) samples, got shape {self.samples.shape}")
        self.samples.setflags(write=False)

    @classmethod
    def from_mono(cls, samples: np.ndarray, sample_rate: int) -> "DecodedAudio":
        data = np.array(samples, dtype=np.float32).reshape(-1, 1)
        return cls(samples=data, sample_rate=int(sample_rate))

    @property
    def channels(self) -> int:
        return self.samples.shape[1]

    @property
    def frames(self) -> int:
        return self.samples.shape[0]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frames / self.sample_rate if self.sample_rate else 0.0

    def mono(self) -> np.ndarray:
        """Downmix to mono by averaging channels."""
        if self.channels == 1:
            return self.samples[:, 0]
        return self.samples.mean(axis=1).astype(np.float32)


def resolve_sound_url(sound: Any) -> str:
    """
    Get the playable URL from a sound reference.

    Accepts a plain string, a mapping, or any object with one of the
    URL_FIELDS attributes.

    Raises:
        InvalidSoundSourceError: No URL field holds a non-empty string.
    """
    if isinstance(sound, (str, Path)):
        if str(sound):
            return str(sound)
        raise InvalidSoundSourceError("invalid sound source: empty reference")

    if sound is None:
        raise InvalidSoundSourceError("invalid sound source: no sound selected")

    for name in URL_FIELDS:
        if isinstance(sound, dict):
            value = sound.get(name)
        else:
            value = getattr(sound, name, None)
        if isinstance(value, str) and value:
            return value

    raise InvalidSoundSourceError(
        f"invalid sound source: none of {', '.join(URL_FIELDS)} is set"
    )


def _url_to_path(url: str) -> Path:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Windows drive letters parse as a one-character scheme
    if parsed.scheme and len(parsed.scheme) > 1:
        raise AudioDecodeError(f"Unsupported audio location scheme {parsed.scheme!r}: {url}")
    return Path(url)


def load_audio(location: Union[str, Path]) -> DecodedAudio:
    """
    Decode an audio file.

    Args:
        location: Filesystem path or file:// URL

    Returns:
        DecodedAudio with float32 samples

    Raises:
        AudioDecodeError: Missing file, unsupported scheme, or undecodable data
    """
    path = _url_to_path(str(location))

    if not path.exists():
        raise AudioDecodeError(f"Audio file not found: {path}")

    try:
        data, sample_rate = sf.read(str(path), dtype="float32", always_2d=True)
    except Exception as exc:
        raise AudioDecodeError(f"Failed to decode audio file {path.name!r}: {exc}") from exc

    audio = DecodedAudio(samples=data, sample_rate=int(sample_rate))
    logger.info(
        f"Decoded {path.name}: {audio.duration:.2f}s, {audio.sample_rate}Hz, "
        f"{audio.channels}ch"
    )
    return audio


def decode_sound(sound: Any) -> DecodedAudio:
    """Resolve a sound reference and decode it."""
    return load_audio(resolve_sound_url(sound))
