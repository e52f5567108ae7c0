"""
Sync point generation.
Turns a beat list into a timeline of element animations.
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Union

from ..audio_loader import (
    AudioDecodeError,
    DecodedAudio,
    InvalidSoundSourceError,
    load_audio,
    resolve_sound_url,
)
from ..beat_detector import BeatDetector
from ..config import DetectionConfig
from ..tempo import estimate_tempo
from .models import (
    ElementRef,
    GenerationResult,
    SyncAction,
    SyncParams,
    SyncPoint,
)

logger = logging.getLogger('sync_generator')

DOWNBEAT_INTENSITY = 1.0
BEAT_INTENSITY = 0.7
DEFAULT_DURATION = 0.3  # seconds

ElementInput = Union[str, ElementRef]


def action_for_beat(index: int) -> SyncAction:
    """Fixed bar pattern: highlight the downbeat, transform mid-bar every other bar."""
    if index % 4 == 0:
        return SyncAction.HIGHLIGHT
    if index % 8 == 4:
        return SyncAction.TRANSFORM
    return SyncAction.PULSE


def _as_ref(element: ElementInput) -> ElementRef:
    return element if isinstance(element, ElementRef) else ElementRef(id=element)


def build_sync_points(
    beats: Sequence[float],
    elements: Sequence[ElementInput],
    batch_id: Optional[str] = None,
) -> List[SyncPoint]:
    """
    Map beats onto elements round-robin.

    Args:
        beats: Ascending beat timestamps
        elements: Ordered element ids or ElementRefs
        batch_id: Prefix making ids unique across batches. Defaults to the
                  current time in ms.

    Returns:
        One SyncPoint per beat, in beat order
    """
    if not elements:
        return []

    refs = [_as_ref(e) for e in elements]
    batch_id = batch_id or str(int(time.time() * 1000))

    points = []
    for index, beat_time in enumerate(beats):
        ref = refs[index % len(refs)]
        points.append(SyncPoint(
            id=f"sync_{batch_id}_{index}",
            timestamp=float(beat_time),
            element_id=ref.id,
            element_type=ref.resolved_type,
            action=action_for_beat(index),
            params=SyncParams(
                intensity=DOWNBEAT_INTENSITY if index % 4 == 0 else BEAT_INTENSITY,
                duration=DEFAULT_DURATION,
            ),
        ))
    return points


class SyncPointGenerator:
    """
    Decodes a sound, detects beats and builds sync points.

    generate() never raises for bad input: every outcome comes back as a
    GenerationResult tagged success, empty or error.
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        loader: Callable[[str], DecodedAudio] = load_audio,
    ):
        self.detector = BeatDetector(config)
        self._loader = loader

    def generate_from_audio(
        self,
        audio: DecodedAudio,
        elements: Sequence[ElementInput],
        batch_id: Optional[str] = None,
    ) -> GenerationResult:
        """Build sync points from already-decoded audio."""
        if not elements:
            return GenerationResult.empty()

        beats = self.detector.detect(audio.mono(), audio.sample_rate)
        tempo = estimate_tempo(beats)
        if not beats:
            logger.info("No beats detected, nothing to sync")
            return GenerationResult.empty(beats, tempo)

        points = build_sync_points(beats, elements, batch_id)
        logger.info(f"Generated {len(points)} sync points across {len(elements)} elements "
                    f"at {tempo} BPM")
        return GenerationResult.success(points, beats, tempo)

    async def generate(
        self,
        sound: Any,
        elements: Sequence[ElementInput],
        batch_id: Optional[str] = None,
    ) -> GenerationResult:
        """
        Generate sync points for a sound.

        Args:
            sound: Sound reference (mapping/object with url or play_url, or a path)
            elements: Ordered element ids or ElementRefs (registry snapshot)
            batch_id: Optional id prefix

        Returns:
            GenerationResult
        """
        try:
            url = resolve_sound_url(sound)
        except InvalidSoundSourceError as e:
            logger.warning(f"Sync generation skipped: {e}")
            return GenerationResult.failure(str(e))

        if not elements:
            return GenerationResult.empty()

        try:
            # Decoding blocks; keep it off the event loop
            audio = await asyncio.to_thread(self._loader, url)
        except AudioDecodeError as e:
            logger.error(f"Sync generation failed: {e}")
            return GenerationResult.failure(str(e))

        return self.generate_from_audio(audio, elements, batch_id)
