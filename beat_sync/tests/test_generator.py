"""
Tests for sync point generation: element assignment, action pattern,
type inference and the tagged generation outcomes.

Run with: python -m pytest beat_sync/tests/test_generator.py -v
"""

import pytest

from beat_sync.audio_loader import AudioDecodeError
from beat_sync.timeline.generator import (
    SyncPointGenerator,
    action_for_beat,
    build_sync_points,
)
from beat_sync.timeline.models import (
    ElementRef,
    ElementType,
    GenerationOutcome,
    SyncAction,
    SyncPoint,
    infer_element_type,
)

BEATS_7 = [0.5 * i for i in range(7)]


class TestBuildSyncPoints:
    def test_round_robin_elements(self):
        points = build_sync_points(BEATS_7, ["a", "b", "c"], batch_id="t")
        assert [p.element_id for p in points] == ["a", "b", "c", "a", "b", "c", "a"]

    def test_action_pattern(self):
        points = build_sync_points([0.5 * i for i in range(8)], ["a"], batch_id="t")
        assert [p.action.value for p in points] == [
            "highlight", "pulse", "pulse", "pulse",
            "transform", "pulse", "pulse", "pulse",
        ]

    def test_action_pattern_second_bar_pair(self):
        assert action_for_beat(8) == SyncAction.HIGHLIGHT
        assert action_for_beat(12) == SyncAction.HIGHLIGHT
        assert action_for_beat(20) == SyncAction.TRANSFORM

    def test_intensity_and_duration(self):
        points = build_sync_points(BEATS_7, ["a"], batch_id="t")
        assert [p.params.intensity for p in points] == [1.0, 0.7, 0.7, 0.7, 1.0, 0.7, 0.7]
        assert all(p.params.duration == 0.3 for p in points)

    def test_timestamps_follow_beats(self):
        points = build_sync_points(BEATS_7, ["a", "b"], batch_id="t")
        assert [p.timestamp for p in points] == BEATS_7

    def test_ids_unique_within_batch(self):
        points = build_sync_points([0.1 * i for i in range(50)], ["a", "b"], batch_id="t")
        assert len({p.id for p in points}) == 50
        assert points[3].id == "sync_t_3"

    def test_default_batch_id(self):
        points = build_sync_points([0.0, 1.0], ["a"])
        assert points[0].id.startswith("sync_")
        assert points[0].id != points[1].id

    def test_no_elements(self):
        assert build_sync_points(BEATS_7, []) == []

    def test_no_beats(self):
        assert build_sync_points([], ["a"]) == []

    def test_fewer_beats_than_elements(self):
        points = build_sync_points([0.0, 0.5], ["a", "b", "c", "d"], batch_id="t")
        assert [p.element_id for p in points] == ["a", "b"]


class TestElementTypes:
    @pytest.mark.parametrize("element_id,expected", [
        ("text-heading", ElementType.TEXT),
        ("image-logo", ElementType.IMAGE),
        ("hero-img", ElementType.IMAGE),
        ("bg-main", ElementType.BACKGROUND),
        ("transition-1", ElementType.TRANSITION),
        ("sticker-3", ElementType.ANIMATION),
        # No 'bg' substring; needs an explicit type
        ("background-main", ElementType.ANIMATION),
    ])
    def test_inferred_from_id(self, element_id, expected):
        assert infer_element_type(element_id) == expected

    def test_text_checked_before_image(self):
        assert infer_element_type("text-over-image") == ElementType.TEXT

    def test_explicit_type_wins(self):
        ref = ElementRef(id="background-main", type=ElementType.BACKGROUND)
        points = build_sync_points([0.0], [ref], batch_id="t")
        assert points[0].element_type == ElementType.BACKGROUND

    def test_bare_ids_use_inference(self):
        points = build_sync_points([0.0, 0.5], ["text-a", "img-b"], batch_id="t")
        assert [p.element_type for p in points] == [ElementType.TEXT, ElementType.IMAGE]

    def test_unknown_type_string_falls_back_to_inference(self):
        ref = ElementRef.from_dict({"id": "text-title", "type": "sparkle"})
        assert ref.type is None
        assert ref.resolved_type == ElementType.TEXT


class TestSyncPointModel:
    def test_from_dict_to_dict(self):
        point = build_sync_points([1.25], ["bg-x"], batch_id="t")[0]
        restored = SyncPoint.from_dict(point.to_dict())
        assert restored == point
        assert point.to_dict()["element_type"] == "background"


class TestSyncPointGenerator:
    """Async generation with injected loaders."""

    pytestmark = pytest.mark.asyncio

    async def test_success(self, every_other_window_audio):
        generator = SyncPointGenerator(loader=lambda url: every_other_window_audio)
        result = await generator.generate({"url": "x.wav"}, ["a", "b", "c"])
        assert result.outcome == GenerationOutcome.SUCCESS
        assert len(result.points) == 8
        assert len(result.beats) == 8
        assert result.tempo == 86
        assert [p.element_id for p in result.points[:4]] == ["a", "b", "c", "a"]

    async def test_invalid_sound_short_circuits(self):
        calls = []
        generator = SyncPointGenerator(loader=lambda url: calls.append(url))
        result = await generator.generate({"title": "no url"}, ["a"])
        assert result.outcome == GenerationOutcome.ERROR
        assert "invalid sound source" in result.error
        assert calls == []

    async def test_decode_failure(self):
        def failing_loader(url):
            raise AudioDecodeError(f"Failed to decode audio file {url!r}: corrupt")

        generator = SyncPointGenerator(loader=failing_loader)
        result = await generator.generate({"url": "bad.wav"}, ["a"])
        assert result.outcome == GenerationOutcome.ERROR
        assert not result.ok
        assert result.points == []

    async def test_silence_is_empty_not_error(self, silent_audio):
        generator = SyncPointGenerator(loader=lambda url: silent_audio)
        result = await generator.generate({"url": "quiet.wav"}, ["a"])
        assert result.outcome == GenerationOutcome.EMPTY
        assert result.ok
        assert result.points == []

    async def test_no_elements_is_empty(self, every_other_window_audio):
        calls = []

        def loader(url):
            calls.append(url)
            return every_other_window_audio

        generator = SyncPointGenerator(loader=loader)
        result = await generator.generate({"url": "x.wav"}, [])
        assert result.outcome == GenerationOutcome.EMPTY
        assert calls == []

    async def test_deterministic(self, every_other_window_audio):
        generator = SyncPointGenerator(loader=lambda url: every_other_window_audio)
        first = await generator.generate({"url": "x.wav"}, ["a", "b", "c"])
        second = await generator.generate({"url": "x.wav"}, ["a", "b", "c"])

        def signature(result):
            return [(p.element_id, p.action, p.params.intensity) for p in result.points]

        assert len(first.points) == len(second.points)
        assert signature(first) == signature(second)


class TestGenerateFromAudio:
    def test_batch_id_applied(self, every_other_window_audio):
        result = SyncPointGenerator().generate_from_audio(
            every_other_window_audio, ["a"], batch_id="abc"
        )
        assert result.points[0].id == "sync_abc_0"

    def test_result_json(self, every_other_window_audio):
        result = SyncPointGenerator().generate_from_audio(every_other_window_audio, ["a"])
        assert '"outcome": "success"' in result.to_json()
