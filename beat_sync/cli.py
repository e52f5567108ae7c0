"""
Beat Sync CLI - Command-line interface for beat analysis and sync generation.

Entry point:
    beatsync analyze FILE              - Tempo, beats and descriptors
    beatsync sync FILE -e ID [-e ID]   - Generate sync points as JSON
    beatsync simulate FILE -e ID       - Play sync points against a simulated clock
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import numpy as np

from .analyzer import analyze_track
from .audio_loader import SoundSourceError
from .config import DetectionConfig, get_preset, list_presets, load_config
from .logging_config import configure_logging
from .timeline import (
    ElementRegistry,
    GenerationOutcome,
    PlaybackClock,
    SyncPointGenerator,
    SyncScheduler,
)

logger = logging.getLogger(__name__)


def validate_positive_float(value: str) -> float:
    """Validate positive float."""
    try:
        num = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}")

    if num <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got: {num}")
    return num


def _detection_config(args) -> DetectionConfig:
    if args.preset:
        return get_preset(args.preset)
    return load_config(Path(args.config) if args.config else None).detection


def cmd_analyze(args) -> int:
    seed = args.seed
    if seed is None:
        seed = load_config(Path(args.config) if args.config else None).descriptor_seed
    rng = np.random.default_rng(seed)
    try:
        analysis = analyze_track(args.file, _detection_config(args), rng=rng)
    except SoundSourceError as e:
        logger.error(str(e))
        return 1

    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2))
        return 0

    d = analysis.descriptors
    print(f"Duration:      {analysis.duration:.2f}s")
    print(f"Beats:         {len(analysis.beats)}")
    print(f"Tempo:         {analysis.tempo} BPM")
    print(f"Energy:        {d.energy:.2f}")
    print(f"Valence:       {d.valence:.2f}")
    print(f"Danceability:  {d.danceability:.2f}")
    print("Heuristic (low confidence):")
    for name in d.heuristic_fields:
        print(f"  {name + ':':<18}{getattr(d, name):.2f}")
    return 0


def cmd_sync(args) -> int:
    generator = SyncPointGenerator(_detection_config(args))
    result = asyncio.run(generator.generate(args.file, args.element))
    print(result.to_json())
    return 1 if result.outcome == GenerationOutcome.ERROR else 0


def cmd_simulate(args) -> int:
    registry = ElementRegistry.from_elements(args.element)
    clock = PlaybackClock(is_playing=True, current_time=0.0)

    def apply_animation(section_id, element_id, update):
        anim = update["animation"]
        print(f"{clock.current_time:8.3f}s  {element_id:<20} {anim.type:<8} "
              f"{json.dumps(anim.custom_params)}")

    scheduler = SyncScheduler(
        registry=registry,
        apply_animation=apply_animation,
        config=load_config(Path(args.config) if args.config else None).scheduler,
        generator=SyncPointGenerator(_detection_config(args)),
        time_fn=lambda: clock.current_time,
    )
    scheduler.set_sound(args.file)
    result = asyncio.run(scheduler.generate())

    if result is None or result.outcome == GenerationOutcome.ERROR:
        logger.error(scheduler.error or "Generation did not run")
        return 1

    if not scheduler.has_sync_points:
        print("No beats detected")
        return 0

    end = scheduler.sync_points[-1].timestamp + 1.0
    frame = 1.0 / args.fps
    while clock.current_time <= end:
        scheduler.tick(clock)
        clock.current_time += frame

    scheduler.close()
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="beatsync",
        description="Beat Sync - Beat detection and beat-synced animation timelines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  beatsync analyze track.wav
  beatsync analyze track.wav --json --seed 7
  beatsync sync track.wav -e text-heading -e image-logo -e bg-main
  beatsync simulate track.wav -e text-heading -e image-logo --preset sensitive
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", help="Path to config JSON")
    parser.add_argument("--preset", choices=list_presets(), help="Detection preset")

    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze tempo, beats and descriptors")
    analyze.add_argument("file", help="Audio file path or file:// URL")
    analyze.add_argument("--json", action="store_true", help="Print JSON")
    analyze.add_argument("--seed", type=int, help="Seed for heuristic descriptors")
    analyze.set_defaults(func=cmd_analyze)

    sync = sub.add_parser("sync", help="Generate sync points")
    sync.add_argument("file", help="Audio file path or file:// URL")
    sync.add_argument("-e", "--element", action="append", default=[], help="Element id (repeatable)")
    sync.set_defaults(func=cmd_sync)

    simulate = sub.add_parser("simulate", help="Fire sync points against a simulated clock")
    simulate.add_argument("file", help="Audio file path or file:// URL")
    simulate.add_argument("-e", "--element", action="append", required=True,
                          help="Element id (repeatable)")
    simulate.add_argument("--fps", type=validate_positive_float, default=60.0,
                          help="Simulated tick rate (default: 60)")
    simulate.set_defaults(func=cmd_simulate)

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
