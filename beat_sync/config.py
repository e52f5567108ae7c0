"""
Beat Sync Configuration - Centralized configuration management.

Provides:
- Beat detection presets for different kinds of material
- Type-safe configuration dataclasses
- Loading/saving from JSON/environment
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class DetectionConfig:
    """Beat detection configuration."""

    # Energy floor below which nothing counts as a beat
    min_threshold: float = 0.15

    # Analysis window (seconds)
    window_seconds: float = 0.35

    # Bass isolation
    low_pass_hz: float = 150.0

    # Adaptive threshold
    history_size: int = 20  # Windows in the rolling average
    threshold_ratio: float = 1.3  # Multiplier over rolling average
    release_ratio: float = 0.8  # Fraction of threshold that closes a peak

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "DetectionConfig":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class SchedulerConfig:
    """Playback-time trigger configuration."""

    tolerance_window: float = 0.05  # Seconds either side of a sync point
    cooldown: float = 0.5  # Seconds before a fired point can fire again
    intensity: float = 1.0  # Global intensity multiplier
    auto_sync: bool = False  # Generate sync points once audio and elements are ready

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SchedulerConfig":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


# Pre-tuned detection presets
PRESETS: Dict[str, DetectionConfig] = {
    "default": DetectionConfig(),
    "sensitive": DetectionConfig(
        min_threshold=0.08,  # Quieter masters still register
        window_seconds=0.25,  # Finer grid for fast material
        low_pass_hz=180.0,
        threshold_ratio=1.2,
    ),
    "sparse": DetectionConfig(
        min_threshold=0.25,
        window_seconds=0.5,  # Coarse grid, roughly one beat per half second
        low_pass_hz=120.0,  # Kick fundamentals only
        threshold_ratio=1.5,
    ),
}


def get_preset(name: str) -> DetectionConfig:
    """Get a preset by name, returns 'default' if not found."""
    return PRESETS.get(name.lower(), PRESETS["default"])


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


@dataclass
class SyncConfig:
    """Complete engine configuration."""

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    # Seed for the heuristic descriptors (None = nondeterministic)
    descriptor_seed: Optional[int] = None

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        data = {
            "detection": self.detection.to_dict(),
            "scheduler": self.scheduler.to_dict(),
            "descriptor_seed": self.descriptor_seed,
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "SyncConfig":
        """Load configuration from JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        config = cls()

        if "detection" in data:
            config.detection = DetectionConfig.from_dict(data["detection"])

        if "scheduler" in data:
            config.scheduler = SchedulerConfig.from_dict(data["scheduler"])

        config.descriptor_seed = data.get("descriptor_seed")

        return config

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Load configuration from environment variables."""
        preset = get_preset(os.environ.get("BEATSYNC_PRESET", "default"))
        seed = os.environ.get("BEATSYNC_DESCRIPTOR_SEED")
        return cls(
            detection=DetectionConfig(
                min_threshold=float(os.environ.get("BEATSYNC_MIN_THRESHOLD", preset.min_threshold)),
                window_seconds=float(
                    os.environ.get("BEATSYNC_WINDOW_SECONDS", preset.window_seconds)
                ),
                low_pass_hz=float(os.environ.get("BEATSYNC_LOW_PASS_HZ", preset.low_pass_hz)),
                history_size=preset.history_size,
                threshold_ratio=preset.threshold_ratio,
                release_ratio=preset.release_ratio,
            ),
            scheduler=SchedulerConfig(
                tolerance_window=float(os.environ.get("BEATSYNC_TOLERANCE", "0.05")),
                cooldown=float(os.environ.get("BEATSYNC_COOLDOWN", "0.5")),
                intensity=float(os.environ.get("BEATSYNC_INTENSITY", "1.0")),
                auto_sync=os.environ.get("BEATSYNC_AUTO_SYNC", "0").lower() in ("1", "true", "yes"),
            ),
            descriptor_seed=int(seed) if seed else None,
        )


# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "beatsync" / "config.json"


def load_config(path: Optional[Path] = None) -> SyncConfig:
    """Load configuration from file or return defaults."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    return SyncConfig.load(path)


def save_config(config: SyncConfig, path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    config.save(path)
