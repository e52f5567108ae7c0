"""
Tests for configuration presets, persistence and environment overrides.
"""

from beat_sync.config import (
    DetectionConfig,
    SchedulerConfig,
    SyncConfig,
    get_preset,
    list_presets,
    load_config,
    save_config,
)


class TestPresets:
    def test_default_matches_detector_defaults(self):
        assert get_preset("default") == DetectionConfig()

    def test_unknown_falls_back_to_default(self):
        assert get_preset("nonexistent") == DetectionConfig()

    def test_case_insensitive(self):
        assert get_preset("SPARSE") == get_preset("sparse")

    def test_list(self):
        assert set(list_presets()) == {"default", "sensitive", "sparse"}


class TestSyncConfig:
    def test_save_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = SyncConfig(
            detection=get_preset("sensitive"),
            scheduler=SchedulerConfig(cooldown=0.25, auto_sync=True),
            descriptor_seed=11,
        )
        save_config(config, path)

        loaded = load_config(path)
        assert loaded.detection == config.detection
        assert loaded.scheduler.cooldown == 0.25
        assert loaded.scheduler.auto_sync is True
        assert loaded.descriptor_seed == 11

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.json")
        assert config.detection == DetectionConfig()
        assert config.scheduler == SchedulerConfig()

    def test_unknown_keys_ignored(self):
        config = DetectionConfig.from_dict({"min_threshold": 0.2, "legacy_field": 1})
        assert config.min_threshold == 0.2

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BEATSYNC_PRESET", "sparse")
        monkeypatch.setenv("BEATSYNC_MIN_THRESHOLD", "0.3")
        monkeypatch.setenv("BEATSYNC_COOLDOWN", "1.0")
        monkeypatch.setenv("BEATSYNC_AUTO_SYNC", "true")
        monkeypatch.setenv("BEATSYNC_DESCRIPTOR_SEED", "5")

        config = SyncConfig.from_env()

        assert config.detection.min_threshold == 0.3
        assert config.detection.window_seconds == get_preset("sparse").window_seconds
        assert config.scheduler.cooldown == 1.0
        assert config.scheduler.auto_sync is True
        assert config.descriptor_seed == 5

    def test_from_env_defaults(self, monkeypatch):
        for name in ("BEATSYNC_PRESET", "BEATSYNC_MIN_THRESHOLD", "BEATSYNC_WINDOW_SECONDS",
                     "BEATSYNC_LOW_PASS_HZ", "BEATSYNC_AUTO_SYNC", "BEATSYNC_DESCRIPTOR_SEED",
                     "BEATSYNC_TOLERANCE"):
            monkeypatch.delenv(name, raising=False)
        config = SyncConfig.from_env()
        assert config.detection == DetectionConfig()
        assert config.scheduler.tolerance_window == 0.05
        assert config.descriptor_seed is None
