"""Tests for GameConfig defaults and environment overrides."""
import pytest
from pydantic import ValidationError


class TestGameConfig:
    def test_defaults(self):
        from road_sprint.config import GameConfig, TrackerMode, DAY_MS
        c = GameConfig()
        assert c.zoom == 18
        assert c.mode is TrackerMode.INTERSECTIONS
        assert c.cache_prefix == "osm_vector_tile"
        assert c.cache_ttl_ms == 30 * DAY_MS
        assert c.target_radius_m == 35.0
        assert c.intersection_points == 10
        assert c.respawn_delay_ms == 1200
        assert c.travel_noise_floor_m == 0.4

    def test_distance_range_must_be_ordered(self):
        from road_sprint.config import GameConfig
        with pytest.raises(ValidationError):
            GameConfig(target_min_distance_m=500.0, target_max_distance_m=100.0)

    def test_default_cache_dir_under_home(self):
        from road_sprint.config import GameConfig
        assert GameConfig().resolved_cache_dir.parts[-2:] == ("road-sprint", "tiles")

    def test_from_env_overrides(self, monkeypatch, tmp_path):
        from road_sprint.config import GameConfig, TrackerMode
        monkeypatch.setenv("ROAD_SPRINT_ZOOM", "17")
        monkeypatch.setenv("ROAD_SPRINT_MODE", "free_roam")
        monkeypatch.setenv("ROAD_SPRINT_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("ROAD_SPRINT_TARGET_RADIUS_M", "50")
        c = GameConfig.from_env()
        assert c.zoom == 17
        assert c.mode is TrackerMode.FREE_ROAM
        assert c.resolved_cache_dir == tmp_path
        assert c.target_radius_m == 50.0

    def test_from_env_ignores_unparsable_values(self, monkeypatch):
        from road_sprint.config import GameConfig, TrackerMode
        monkeypatch.setenv("ROAD_SPRINT_ZOOM", "eighteen")
        monkeypatch.setenv("ROAD_SPRINT_MODE", "hide_and_seek")
        c = GameConfig.from_env()
        assert c.zoom == 18
        assert c.mode is TrackerMode.INTERSECTIONS

    def test_from_env_out_of_range_value_keeps_default(self, monkeypatch, caplog):
        import logging
        from road_sprint.config import GameConfig
        monkeypatch.setenv("ROAD_SPRINT_ZOOM", "25")
        monkeypatch.setenv("ROAD_SPRINT_TARGET_RADIUS_M", "-3")
        monkeypatch.setenv("ROAD_SPRINT_RESPAWN_DELAY_MS", "500")
        with caplog.at_level(logging.WARNING, logger="road_sprint.config"):
            c = GameConfig.from_env()
        assert c.zoom == 18
        assert c.target_radius_m == 35.0
        assert c.respawn_delay_ms == 500
        assert any("ROAD_SPRINT_ZOOM" in r.message for r in caplog.records)

    def test_from_env_reads_every_tuning_field(self, monkeypatch):
        from road_sprint.config import GameConfig
        monkeypatch.setenv("ROAD_SPRINT_USER_AGENT", "road-sprint-test/1.0")
        monkeypatch.setenv("ROAD_SPRINT_OVERPASS_QUERY_TIMEOUT_S", "60")
        monkeypatch.setenv("ROAD_SPRINT_TRAVEL_NOISE_FLOOR_M", "1.5")
        monkeypatch.setenv("ROAD_SPRINT_DEBUG_STEP_M", "5")
        monkeypatch.setenv("ROAD_SPRINT_DEBUG_FAST_MULTIPLIER", "10")
        c = GameConfig.from_env()
        assert c.user_agent == "road-sprint-test/1.0"
        assert c.overpass_query_timeout_s == 60
        assert c.travel_noise_floor_m == 1.5
        assert c.debug_step_m == 5.0
        assert c.debug_fast_multiplier == 10.0

    def test_from_env_distance_range_checked_as_pair(self, monkeypatch):
        from road_sprint.config import GameConfig
        monkeypatch.setenv("ROAD_SPRINT_TARGET_MIN_DISTANCE_M", "500")
        monkeypatch.setenv("ROAD_SPRINT_TARGET_MAX_DISTANCE_M", "900")
        c = GameConfig.from_env()
        assert (c.target_min_distance_m, c.target_max_distance_m) == (500.0, 900.0)

    def test_from_env_inverted_distance_range_keeps_defaults(self, monkeypatch):
        from road_sprint.config import GameConfig
        monkeypatch.setenv("ROAD_SPRINT_TARGET_MIN_DISTANCE_M", "500")
        monkeypatch.setenv("ROAD_SPRINT_TARGET_MAX_DISTANCE_M", "200")
        c = GameConfig.from_env()
        assert (c.target_min_distance_m, c.target_max_distance_m) == (120.0, 420.0)
