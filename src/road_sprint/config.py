"""Game configuration.

Defaults reproduce the browser game. Every field can be overridden with a
``ROAD_SPRINT_<FIELD>`` environment variable; values that fail to parse or
validate fall back to the default.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

DAY_MS = 1000 * 60 * 60 * 24
ENV_PREFIX = "ROAD_SPRINT_"
_DISTANCE_FIELDS = ("target_min_distance_m", "target_max_distance_m")


class TrackerMode(str, Enum):
    """Scoring/spawn strategy. The two modes are mutually exclusive per session."""
    INTERSECTIONS = "intersections"
    FREE_ROAM = "free_roam"


def _env_float(key: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_str(key: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def default_cache_dir() -> Path:
    return Path.home() / ".cache" / "road-sprint" / "tiles"


class GameConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    zoom: int = Field(default=18, ge=1, le=20)
    mode: TrackerMode = TrackerMode.INTERSECTIONS

    # Tile cache
    cache_prefix: str = Field(default="osm_vector_tile", min_length=1)
    cache_ttl_ms: int = Field(default=30 * DAY_MS, gt=0)
    cache_dir: Optional[Path] = None

    # Overpass
    overpass_url: str = "https://overpass.private.coffee/api/interpreter"
    overpass_query_timeout_s: int = Field(default=25, gt=0)
    http_timeout_s: float = Field(default=45.0, gt=0)
    user_agent: str = "road-sprint/0.1"

    # Targets
    target_radius_m: float = Field(default=35.0, gt=0)
    target_min_distance_m: float = Field(default=120.0, ge=0)
    target_max_distance_m: float = Field(default=420.0, gt=0)
    intersection_points: int = Field(default=10, ge=0)
    respawn_delay_ms: int = Field(default=1200, ge=0)
    travel_noise_floor_m: float = Field(default=0.4, ge=0)

    # Debug offset
    debug_step_m: float = Field(default=12.0, gt=0)
    debug_fast_multiplier: float = Field(default=4.0, gt=0)

    @model_validator(mode="after")
    def check_distance_range(self) -> "GameConfig":
        if self.target_min_distance_m > self.target_max_distance_m:
            raise ValueError(
                f"target_min_distance_m ({self.target_min_distance_m}) must not exceed "
                f"target_max_distance_m ({self.target_max_distance_m})"
            )
        return self

    @property
    def resolved_cache_dir(self) -> Path:
        return self.cache_dir if self.cache_dir is not None else default_cache_dir()

    @classmethod
    def from_env(cls) -> "GameConfig":
        """Build a config from defaults overlaid with ``ROAD_SPRINT_*`` variables.

        Each override is validated on its own (the spawn distances as a pair);
        an invalid one is logged and its field keeps the default.
        """
        readers = {
            "zoom": _env_int,
            "mode": _env_str,
            "cache_prefix": _env_str,
            "cache_ttl_ms": _env_int,
            "cache_dir": _env_str,
            "overpass_url": _env_str,
            "overpass_query_timeout_s": _env_int,
            "http_timeout_s": _env_float,
            "user_agent": _env_str,
            "target_radius_m": _env_float,
            "target_min_distance_m": _env_float,
            "target_max_distance_m": _env_float,
            "intersection_points": _env_int,
            "respawn_delay_ms": _env_int,
            "travel_noise_floor_m": _env_float,
            "debug_step_m": _env_float,
            "debug_fast_multiplier": _env_float,
        }
        candidates = {}
        for name, read in readers.items():
            value = read(f"{ENV_PREFIX}{name.upper()}", None)
            if value is not None:
                candidates[name] = Path(value).expanduser() if name == "cache_dir" else value

        overrides = {}
        for name, value in candidates.items():
            check = {name: value}
            if name in _DISTANCE_FIELDS:
                # The spawn range is only valid as a pair.
                check.update({k: candidates[k] for k in _DISTANCE_FIELDS if k in candidates})
            try:
                cls(**check)
            except ValidationError as exc:
                logger.warning(
                    "Ignoring %s%s=%r: %s", ENV_PREFIX, name.upper(), value, exc.errors()[0]["msg"]
                )
                continue
            overrides[name] = value
        return cls(**overrides)
