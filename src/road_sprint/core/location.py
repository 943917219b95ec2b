"""Device location input and the debug position offset."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import LocationPermissionDenied, LocationUnavailable
from ..models import GeoPoint, LocationSample
from .geo import meters_to_degrees, normalize_lng


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


def _clamp_lat(lat: float) -> float:
    return max(-90.0, min(90.0, lat))


class DebugOffset(BaseModel):
    """Operator-controlled delta added to the sensed position.

    The tracker never sees the offset itself, only the shifted position.
    """
    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = False
    lat: float = 0.0
    lng: float = 0.0

    def apply(self, point: GeoPoint) -> GeoPoint:
        if not self.enabled:
            return point
        return GeoPoint(
            lat=_clamp_lat(point.lat + self.lat),
            lng=normalize_lng(point.lng + self.lng),
        )

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        if not self.enabled:
            self.lat = 0.0
            self.lng = 0.0
        return self.enabled

    def nudge(self, raw: GeoPoint, direction: Direction, step_m: float) -> None:
        """Move the effective position ``step_m`` metres in ``direction``."""
        lat_step, lng_step = meters_to_degrees(step_m, raw.lat + self.lat)
        if direction is Direction.UP:
            self.lat += lat_step
        elif direction is Direction.DOWN:
            self.lat -= lat_step
        elif direction is Direction.RIGHT:
            self.lng += lng_step
        elif direction is Direction.LEFT:
            self.lng -= lng_step

    def sync_to_center(self, raw: GeoPoint, center: GeoPoint) -> None:
        """Set the offset so the effective position lands on ``center``."""
        self.lat = center.lat - raw.lat
        self.lng = center.lng - raw.lng


LocationErrorKind = Literal["permission_denied", "unavailable"]


def location_error(kind: LocationErrorKind, message: str = "") -> Exception:
    """Map a location stream error report onto its exception type."""
    if kind == "permission_denied":
        return LocationPermissionDenied(message or "Location permission denied.")
    return LocationUnavailable(message or "Location unavailable.")


class PlayerLocation(BaseModel):
    """Latest fix from the device plus the effective position after the offset."""

    raw: Optional[GeoPoint] = None
    accuracy_m: Optional[float] = None
    last_fix_ms: Optional[int] = None
    permission_denied: bool = False
    offset: DebugOffset = Field(default_factory=DebugOffset)

    @property
    def has_fix(self) -> bool:
        return self.raw is not None

    @property
    def effective(self) -> Optional[GeoPoint]:
        if self.raw is None:
            return None
        return self.offset.apply(self.raw)

    def record(self, sample: LocationSample) -> GeoPoint:
        self.raw = sample.point
        self.accuracy_m = sample.accuracy_m
        self.last_fix_ms = sample.timestamp_ms or self.last_fix_ms
        return self.effective
