"""Pydantic domain models for positions, tiles, roads and targets."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeoPoint(BaseModel):
    """WGS84 position in degrees. Immutable."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class TileKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    zoom: int = Field(ge=0, le=30)
    x: int = Field(ge=0)
    y: int = Field(ge=0)

    @model_validator(mode="after")
    def check_in_grid(self) -> "TileKey":
        limit = 1 << self.zoom
        if self.x >= limit or self.y >= limit:
            raise ValueError(
                f"tile ({self.x}, {self.y}) outside the {limit}x{limit} grid at zoom {self.zoom}"
            )
        return self


class Bounds(BaseModel):
    """Geographic rectangle in degrees (tile edges or a map viewport).

    ``west > east`` means the rectangle crosses the antimeridian.
    """
    model_config = ConfigDict(frozen=True)

    north: float = Field(ge=-90, le=90)
    south: float = Field(ge=-90, le=90)
    east: float = Field(ge=-180, le=180)
    west: float = Field(ge=-180, le=180)

    @model_validator(mode="after")
    def check_north_ge_south(self) -> "Bounds":
        if self.north < self.south:
            raise ValueError(f"north ({self.north}) must not be below south ({self.south})")
        return self

    @property
    def crosses_antimeridian(self) -> bool:
        return self.west > self.east

    @property
    def north_west(self) -> GeoPoint:
        return GeoPoint(lat=self.north, lng=self.west)

    @property
    def south_east(self) -> GeoPoint:
        return GeoPoint(lat=self.south, lng=self.east)

    @property
    def center(self) -> GeoPoint:
        lng = (self.east + self.west) / 2
        if self.crosses_antimeridian:
            lng += 180.0 if lng <= 0 else -180.0
        return GeoPoint(lat=(self.north + self.south) / 2, lng=lng)

    def contains(self, point: GeoPoint, tolerance: float = 0.0) -> bool:
        if not self.south - tolerance <= point.lat <= self.north + tolerance:
            return False
        if self.crosses_antimeridian:
            return point.lng >= self.west - tolerance or point.lng <= self.east + tolerance
        return self.west - tolerance <= point.lng <= self.east + tolerance


class RoadFeature(BaseModel):
    """One OSM highway way with the full geometry Overpass returned for it."""
    model_config = ConfigDict(frozen=True)

    id: str
    highway: Optional[str] = None
    name: Optional[str] = None
    polyline: tuple[GeoPoint, ...] = Field(min_length=2)


class IntersectionPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    point: GeoPoint
    source_feature_ids: tuple[str, str]


class TargetStatus(str, Enum):
    PENDING = "pending"
    COLLECTED = "collected"


class Target(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str
    position: GeoPoint
    radius_m: float = Field(default=35.0, gt=0)
    spawned_at_ms: int = Field(ge=0)
    status: TargetStatus = TargetStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status is TargetStatus.PENDING


class LocationSample(BaseModel):
    """One fix from the device location stream."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    accuracy_m: Optional[float] = Field(default=None, ge=0)
    timestamp_ms: int = Field(default=0, ge=0)

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)
