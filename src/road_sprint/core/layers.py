"""Drawable primitives for an external map renderer."""

from typing import Iterable, Optional

from pydantic import BaseModel

from ..models import GeoPoint, IntersectionPoint, RoadFeature, Target


class RoadStyle(BaseModel):
    color: str
    weight: float
    opacity: float = 0.85
    line_cap: str = "round"
    line_join: str = "round"


ROAD_PALETTE: dict[str, tuple[str, float]] = {
    "motorway": ("#FF6B6B", 4.0),
    "trunk": ("#F06595", 3.5),
    "primary": ("#FAB005", 3.2),
    "secondary": ("#FCC419", 3.0),
    "tertiary": ("#FFD43B", 2.6),
    "residential": ("#ADB5BD", 2.2),
    "living_street": ("#CED4DA", 2.0),
    "service": ("#DEE2E6", 1.8),
    "footway": ("#82C91E", 1.4),
    "cycleway": ("#51CF66", 1.4),
    "path": ("#69DB7C", 1.4),
}
DEFAULT_ROAD_STYLE = ("#4C6EF5", 2.2)

PLAYER_COLOR = "#51CF66"
TARGET_COLOR = "#FFCE54"
COLLECTED_COLOR = "#868E96"
INTERSECTION_COLOR = "#F6A821"


def road_style(highway: Optional[str]) -> RoadStyle:
    color, weight = ROAD_PALETTE.get(highway or "", DEFAULT_ROAD_STYLE)
    return RoadStyle(color=color, weight=weight)


def _latlng(point: GeoPoint) -> list[float]:
    return [point.lat, point.lng]


def build_layers(
    *,
    roads: Iterable[RoadFeature] = (),
    targets: Iterable[Target] = (),
    intersections: Iterable[IntersectionPoint] = (),
    player: Optional[GeoPoint] = None,
    accuracy_m: Optional[float] = None,
) -> dict:
    """JSON-ready points and polylines for the current game state."""
    points = []
    if player is not None:
        points.append({
            "kind": "player",
            "position": _latlng(player),
            "radius_m": max(accuracy_m or 20.0, 10.0),
            "color": PLAYER_COLOR,
        })
    for target in targets:
        points.append({
            "kind": "target",
            "id": target.id,
            "position": _latlng(target.position),
            "radius_m": target.radius_m,
            "status": target.status.value,
            "color": TARGET_COLOR if target.is_pending else COLLECTED_COLOR,
        })
    for intersection in intersections:
        points.append({
            "kind": "intersection",
            "position": _latlng(intersection.point),
            "roads": list(intersection.source_feature_ids),
            "color": INTERSECTION_COLOR,
        })

    polylines = []
    for road in roads:
        polylines.append({
            "id": road.id,
            "name": road.name,
            "highway": road.highway,
            "coordinates": [_latlng(p) for p in road.polyline],
            "style": road_style(road.highway).model_dump(),
        })
    return {"points": points, "polylines": polylines}
