"""Slippy-map tile math (Web Mercator, EPSG:3857).

Tile (0, 0) is the north-west corner of the world; x grows east, y grows south.
"""

import math

from ..models import Bounds, GeoPoint, TileKey

MAX_MERCATOR_LAT = 85.05112878


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def to_tile(point: GeoPoint, zoom: int) -> TileKey:
    """Return the tile containing ``point`` at ``zoom``.

    A point exactly on a tile edge belongs to the tile whose half-open
    interval ``[edge, edge + 1)`` contains it.
    """
    n = 1 << zoom
    lat = _clamp(point.lat, -MAX_MERCATOR_LAT, MAX_MERCATOR_LAT)
    lat_rad = math.radians(lat)
    x_float = (point.lng + 180.0) / 360.0 * n
    y_float = (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n
    x = int(_clamp(math.floor(x_float), 0, n - 1))
    y = int(_clamp(math.floor(y_float), 0, n - 1))
    return TileKey(zoom=zoom, x=x, y=y)


def _tile_lat(y: int, n: int) -> float:
    return math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * y / n))))


def tile_bounds(key: TileKey) -> Bounds:
    """Return the geographic edges of a tile."""
    n = 1 << key.zoom
    return Bounds(
        north=_tile_lat(key.y, n),
        south=_tile_lat(key.y + 1, n),
        west=key.x / n * 360.0 - 180.0,
        east=(key.x + 1) / n * 360.0 - 180.0,
    )


def tiles_covering(bounds: Bounds, zoom: int) -> list[TileKey]:
    """All tiles in the inclusive rectangle spanned by the NW and SE corners.

    A viewport crossing the antimeridian wraps from the last column to column 0.
    """
    north_west = to_tile(bounds.north_west, zoom)
    south_east = to_tile(bounds.south_east, zoom)
    if bounds.crosses_antimeridian:
        columns = list(range(north_west.x, 1 << zoom)) + list(range(0, south_east.x + 1))
        columns = list(dict.fromkeys(columns))
    else:
        columns = list(range(north_west.x, south_east.x + 1))
    return [
        TileKey(zoom=zoom, x=x, y=y)
        for x in columns
        for y in range(north_west.y, south_east.y + 1)
    ]
