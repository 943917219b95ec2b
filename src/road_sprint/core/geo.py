"""Geodesic helpers on a spherical earth."""

import math
from typing import Sequence

import numpy as np

from ..models import GeoPoint

EARTH_RADIUS_M = 6_371_000.0
# Rough metres per degree of latitude, used for debug nudges only.
METERS_PER_DEGREE = 111_111.0


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points using the haversine formula."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    sin_dlat = math.sin(math.radians(b.lat - a.lat) / 2)
    sin_dlng = math.sin(math.radians(b.lng - a.lng) / 2)
    h = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlng * sin_dlng
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, max(0.0, h))))


def distances_meters(origin: GeoPoint, points: Sequence[GeoPoint]) -> np.ndarray:
    """Haversine distances from ``origin`` to each of ``points``."""
    if not points:
        return np.empty(0)
    lats = np.radians(np.array([p.lat for p in points], dtype=np.float64))
    lngs = np.radians(np.array([p.lng for p in points], dtype=np.float64))
    lat0 = math.radians(origin.lat)
    lng0 = math.radians(origin.lng)
    sin_dlat = np.sin((lats - lat0) / 2)
    sin_dlng = np.sin((lngs - lng0) / 2)
    h = sin_dlat ** 2 + math.cos(lat0) * np.cos(lats) * sin_dlng ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))


def normalize_lng(lng: float) -> float:
    """Wrap a longitude into (-180, 180]."""
    wrapped = (lng + 540.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def wrap_lng(lng: float) -> float:
    """Bring an unwrapped map longitude (e.g. 180.3 after panning east) into range.

    Values already within [-180, 180] are returned unchanged.
    """
    if -180.0 <= lng <= 180.0:
        return lng
    return normalize_lng(lng)


def project(origin: GeoPoint, bearing_degrees: float, distance_m: float) -> GeoPoint:
    """Destination reached from ``origin`` along a bearing (clockwise from north)."""
    bearing = math.radians(bearing_degrees)
    lat1 = math.radians(origin.lat)
    lng1 = math.radians(origin.lng)
    angular = distance_m / EARTH_RADIUS_M

    sin_lat2 = (
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lat2 = math.asin(min(1.0, max(-1.0, sin_lat2)))
    lng2 = lng1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return GeoPoint(lat=math.degrees(lat2), lng=normalize_lng(math.degrees(lng2)))


def meters_to_degrees(meters: float, at_lat: float) -> tuple[float, float]:
    """Approximate (lat, lng) degree deltas covering ``meters`` at a latitude."""
    lat_delta = meters / METERS_PER_DEGREE
    lng_delta = meters / (METERS_PER_DEGREE * math.cos(math.radians(at_lat)))
    return lat_delta, lng_delta
