"""Central error types used across road-sprint."""

from __future__ import annotations


class RoadSprintError(RuntimeError):
    """Base error for the game engine."""


class LocationPermissionDenied(RoadSprintError):
    """Raised when the device refuses access to its location. Gameplay cannot start."""


class LocationUnavailable(RoadSprintError):
    """Raised when a position fix is temporarily unavailable."""


class TileFetchFailed(RoadSprintError):
    """Base error for a single tile that could not be loaded from Overpass."""


class NetworkError(TileFetchFailed):
    """Raised on transport failures and non-2xx Overpass responses."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(TileFetchFailed):
    """Raised when an Overpass payload cannot be parsed into road features."""


class CacheUnavailable(RoadSprintError):
    """Raised by a tile store that cannot be read or written."""


class CacheCorrupt(RoadSprintError):
    """Raised when a stored cache entry does not match the expected schema."""


__all__ = [
    "RoadSprintError",
    "LocationPermissionDenied",
    "LocationUnavailable",
    "TileFetchFailed",
    "NetworkError",
    "DecodeError",
    "CacheUnavailable",
    "CacheCorrupt",
]
