"""Road geometry fetching via the Overpass API."""

import logging
from typing import Any, Optional

import httpx

from ..errors import DecodeError, NetworkError
from ..models import Bounds, GeoPoint, RoadFeature, TileKey
from .tiles import tile_bounds

logger = logging.getLogger(__name__)

DEFAULT_OVERPASS_URL = "https://overpass.private.coffee/api/interpreter"


def build_road_query(bounds: Bounds, timeout_s: int = 25) -> str:
    """Overpass QL for every highway way touching ``bounds``."""
    bbox = f"{bounds.south},{bounds.west},{bounds.north},{bounds.east}"
    return f'[out:json][timeout:{timeout_s}];(way["highway"]({bbox}););out geom;'


def _parse_geometry(raw: Any) -> Optional[tuple[GeoPoint, ...]]:
    if not isinstance(raw, list):
        return None
    points = []
    for pt in raw:
        try:
            points.append(GeoPoint(lat=pt["lat"], lng=pt["lon"]))
        except (KeyError, TypeError, ValueError):
            # Overpass emits null vertices for ways clipped by the bbox.
            continue
    return tuple(points)


def _optional_tag(tags: dict, name: str) -> Optional[str]:
    value = tags.get(name)
    return str(value) if value else None


def parse_road_elements(elements: list) -> list[RoadFeature]:
    """Turn Overpass elements into road features.

    Only ways with at least two usable vertices survive; anything else is
    skipped without error.
    """
    features = []
    for elem in elements:
        if not isinstance(elem, dict) or elem.get("type") != "way":
            continue
        if elem.get("id") is None:
            continue
        polyline = _parse_geometry(elem.get("geometry"))
        if polyline is None or len(polyline) < 2:
            continue
        tags = elem.get("tags") or {}
        if not isinstance(tags, dict):
            tags = {}
        features.append(RoadFeature(
            id=f"way/{elem['id']}",
            highway=_optional_tag(tags, "highway"),
            name=_optional_tag(tags, "name"),
            polyline=polyline,
        ))
    return features


class RoadNetworkFetcher:
    """Fetches the road features of one tile. Never retries."""

    def __init__(
        self,
        url: str = DEFAULT_OVERPASS_URL,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 45.0,
        query_timeout_s: int = 25,
        user_agent: str = "road-sprint/0.1",
    ):
        self.url = url
        self.client = client
        self.timeout = timeout
        self.query_timeout_s = query_timeout_s
        self.headers = {"User-Agent": user_agent}

    async def _post(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        try:
            response = await client.post(self.url, data={"data": query})
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Overpass request to {self.url} timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise NetworkError(
                f"Overpass request failed with HTTP {status}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Overpass request to {self.url} failed: {exc}") from exc
        return response

    async def query(self, bounds: Bounds) -> list:
        """Run the road query for ``bounds`` and return the raw element list."""
        query = build_road_query(bounds, self.query_timeout_s)
        if self.client is not None:
            response = await self._post(self.client, query)
        else:
            async with httpx.AsyncClient(timeout=self.timeout, headers=self.headers) as client:
                response = await self._post(client, query)

        try:
            data = response.json()
        except ValueError as exc:
            raise DecodeError(f"Overpass returned a non-JSON payload: {exc}") from exc
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
        elements = data.get("elements", [])
        if not isinstance(elements, list):
            raise DecodeError("Overpass 'elements' is not a list")
        return elements

    async def fetch(self, key: TileKey) -> list[RoadFeature]:
        bounds = tile_bounds(key)
        elements = await self.query(bounds)
        features = parse_road_elements(elements)
        logger.debug(
            "Tile %s/%s/%s: %d elements, %d road features",
            key.zoom, key.x, key.y, len(elements), len(features),
        )
        return features
