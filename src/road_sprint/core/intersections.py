"""Road intersection points from shared polyline vertices.

Two roads intersect here only when they share an exact vertex, which is how
OSM models junctions. Roads that cross without a shared node (bridges,
tunnels, sloppy mapping) are not reported.
"""

from typing import Iterable

from ..models import GeoPoint, IntersectionPoint, RoadFeature

DEDUP_DECIMALS = 6


def dedup_key(point: GeoPoint) -> tuple[float, float]:
    return (round(point.lat, DEDUP_DECIMALS), round(point.lng, DEDUP_DECIMALS))


def find_intersections(features: Iterable[RoadFeature]) -> list[IntersectionPoint]:
    """Return one intersection per rounded coordinate shared by two distinct roads.

    Pairs are visited in id order, vertices in polyline order, and the first
    intersection seen for a rounded coordinate wins.
    """
    by_id: dict[str, RoadFeature] = {}
    for feature in features:
        by_id.setdefault(feature.id, feature)
    ordered = [by_id[fid] for fid in sorted(by_id)]
    vertex_sets = [{(p.lat, p.lng) for p in f.polyline} for f in ordered]

    seen: set[tuple[float, float]] = set()
    result: list[IntersectionPoint] = []
    for i, first in enumerate(ordered):
        for j in range(i + 1, len(ordered)):
            other_vertices = vertex_sets[j]
            if vertex_sets[i].isdisjoint(other_vertices):
                continue
            for point in first.polyline:
                if (point.lat, point.lng) not in other_vertices:
                    continue
                key = dedup_key(point)
                if key in seen:
                    continue
                seen.add(key)
                result.append(IntersectionPoint(
                    point=point,
                    source_feature_ids=(first.id, ordered[j].id),
                ))
    return result
