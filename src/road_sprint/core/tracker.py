"""Target lifecycle and scoring.

The tracker owns the play session. It only ever sees effective positions;
any debug offset has already been applied by the caller.

Two mutually exclusive modes:

* ``intersections``: one target per road intersection, flat points each.
  Rewards covering ground.
* ``free_roam``: a single target projected at a random bearing and distance
  from the player, with a bonus that decays the longer the sprint takes.
  A new target appears shortly after each collection.
"""

import logging
import math
import random
import time
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import GameConfig, TrackerMode
from ..models import GeoPoint, IntersectionPoint, Target, TargetStatus
from .geo import distance_meters, distances_meters, project
from .intersections import dedup_key

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PlaySession(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    active: bool = False
    score: int = Field(default=0, ge=0)
    targets_collected: int = Field(default=0, ge=0)
    distance_travelled_m: float = Field(default=0.0, ge=0)
    last_position: Optional[GeoPoint] = None
    started_at_ms: Optional[int] = None
    collected_ids: set[str] = Field(default_factory=set)


class PositionOutcome(BaseModel):
    """What a single position update did."""

    position: GeoPoint
    travelled_m: float = 0.0
    nearest_target_id: Optional[str] = None
    distance_to_nearest_m: Optional[float] = None
    collected: Optional[Target] = None
    points_awarded: int = 0
    spawned: list[Target] = []


def _js_round(value: float) -> int:
    """Round half up rather than to even."""
    return int(math.floor(value + 0.5))


def free_roam_points(elapsed_seconds: float) -> int:
    speed_bonus = max(15, _js_round(120 - elapsed_seconds * 8))
    return max(80, 150 + speed_bonus)


def intersection_target_id(point: GeoPoint) -> str:
    lat, lng = dedup_key(point)
    return f"ix:{lat:.6f},{lng:.6f}"


class TargetTracker:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        *,
        clock: Callable[[], int] = now_ms,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or GameConfig()
        self.clock = clock
        self.rng = rng or random.Random()
        self.session = PlaySession()
        self.targets: list[Target] = []
        self.respawn_at_ms: Optional[int] = None
        self._spawn_counter = 0

    @property
    def mode(self) -> TrackerMode:
        return self.config.mode

    @property
    def pending_targets(self) -> list[Target]:
        return [t for t in self.targets if t.is_pending]

    def start_session(self, position: GeoPoint) -> list[Target]:
        """Reset counters and go active. Free roam spawns its first target right away."""
        self.session = PlaySession(
            active=True,
            last_position=position,
            started_at_ms=self.clock(),
        )
        self.targets = []
        self.respawn_at_ms = None
        logger.info("Session started in %s mode at %.6f,%.6f", self.mode.value, position.lat, position.lng)
        if self.mode is TrackerMode.FREE_ROAM:
            return [self.spawn_free_roam_target(position)]
        return []

    def reset(self) -> None:
        """Return to idle, keeping the final score readable until the next start."""
        self.session.active = False
        self.targets = []
        self.respawn_at_ms = None

    def spawn_from_intersections(self, intersections: Iterable[IntersectionPoint]) -> list[Target]:
        """Replace the working target set with one pending target per intersection.

        Intersections already collected this session are not re-armed.
        """
        if not self.session.active:
            logger.debug("Ignoring intersection spawn while idle")
            return []
        spawned_at = self.clock()
        targets: list[Target] = []
        seen: set[str] = set()
        for intersection in intersections:
            target_id = intersection_target_id(intersection.point)
            if target_id in self.session.collected_ids or target_id in seen:
                continue
            seen.add(target_id)
            targets.append(Target(
                id=target_id,
                position=intersection.point,
                radius_m=self.config.target_radius_m,
                spawned_at_ms=spawned_at,
            ))
        self.targets = targets
        logger.info("Spawned %d intersection targets", len(targets))
        return targets

    def spawn_free_roam_target(self, origin: Optional[GeoPoint] = None) -> Target:
        """Place a single target at a random bearing and distance from ``origin``."""
        origin = origin or self.session.last_position
        if origin is None:
            raise ValueError("Cannot spawn a free-roam target without a position.")
        bearing = self.rng.random() * 360.0
        distance = self.rng.uniform(
            self.config.target_min_distance_m, self.config.target_max_distance_m
        )
        self._spawn_counter += 1
        target = Target(
            id=f"sprint-{self._spawn_counter}",
            position=project(origin, bearing, distance),
            radius_m=self.config.target_radius_m,
            spawned_at_ms=self.clock(),
        )
        self.targets = [target]
        self.respawn_at_ms = None
        logger.debug("Free-roam target %s placed %.0fm away at %.0f deg", target.id, distance, bearing)
        return target

    def tick(self) -> list[Target]:
        """Spawn the next free-roam target once its respawn delay has passed."""
        if (
            not self.session.active
            or self.respawn_at_ms is None
            or self.clock() < self.respawn_at_ms
        ):
            return []
        return [self.spawn_free_roam_target()]

    def _accumulate_travel(self, position: GeoPoint) -> float:
        last = self.session.last_position
        self.session.last_position = position
        if last is None or not self.session.active:
            return 0.0
        segment = distance_meters(last, position)
        if segment <= self.config.travel_noise_floor_m:
            return 0.0
        self.session.distance_travelled_m += segment
        return segment

    def _points_for(self, target: Target) -> int:
        if self.mode is TrackerMode.FREE_ROAM:
            elapsed_s = (self.clock() - target.spawned_at_ms) / 1000.0
            return free_roam_points(elapsed_s)
        return self.config.intersection_points

    def _collect(self, target: Target) -> int:
        target.status = TargetStatus.COLLECTED
        points = self._points_for(target)
        self.session.score += points
        self.session.targets_collected += 1
        self.session.collected_ids.add(target.id)
        if self.mode is TrackerMode.FREE_ROAM:
            self.targets = [t for t in self.targets if t.id != target.id]
            self.respawn_at_ms = self.clock() + self.config.respawn_delay_ms
        logger.info("Target %s collected: +%d pts (score %d)", target.id, points, self.session.score)
        return points

    def on_position_update(self, position: GeoPoint) -> PositionOutcome:
        """Accumulate travel, then check the nearest pending target for collection."""
        travelled = self._accumulate_travel(position)
        outcome = PositionOutcome(position=position, travelled_m=travelled)
        if not self.session.active:
            return outcome

        outcome.spawned = self.tick()

        pending = self.pending_targets
        if not pending:
            return outcome
        distances = distances_meters(position, [t.position for t in pending])
        index = int(distances.argmin())
        nearest = pending[index]
        distance = float(distances[index])
        outcome.nearest_target_id = nearest.id
        outcome.distance_to_nearest_m = distance

        if distance <= nearest.radius_m:
            outcome.points_awarded = self._collect(nearest)
            outcome.collected = nearest.model_copy()
        return outcome

    def summary(self) -> dict:
        return {
            "mode": self.mode.value,
            "active": self.session.active,
            "score": self.session.score,
            "targets_collected": self.session.targets_collected,
            "distance_travelled_m": round(self.session.distance_travelled_m, 1),
            "pending_targets": len(self.pending_targets),
            "respawn_pending": self.respawn_at_ms is not None,
        }
