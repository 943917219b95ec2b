"""Game engine: wires tiles, intersections, location and the target tracker.

All mutable game data lives on one ``GameState`` owned by the engine and
handed to whoever needs it. Nothing in the core reaches for a module-level
singleton.
"""

import logging
import random
from typing import Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import GameConfig, TrackerMode
from .core.cache import JsonDirectoryStore, KeyValueStore, TileCache
from .core.intersections import find_intersections
from .core.layers import build_layers
from .core.location import Direction, LocationErrorKind, PlayerLocation, location_error
from .core.osm import RoadNetworkFetcher
from .core.tileset import ReconcilePlan, TileLoadResult, TileSetManager, TileSource
from .core.tracker import PositionOutcome, TargetTracker, now_ms
from .errors import LocationPermissionDenied
from .models import Bounds, GeoPoint, IntersectionPoint, LocationSample, Target

logger = logging.getLogger(__name__)


class StatusMessage(BaseModel):
    text: str = "Waiting for GPS lock..."
    tone: Literal["info", "success", "error"] = "info"


class GameState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: GameConfig
    tiles: TileSetManager
    tracker: TargetTracker
    location: PlayerLocation = Field(default_factory=PlayerLocation)
    viewport: Optional[Bounds] = None
    intersections: list[IntersectionPoint] = []
    intersections_stale: bool = True
    status: StatusMessage = Field(default_factory=StatusMessage)

    def summary(self) -> dict:
        effective = self.location.effective
        return {
            "status": self.status.model_dump(),
            "location": {
                "has_fix": self.location.has_fix,
                "permission_denied": self.location.permission_denied,
                "position": [effective.lat, effective.lng] if effective else None,
                "accuracy_m": self.location.accuracy_m,
                "debug_offset": self.location.offset.model_dump(),
            },
            "tiles": {
                "zoom": self.config.zoom,
                "needed": len(self.tiles.needed),
                "loaded": len(self.tiles.loaded),
                "pending": len(self.tiles.pending),
                "failures": len(self.tiles.failures),
                "road_features": len(self.tiles.loaded_features()),
            },
            "intersections": len(self.intersections),
            "game": self.tracker.summary(),
        }


def _default_store(config: GameConfig) -> KeyValueStore:
    return JsonDirectoryStore(config.resolved_cache_dir)


class GameEngine:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        *,
        fetcher: Optional[TileSource] = None,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], int] = now_ms,
        rng: Optional[random.Random] = None,
    ):
        config = config or GameConfig()
        fetcher = fetcher or RoadNetworkFetcher(
            config.overpass_url,
            timeout=config.http_timeout_s,
            query_timeout_s=config.overpass_query_timeout_s,
            user_agent=config.user_agent,
        )
        cache = TileCache(
            store if store is not None else _default_store(config),
            prefix=config.cache_prefix,
            ttl_ms=config.cache_ttl_ms,
            clock=clock,
        )
        tiles = TileSetManager(fetcher, cache, zoom=config.zoom, on_change=self._tiles_changed)
        tracker = TargetTracker(config, clock=clock, rng=rng)
        self.state = GameState(config=config, tiles=tiles, tracker=tracker)

    def _tiles_changed(self) -> None:
        self.state.intersections_stale = True

    def _show(self, text: str, tone: str = "info") -> None:
        self.state.status = StatusMessage(text=text, tone=tone)

    # Location stream

    def handle_location(self, sample: LocationSample) -> PositionOutcome:
        location = self.state.location
        first_fix = not location.has_fix
        location.permission_denied = False
        effective = location.record(sample)
        if first_fix:
            logger.info("First GPS fix at %.6f,%.6f (±%sm)", effective.lat, effective.lng, sample.accuracy_m)
        if not self.state.tracker.session.active:
            self._show("GPS lock acquired. Ready when you are!", "success")
        return self._track(effective)

    def handle_location_error(self, kind: LocationErrorKind, message: str = "") -> Exception:
        """Record a location stream error. Never raises; returns the mapped error."""
        error = location_error(kind, message)
        if isinstance(error, LocationPermissionDenied):
            self.state.location.permission_denied = True
            self._show("Location permission denied. Enable it to play.", "error")
            logger.warning("Location permission denied")
        else:
            self._show(f"Location error: {error}", "error")
            logger.info("Location temporarily unavailable: %s", error)
        return error

    def _track(self, effective: GeoPoint) -> PositionOutcome:
        outcome = self.state.tracker.on_position_update(effective)
        if outcome.collected is not None:
            self._show(f"Target secured! +{outcome.points_awarded} pts", "success")
        return outcome

    # Game buttons

    def start_game(self) -> list[Target]:
        """Start a fresh session at the current effective position."""
        if self.state.location.permission_denied:
            raise LocationPermissionDenied("Location permission denied. Enable it to play.")
        position = self.state.location.effective
        if position is None:
            raise ValueError("Still waiting for your location. Try again in a moment.")

        spawned = self.state.tracker.start_session(position)
        if self.state.config.mode is TrackerMode.INTERSECTIONS:
            spawned = self.refresh_targets()
            self._show(f"Game started! {len(spawned)} intersections to claim.", "success")
        else:
            self._show("Sprint started! Chase the glowing orb nearby.", "success")
        return spawned

    def stop_game(self) -> dict:
        self.state.tracker.reset()
        self._show("Game stopped.", "info")
        return self.state.tracker.summary()

    # Map viewport and tiles

    async def set_viewport(self, bounds: Bounds) -> ReconcilePlan:
        self.state.viewport = bounds
        return await self.state.tiles.reconcile(bounds)

    async def load_tiles(self) -> list[TileLoadResult]:
        """Wait for in-flight tile fetches, then refresh intersection targets."""
        results = await self.state.tiles.drain()
        if self.state.intersections_stale and self.state.tracker.session.active:
            self.refresh_targets()
        return results

    def refresh_intersections(self) -> list[IntersectionPoint]:
        if self.state.intersections_stale:
            self.state.intersections = find_intersections(self.state.tiles.loaded_features())
            self.state.intersections_stale = False
            logger.debug("Found %d intersections", len(self.state.intersections))
        return self.state.intersections

    def refresh_targets(self) -> list[Target]:
        """Respawn intersection targets from the currently loaded roads."""
        intersections = self.refresh_intersections()
        if self.state.config.mode is not TrackerMode.INTERSECTIONS:
            return []
        return self.state.tracker.spawn_from_intersections(intersections)

    # Debug offset

    def toggle_debug(self) -> bool:
        enabled = self.state.location.offset.toggle()
        if enabled:
            self._show("Debug mode on. Nudge or pan the map to move your avatar.", "info")
        else:
            self._show("Debug mode disabled.", "info")
        self._retrack()
        return enabled

    def nudge(self, direction: Direction, fast: bool = False) -> Optional[PositionOutcome]:
        location = self.state.location
        if not location.offset.enabled or location.raw is None:
            return None
        step = self.state.config.debug_step_m
        if fast:
            step *= self.state.config.debug_fast_multiplier
        location.offset.nudge(location.raw, direction, step)
        return self._retrack()

    def sync_debug_to_center(self, center: GeoPoint) -> Optional[PositionOutcome]:
        location = self.state.location
        if not location.offset.enabled or location.raw is None:
            return None
        location.offset.sync_to_center(location.raw, center)
        return self._retrack()

    def _retrack(self) -> Optional[PositionOutcome]:
        effective = self.state.location.effective
        if effective is None:
            return None
        return self._track(effective)

    # Rendering

    def layers(self) -> dict:
        return build_layers(
            roads=self.state.tiles.loaded_features(),
            targets=self.state.tracker.targets,
            intersections=self.state.intersections,
            player=self.state.location.effective,
            accuracy_m=self.state.location.accuracy_m,
        )

    def summary(self) -> dict:
        return self.state.summary()
