"""Working set of road tiles around the current viewport.

Each tile key is absent, pending (one fetch in flight) or loaded. Loads come
from the tile cache when possible, otherwise from Overpass. Failed fetches put
the key back to absent so the next reconcile retries it.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from ..errors import TileFetchFailed
from ..models import Bounds, RoadFeature, TileKey
from .cache import TileCache
from .tiles import tiles_covering

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    ABSENT = "absent"
    PENDING = "pending"
    LOADED = "loaded"


class TileSource(Protocol):
    async def fetch(self, key: TileKey) -> list[RoadFeature]: ...


class TileLoadResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: TileKey
    source: Literal["cache", "network"]
    features: Optional[list[RoadFeature]] = None
    error: Optional[TileFetchFailed] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReconcilePlan(BaseModel):
    """What one reconcile call decided."""

    needed: list[TileKey] = []
    from_cache: list[TileKey] = []
    fetching: list[TileKey] = []
    evicted: list[TileKey] = []


class TileSetManager:
    def __init__(
        self,
        fetcher: TileSource,
        cache: TileCache,
        *,
        zoom: int = 18,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.zoom = zoom
        self.on_change = on_change
        self.loaded: dict[TileKey, list[RoadFeature]] = {}
        self.pending: dict[TileKey, asyncio.Task] = {}
        self.needed: set[TileKey] = set()
        # Latest failure per tile, dropped once the tile loads or leaves the viewport.
        self.failures: dict[TileKey, TileLoadResult] = {}

    def state_of(self, key: TileKey) -> LoadState:
        if key in self.pending:
            return LoadState.PENDING
        if key in self.loaded:
            return LoadState.LOADED
        return LoadState.ABSENT

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change()
        except Exception:
            logger.exception("Tile change listener failed")

    async def reconcile(self, viewport: Bounds) -> ReconcilePlan:
        """Bring the working set in line with ``viewport``.

        Fetches are scheduled, not awaited; use ``drain`` to wait for them.
        """
        needed = tiles_covering(viewport, self.zoom)
        self.needed = set(needed)
        plan = ReconcilePlan(needed=needed)
        for key in [k for k in self.failures if k not in self.needed]:
            del self.failures[key]

        for key in needed:
            if key in self.loaded or key in self.pending:
                continue
            cached = self.cache.get(key)
            if cached is not None:
                self.loaded[key] = cached
                self.failures.pop(key, None)
                plan.from_cache.append(key)
                continue
            self.pending[key] = asyncio.create_task(self._load(key))
            plan.fetching.append(key)

        for key in list(self.loaded):
            if key not in self.needed:
                del self.loaded[key]
                plan.evicted.append(key)

        if plan.from_cache or plan.evicted:
            self._notify()
        if plan.fetching or plan.evicted:
            logger.debug(
                "Reconciled %d tiles: %d cached, %d fetching, %d evicted",
                len(needed), len(plan.from_cache), len(plan.fetching), len(plan.evicted),
            )
        return plan

    async def _load(self, key: TileKey) -> TileLoadResult:
        try:
            features = await self.fetcher.fetch(key)
        except TileFetchFailed as exc:
            result = TileLoadResult(key=key, source="network", error=exc)
        except Exception as exc:
            wrapped = TileFetchFailed(f"Unexpected error loading tile: {exc}")
            wrapped.__cause__ = exc
            result = TileLoadResult(key=key, source="network", error=wrapped)
        else:
            result = TileLoadResult(key=key, source="network", features=features)
        finally:
            self.pending.pop(key, None)

        if result.ok:
            # Applied even if the tile scrolled out of view meanwhile.
            self.loaded[key] = result.features
            self.failures.pop(key, None)
            self.cache.put(key, result.features)
            self._notify()
        else:
            logger.warning(
                "Failed to load road tile %s/%s/%s: %s", key.zoom, key.x, key.y, result.error
            )
            self.failures[key] = result
        return result

    async def drain(self) -> list[TileLoadResult]:
        """Wait for every in-flight fetch, including ones started meanwhile."""
        results: list[TileLoadResult] = []
        while self.pending:
            tasks = list(self.pending.values())
            results.extend(await asyncio.gather(*tasks))
        return results

    def loaded_features(self) -> list[RoadFeature]:
        """Features of all loaded tiles, one per way id, ordered by id."""
        by_id: dict[str, RoadFeature] = {}
        for features in self.loaded.values():
            for feature in features:
                by_id.setdefault(feature.id, feature)
        return [by_id[fid] for fid in sorted(by_id)]
