"""Time-bounded cache of per-tile road geometry.

The cache is an optimisation only. Every store failure, corrupt entry or
expired entry degrades to a miss and is never raised to the caller.
"""

import logging
import re
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, Field, ValidationError

from ..errors import CacheCorrupt, CacheUnavailable
from ..models import RoadFeature, TileKey

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


def now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStore(Protocol):
    """Minimal string store, shaped like browser ``localStorage``.

    Implementations may raise any exception from any method.
    """

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store. Durable only for the lifetime of the server."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class JsonDirectoryStore:
    """One JSON file per key under a cache directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise CacheUnavailable(f"Unsupported cache key {key!r}")
        return self.root / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CacheUnavailable(f"Cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise CacheUnavailable(f"Cannot write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise CacheUnavailable(f"Cannot remove cache entry {key}: {exc}") from exc


class CacheEntry(BaseModel):
    """Serialized form of one cached tile."""

    stored_at_ms: int = Field(ge=0)
    payload: list[RoadFeature]


class TileCache:
    def __init__(
        self,
        store: Optional[KeyValueStore],
        *,
        prefix: str = "osm_vector_tile",
        ttl_ms: int = 1000 * 60 * 60 * 24 * 30,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.prefix = prefix
        self.ttl_ms = ttl_ms
        self.clock = clock

    def storage_key(self, key: TileKey) -> str:
        return f"{self.prefix}_{key.zoom}_{key.x}_{key.y}"

    def _read(self, storage_key: str) -> Optional[str]:
        if self.store is None:
            raise CacheUnavailable("No persistent store configured")
        try:
            return self.store.get_item(storage_key)
        except CacheUnavailable:
            raise
        except Exception as exc:
            raise CacheUnavailable(str(exc)) from exc

    def _decode(self, raw: str) -> CacheEntry:
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError as exc:
            raise CacheCorrupt(f"{exc.error_count()} validation error(s)") from exc

    def _discard(self, storage_key: str, reason: str) -> None:
        try:
            self.store.remove_item(storage_key)
        except Exception as exc:
            logger.warning("Failed to remove %s cache entry %s: %s", reason, storage_key, exc)

    def get(self, key: TileKey) -> Optional[list[RoadFeature]]:
        """Return the cached features for ``key``, or None on any kind of miss."""
        storage_key = self.storage_key(key)
        try:
            raw = self._read(storage_key)
        except CacheUnavailable as exc:
            logger.debug("Tile store unavailable for %s: %s", storage_key, exc)
            return None
        if not raw:
            return None

        try:
            entry = self._decode(raw)
        except CacheCorrupt as exc:
            logger.warning("Discarding corrupt cache entry %s: %s", storage_key, exc)
            self._discard(storage_key, "corrupt")
            return None

        age_ms = self.clock() - entry.stored_at_ms
        if age_ms > self.ttl_ms:
            logger.debug("Cache entry %s expired (%d ms old)", storage_key, age_ms)
            self._discard(storage_key, "expired")
            return None
        return entry.payload

    def put(self, key: TileKey, features: list[RoadFeature]) -> bool:
        """Best-effort write. Returns False when the store rejected it."""
        storage_key = self.storage_key(key)
        if self.store is None:
            return False
        entry = CacheEntry(stored_at_ms=self.clock(), payload=list(features))
        try:
            self.store.set_item(storage_key, entry.model_dump_json())
        except Exception as exc:
            logger.warning("Failed to cache tile %s: %s", storage_key, exc)
            return False
        return True
