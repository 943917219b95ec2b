"""Tests for tool prerequisite helpers."""
import pytest

from road_sprint.engine import GameEngine
from road_sprint.core.cache import MemoryStore
from road_sprint.models import Bounds, LocationSample


class NullFetcher:
    async def fetch(self, key):
        return []


def _engine():
    return GameEngine(fetcher=NullFetcher(), store=MemoryStore())


def test_require_state_raises_without_fix():
    from road_sprint.tools._prereqs import require_state

    engine = _engine()
    with pytest.raises(ValueError, match="GPS fix"):
        require_state(engine.state, fix=True)


def test_require_state_passes_with_fix():
    from road_sprint.tools._prereqs import require_state

    engine = _engine()
    engine.handle_location(LocationSample(lat=51.5, lng=-0.12))
    # Should not raise
    require_state(engine.state, fix=True)


def test_require_state_raises_when_no_game():
    from road_sprint.tools._prereqs import require_state

    engine = _engine()
    engine.handle_location(LocationSample(lat=51.5, lng=-0.12))
    with pytest.raises(ValueError, match="start_game"):
        require_state(engine.state, fix=True, active=True)


def test_require_state_raises_without_viewport():
    from road_sprint.tools._prereqs import require_state

    engine = _engine()
    with pytest.raises(ValueError, match="viewport"):
        require_state(engine.state, viewport=True)
    engine.state.viewport = Bounds(north=51.51, south=51.5, east=-0.11, west=-0.12)
    require_state(engine.state, viewport=True)


def test_require_state_no_flags_does_not_raise():
    from road_sprint.tools._prereqs import require_state

    engine = _engine()
    # No flags, should never raise
    require_state(engine.state)
