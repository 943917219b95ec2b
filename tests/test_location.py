"""Tests for player location and the debug position offset."""
import pytest

from road_sprint.core.geo import distance_meters
from road_sprint.core.location import (
    DebugOffset,
    Direction,
    PlayerLocation,
    location_error,
)
from road_sprint.errors import LocationPermissionDenied, LocationUnavailable
from road_sprint.models import GeoPoint, LocationSample

RAW = GeoPoint(lat=51.5, lng=-0.12)


class TestDebugOffset:
    def test_disabled_offset_is_identity(self):
        offset = DebugOffset(lat=0.5, lng=0.5)
        assert offset.apply(RAW) == RAW

    def test_enabled_offset_shifts(self):
        offset = DebugOffset(enabled=True, lat=0.001, lng=-0.002)
        shifted = offset.apply(RAW)
        assert shifted.lat == pytest.approx(51.501)
        assert shifted.lng == pytest.approx(-0.122)

    def test_apply_clamps_and_wraps(self):
        offset = DebugOffset(enabled=True, lat=5.0, lng=10.0)
        shifted = offset.apply(GeoPoint(lat=88.0, lng=175.0))
        assert shifted.lat == 90.0
        assert shifted.lng == pytest.approx(-175.0)

    def test_toggle_off_clears_offset(self):
        offset = DebugOffset()
        assert offset.toggle() is True
        offset.nudge(RAW, Direction.UP, 12.0)
        assert offset.lat != 0.0
        assert offset.toggle() is False
        assert (offset.lat, offset.lng) == (0.0, 0.0)

    @pytest.mark.parametrize("direction,sign_lat,sign_lng", [
        (Direction.UP, 1, 0),
        (Direction.DOWN, -1, 0),
        (Direction.RIGHT, 0, 1),
        (Direction.LEFT, 0, -1),
    ])
    def test_nudge_moves_one_step(self, direction, sign_lat, sign_lng):
        offset = DebugOffset(enabled=True)
        offset.nudge(RAW, direction, 12.0)
        moved = offset.apply(RAW)
        assert distance_meters(RAW, moved) == pytest.approx(12.0, rel=0.01)
        assert (moved.lat > RAW.lat) == (sign_lat > 0)
        assert (moved.lng > RAW.lng) == (sign_lng > 0)

    def test_fast_nudge_distance(self):
        offset = DebugOffset(enabled=True)
        offset.nudge(RAW, Direction.RIGHT, 48.0)
        assert distance_meters(RAW, offset.apply(RAW)) == pytest.approx(48.0, rel=0.01)

    def test_sync_to_center(self):
        offset = DebugOffset(enabled=True)
        center = GeoPoint(lat=51.51, lng=-0.1)
        offset.sync_to_center(RAW, center)
        effective = offset.apply(RAW)
        assert effective.lat == pytest.approx(center.lat)
        assert effective.lng == pytest.approx(center.lng)


class TestLocationError:
    def test_permission_denied(self):
        error = location_error("permission_denied")
        assert isinstance(error, LocationPermissionDenied)

    def test_unavailable_keeps_message(self):
        error = location_error("unavailable", "Timeout expired")
        assert isinstance(error, LocationUnavailable)
        assert str(error) == "Timeout expired"


class TestPlayerLocation:
    def test_no_fix(self):
        location = PlayerLocation()
        assert not location.has_fix
        assert location.effective is None

    def test_record_sample(self):
        location = PlayerLocation()
        effective = location.record(LocationSample(lat=51.5, lng=-0.12, accuracy_m=8.0, timestamp_ms=1000))
        assert location.has_fix
        assert effective == RAW
        assert location.accuracy_m == 8.0
        assert location.last_fix_ms == 1000

    def test_effective_includes_offset(self):
        location = PlayerLocation()
        location.record(LocationSample(lat=51.5, lng=-0.12))
        location.offset.toggle()
        location.offset.nudge(location.raw, Direction.UP, 12.0)
        assert location.raw == RAW
        assert location.effective.lat > RAW.lat

    def test_offsets_are_not_shared(self):
        a = PlayerLocation()
        b = PlayerLocation()
        a.offset.toggle()
        assert not b.offset.enabled
