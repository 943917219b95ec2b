"""Location stream tools: report_location, report_location_error."""

from typing import Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..engine import GameEngine
from ..models import LocationSample


def _format_distance(meters: float) -> str:
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{meters:.0f} m"


def register_location_tools(mcp: FastMCP, engine: GameEngine):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def report_location(
        lat: float,
        lng: float,
        accuracy_m: float | None = None,
        timestamp_ms: int = 0,
    ) -> str:
        """Feed one GPS fix from the device into the game.

        Samples must be sent in the order the device produced them. While a
        game is running each fix adds to the distance travelled and may
        collect the nearest target.

        Args:
            lat: Latitude in degrees.
            lng: Longitude in degrees.
            accuracy_m: Reported horizontal accuracy in meters.
            timestamp_ms: Device timestamp of the fix (epoch milliseconds).
        """
        try:
            sample = LocationSample(lat=lat, lng=lng, accuracy_m=accuracy_m, timestamp_ms=timestamp_ms)
        except ValidationError as e:
            return f"Error: Invalid location sample, {e.error_count()} problem(s): {e.errors()[0]['msg']}"

        outcome = engine.handle_location(sample)
        session = engine.state.tracker.session
        if not session.active:
            return f"Fix recorded at {outcome.position.lat:.6f}, {outcome.position.lng:.6f}. {engine.state.status.text}"

        parts = []
        if outcome.collected is not None:
            parts.append(f"Collected {outcome.collected.id}: +{outcome.points_awarded} pts")
        elif outcome.distance_to_nearest_m is not None:
            parts.append(f"Nearest target {_format_distance(outcome.distance_to_nearest_m)} away")
        else:
            parts.append("No targets nearby")
        if outcome.spawned:
            parts.append(f"{len(outcome.spawned)} new target(s)")
        parts.append(
            f"score {session.score}, {session.targets_collected} collected, "
            f"{_format_distance(session.distance_travelled_m)} travelled"
        )
        return "; ".join(parts)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def report_location_error(
        kind: Literal["permission_denied", "unavailable"],
        message: str = "",
    ) -> str:
        """Report an error from the device location stream.

        permission_denied blocks start_game until a fix arrives again.
        unavailable is transient; the stream keeps retrying on its own.

        Args:
            kind: 'permission_denied' or 'unavailable'.
            message: Optional text from the device.
        """
        engine.handle_location_error(kind, message)
        return engine.state.status.text
