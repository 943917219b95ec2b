"""Debug offset tools: toggle_debug, nudge_position, center_debug_position."""

from typing import Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..core.geo import wrap_lng
from ..core.location import Direction
from ..engine import GameEngine
from ..models import GeoPoint
from ._prereqs import require_state


def register_debug_tools(mcp: FastMCP, engine: GameEngine):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def toggle_debug() -> str:
        """Turn the debug position offset on or off.

        While on, nudge_position and center_debug_position move the player
        without physically walking. Turning it off clears the offset.
        """
        enabled = engine.toggle_debug()
        return f"Debug mode {'enabled' if enabled else 'disabled'}."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def nudge_position(direction: Literal["up", "down", "left", "right"], fast: bool = False) -> str:
        """Shift the player one debug step (12 m, or 48 m when fast).

        **Requires:** toggle_debug on and a GPS fix.

        Args:
            direction: 'up' (north), 'down', 'left' (west) or 'right'.
            fast: Move four steps at once.
        """
        try:
            require_state(engine.state, fix=True)
        except ValueError as e:
            return f"Error: {e}"
        outcome = engine.nudge(Direction(direction), fast=fast)
        if outcome is None:
            return "Error: Debug mode is off. Enable it with toggle_debug."
        return f"Player now at {outcome.position.lat:.6f}, {outcome.position.lng:.6f}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def center_debug_position(lat: float, lng: float) -> str:
        """Move the player onto a map point, e.g. the centre after a pan.

        **Requires:** toggle_debug on and a GPS fix.
        """
        try:
            require_state(engine.state, fix=True)
            center = GeoPoint(lat=lat, lng=wrap_lng(lng))
        except ValueError as e:
            return f"Error: {e}"
        outcome = engine.sync_debug_to_center(center)
        if outcome is None:
            return "Error: Debug mode is off. Enable it with toggle_debug."
        return f"Player now at {outcome.position.lat:.6f}, {outcome.position.lng:.6f}"
