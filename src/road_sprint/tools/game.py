"""Game control tools: start_game, stop_game, spawn_targets."""

import json

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..config import TrackerMode
from ..engine import GameEngine
from ..errors import LocationPermissionDenied
from ._prereqs import require_state


def register_game_tools(mcp: FastMCP, engine: GameEngine):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def start_game() -> str:
        """Start a new game at the player's current position.

        Resets score, collected targets and distance travelled.
        In intersections mode, targets are placed on every road junction
        loaded so far; in free_roam mode a single target appears nearby.
        **Requires:** at least one report_location fix.
        **Next:** set_viewport and load_tiles so roads (and targets) appear.
        """
        try:
            spawned = engine.start_game()
        except (LocationPermissionDenied, ValueError) as e:
            return f"Error: {e}"
        return f"{engine.state.status.text} ({len(spawned)} target(s) live)"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def stop_game() -> str:
        """End the current game and return the final tally."""
        return json.dumps(engine.stop_game(), indent=2)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def spawn_targets() -> str:
        """Respawn intersection targets from the roads loaded right now.

        Intersections already collected in this game are not re-armed.
        **Requires:** start_game in intersections mode.
        """
        try:
            require_state(engine.state, active=True)
        except ValueError as e:
            return f"Error: {e}"
        if engine.state.config.mode is not TrackerMode.INTERSECTIONS:
            return "Error: spawn_targets only applies to intersections mode."
        targets = engine.refresh_targets()
        return f"{len(targets)} intersection target(s) live from {len(engine.state.intersections)} intersection(s)"
