"""Map tools: set_viewport, load_tiles, get_map_layers."""

import json
import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..core.geo import wrap_lng
from ..core.tiles import tiles_covering
from ..engine import GameEngine
from ..models import Bounds
from ._prereqs import require_state

logger = logging.getLogger(__name__)

# Zoom 18 tiles are ~150m wide.
MAX_TILES_PER_VIEWPORT = 64


def register_map_tools(mcp: FastMCP, engine: GameEngine):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True))
    async def set_viewport(north: float, south: float, east: float, west: float) -> str:
        """Tell the game which part of the map is on screen.

        Tiles covering the viewport are loaded from the local cache when
        fresh, otherwise fetched from Overpass in the background. Tiles that
        left the viewport are dropped from memory (the disk cache keeps them).
        **Next:** load_tiles to wait for background fetches.

        Args:
            north/south/east/west: Viewport edges in degrees. Unwrapped
                longitudes (e.g. east=180.3 after panning) are accepted.
        """
        if east - west >= 360.0:
            west, east = -180.0, 180.0
        else:
            west, east = wrap_lng(west), wrap_lng(east)
        try:
            bounds = Bounds(north=north, south=south, east=east, west=west)
        except ValidationError as e:
            return f"Error: Invalid viewport, {e.errors()[0]['msg']}"

        tile_count = len(tiles_covering(bounds, engine.state.config.zoom))
        if tile_count > MAX_TILES_PER_VIEWPORT:
            return (
                f"Error: Viewport covers {tile_count} tiles at zoom {engine.state.config.zoom} "
                f"(max {MAX_TILES_PER_VIEWPORT}). Zoom in."
            )

        plan = await engine.set_viewport(bounds)
        return (
            f"Viewport set: {len(plan.needed)} tile(s) needed, "
            f"{len(plan.from_cache)} from cache, {len(plan.fetching)} fetching, "
            f"{len(plan.evicted)} evicted"
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True))
    async def load_tiles() -> str:
        """Wait for all in-flight tile fetches to finish.

        Failed tiles are reported and retried on the next set_viewport.
        When a game is running in intersections mode, targets are refreshed
        from the newly loaded roads.
        **Requires:** set_viewport first.
        """
        try:
            require_state(engine.state, viewport=True)
        except ValueError as e:
            return f"Error: {e}"

        results = await engine.load_tiles()
        failed = [r for r in results if not r.ok]
        roads = len(engine.state.tiles.loaded_features())
        message = (
            f"{len(results) - len(failed)} tile(s) fetched, {len(failed)} failed; "
            f"{len(engine.state.tiles.loaded)} tile(s) loaded with {roads} road(s)"
        )
        if failed:
            logger.debug("load_tiles failures: %s", [str(r.error) for r in failed])
            message += ". Failed tiles will be retried on the next set_viewport."
        return message

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_map_layers() -> str:
        """Return drawable points and road polylines as JSON.

        Points cover the player, targets and intersections; polylines are
        loaded roads with a style derived from their highway class.
        """
        engine.refresh_intersections()
        return json.dumps(engine.layers())
