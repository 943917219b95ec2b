"""MCP server for road-sprint.

Builds one game engine, registers all tools against it and runs via stdio.
"""

import logging

from mcp.server.fastmcp import FastMCP

from .config import GameConfig
from .engine import GameEngine
from .tools.location import register_location_tools
from .tools.game import register_game_tools
from .tools.map import register_map_tools
from .tools.debug import register_debug_tools
from .tools.status import register_status_tools


def create_server(engine: GameEngine | None = None) -> FastMCP:
    engine = engine or GameEngine(GameConfig.from_env())
    mcp = FastMCP(
        "road-sprint",
        instructions=(
            "Location-based road sprint game: report GPS fixes, set the map viewport, "
            "and collect targets placed on nearby road intersections"
        ),
    )
    register_location_tools(mcp, engine)
    register_game_tools(mcp, engine)
    register_map_tools(mcp, engine)
    register_debug_tools(mcp, engine)
    register_status_tools(mcp, engine)
    return mcp


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_server().run(transport="stdio")


if __name__ == "__main__":
    main()
