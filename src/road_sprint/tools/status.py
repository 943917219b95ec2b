"""Status tool: get_status."""

import json
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..engine import GameEngine


def register_status_tools(mcp: FastMCP, engine: GameEngine):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_status() -> str:
        """Return a summary of the current game state.

        Shows the GPS fix, tile loading progress, intersection count, score,
        collected targets and distance travelled.
        """
        return json.dumps(engine.summary(), indent=2)
