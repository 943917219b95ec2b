"""Prerequisite checking helpers for MCP tools."""


def require_state(state, *, fix: bool = False, active: bool = False, viewport: bool = False) -> None:
    """Raise ValueError with a descriptive message if required state is not set.

    Usage in a tool:
        try:
            require_state(engine.state, fix=True, active=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if fix and not state.location.has_fix:
        raise ValueError(
            "No GPS fix yet. Send a position with report_location first."
        )
    if active and not state.tracker.session.active:
        raise ValueError(
            "No game in progress. Start one with start_game."
        )
    if viewport and state.viewport is None:
        raise ValueError(
            "Set the map viewport first with set_viewport."
        )
