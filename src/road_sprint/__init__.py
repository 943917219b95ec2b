"""Location-based road sprint game engine."""

__version__ = "0.1.0"
