"""Per-user recurring reminder engine."""

__version__ = "0.1.0"
