"""Interactive terminal session loop with an async task spinner."""

__version__ = "0.1.0"
