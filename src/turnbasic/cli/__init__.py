"""Terminal front end for TurnBASIC."""

from .app import app

__all__ = ["app"]
