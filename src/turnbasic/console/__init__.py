"""Console display state and input history."""

from .history import Direction, InputHistory
from .model import ConsoleModel, EditBuffer, OutputNode, SpanClass

__all__ = ["ConsoleModel", "Direction", "EditBuffer", "InputHistory", "OutputNode", "SpanClass"]
