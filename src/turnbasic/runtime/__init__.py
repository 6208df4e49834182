"""Runtime package for TurnBASIC."""

from .driver import ExecutionDriver
from .runtime import Runtime
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .session import ConsoleSession

__all__ = ["AsyncioScheduler", "ConsoleSession", "ExecutionDriver", "ManualScheduler", "Runtime", "Scheduler"]
