"""TurnBASIC - turn-taking BASIC interpreter console."""

from loguru import logger

__version__ = "0.1.0"

logger.disable("turnbasic")

from .console import ConsoleModel, InputHistory  # noqa: E402
from .engine import BasicEngine, Engine, ExecutionState, OutputEvent, OutputKind  # noqa: E402
from .runtime import ConsoleSession, ExecutionDriver, ManualScheduler, Runtime  # noqa: E402

__all__ = [
    "BasicEngine",
    "ConsoleModel",
    "ConsoleSession",
    "Engine",
    "ExecutionDriver",
    "ExecutionState",
    "InputHistory",
    "ManualScheduler",
    "OutputEvent",
    "OutputKind",
    "Runtime",
    "__version__",
]
