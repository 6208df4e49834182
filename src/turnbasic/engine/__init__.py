"""Reference BASIC engine and the types every engine shares."""

from .adapter import BasicEngine
from .errors import BasicError, ErrorKind
from .interpreter import Interpreter, InterpreterState
from .types import Engine, ExecutionState, OutputEvent, OutputKind

__all__ = [
    "BasicEngine",
    "BasicError",
    "Engine",
    "ErrorKind",
    "ExecutionState",
    "Interpreter",
    "InterpreterState",
    "OutputEvent",
    "OutputKind",
]
