"""Application-level exception types for TurnBASIC."""

from __future__ import annotations


class TurnBasicError(Exception):
    """Base exception for TurnBASIC."""


class ProtocolViolationError(TurnBasicError):
    """Raised when a driver or engine operation is called in a state that forbids it."""


class EngineConsistencyError(TurnBasicError):
    """Raised when the engine reports a state its own data contradicts."""


class ProgramLoadError(TurnBasicError):
    """Raised when program source text cannot be obtained from the host."""


class ConfigurationError(TurnBasicError):
    """Base exception for configuration and startup validation errors."""
