"""Program source text handling."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import ProgramLoadError

_PROGRAM_STEM = re.compile(r"^[A-Za-z0-9]+$")


@dataclass(frozen=True)
class SourceLines:
    statements: list[str]
    skipped: list[str]


def split_program(source_text: str) -> SourceLines:
    """Separate numbered statement lines from lines the engine must never see.

    Blank lines are dropped silently; any other line not starting with a digit
    is reported in ``skipped``.
    """
    statements: list[str] = []
    skipped: list[str] = []
    for line in source_text.split("\n"):
        line = line.removesuffix("\r")
        if not line.strip():
            continue
        if line[0].isascii() and line[0].isdigit():
            statements.append(line)
        else:
            skipped.append(line)
    return SourceLines(statements, skipped)


def resolve_program_path(value: str, programs_dir: Path) -> Path:
    """Expand a bare program stem such as ``hello`` to ``<programs_dir>/hello.bas``."""
    path = Path(value)
    if path.exists() or not _PROGRAM_STEM.match(value):
        return path
    return programs_dir / f"{value}.bas"


def read_program(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else type(exc).__name__
        raise ProgramLoadError(f"Failed to load {path} ({reason}).") from exc
