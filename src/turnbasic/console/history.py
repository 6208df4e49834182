"""Recall of previously submitted input lines."""

from __future__ import annotations

from typing import Literal

from .model import EditBuffer

Direction = Literal["up", "down"]

_DELTAS: dict[Direction, int] = {"up": -1, "down": 1}


class InputHistory:
    """Up/down navigation over past submissions.

    ``scratch`` mirrors ``committed`` plus one trailing slot for the line being
    typed; edits made while browsing are kept in ``scratch`` until the next
    submission rebuilds it.
    """

    def __init__(self, edit_buffer: EditBuffer) -> None:
        self._edit_buffer = edit_buffer
        self._committed: list[str] = []
        self._scratch: list[str] = [""]
        self._cursor_index = 0

    @property
    def committed(self) -> tuple[str, ...]:
        return tuple(self._committed)

    @property
    def scratch(self) -> tuple[str, ...]:
        return tuple(self._scratch)

    @property
    def cursor_index(self) -> int:
        return self._cursor_index

    def record_keystroke(self, direction: Direction) -> bool:
        """Move through history; returns ``False`` when already at that end."""
        self._scratch[self._cursor_index] = self._edit_buffer.text
        new_index = self._cursor_index + _DELTAS[direction]
        if not 0 <= new_index < len(self._scratch):
            return False
        self._cursor_index = new_index
        self._edit_buffer.set(self._scratch[new_index])
        return True

    def record_submission(self, value: str) -> None:
        if not value:
            return
        self._committed.append(value)
        self._scratch = [*self._committed, ""]
        self._cursor_index = len(self._scratch) - 1
