"""Terminal renderer for a console session."""

from __future__ import annotations

from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.document import Document
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.text import Text

from ..console import ConsoleModel, Direction, OutputNode
from ..runtime import ConsoleSession

STYLES: dict[str, str] = {
    "error": "bold red",
    "error-context": "dim",
    "warning": "yellow",
    "info": "blue",
}


class TerminalRenderer:
    """Write console output with Rich and read lines with prompt_toolkit.

    Fragments of a still-open line are held back until the line ends or a
    prompt absorbs them, since the prompt is redrawn by prompt_toolkit.
    """

    def __init__(self, session: ConsoleSession, console: Console | None = None) -> None:
        self.console: Console = console or Console(highlight=False, soft_wrap=True)
        self._session = session
        self._pending: list[OutputNode] = []
        self._prompt_session: PromptSession[str] | None = None
        model = session.console
        model.appended.connect(self._on_appended, sender=model, weak=False)
        model.prompt_changed.connect(self._on_prompt_changed, sender=model, weak=False)
        model.input_disabled.connect(self._on_input_disabled, sender=model, weak=False)
        model.cleared.connect(self._on_cleared, sender=model, weak=False)

    def read_line(self, prompt: str) -> str:
        """Prompt for one line; up/down browse the session's input history."""
        edit_buffer = self._session.console.edit_buffer
        with patch_stdout(raw=True):
            value = self._get_prompt_session().prompt(prompt, default=edit_buffer.text)
        edit_buffer.set(value)
        return value

    def flush(self) -> None:
        if self._pending:
            self._write(self._pending)
            self._pending = []

    def _get_prompt_session(self) -> PromptSession[str]:
        if self._prompt_session is None:
            self._prompt_session = PromptSession(key_bindings=self._key_bindings())
        return self._prompt_session

    def _key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()

        @bindings.add("up")
        def _(event: KeyPressEvent) -> None:
            self._navigate(event, "up")

        @bindings.add("down")
        def _(event: KeyPressEvent) -> None:
            self._navigate(event, "down")

        return bindings

    def _navigate(self, event: KeyPressEvent, direction: Direction) -> None:
        buffer = event.current_buffer
        edit_buffer = self._session.console.edit_buffer
        edit_buffer.set(buffer.text)
        if self._session.navigate(direction):
            buffer.document = Document(edit_buffer.text, edit_buffer.cursor)

    def _on_appended(self, _sender: ConsoleModel, *, node: OutputNode, **_: Any) -> None:
        if node.style == "prompt-response":
            # The terminal already shows what was typed; only close an open line.
            if self._pending:
                self._write([*self._pending, OutputNode("\n")])
                self._pending = []
            return
        if node.text.endswith("\n"):
            self._write([*self._pending, node])
            self._pending = []
        else:
            self._pending.append(node)

    def _on_prompt_changed(self, _sender: ConsoleModel, **_: Any) -> None:
        self._pending = []

    def _on_input_disabled(self, _sender: ConsoleModel, *, prompt: str, **_: Any) -> None:
        if prompt:
            self._write([OutputNode(f"{prompt}\n")])

    def _on_cleared(self, _sender: ConsoleModel, **_: Any) -> None:
        self._pending = []
        self.console.clear()

    def _write(self, nodes: list[OutputNode]) -> None:
        text = Text()
        for node in nodes:
            text.append(node.text, style=STYLES.get(node.style or "", ""))
        self.console.print(text, end="")
