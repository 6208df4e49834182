"""Display state of one interactive console session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from blinker import Signal

SpanClass = Literal["error", "error-context", "warning", "info"]
NodeStyle = Literal["error", "error-context", "warning", "info", "prompt-response"]


@dataclass(frozen=True, eq=False)
class OutputNode:
    """One rendered unit of output.

    Nodes compare by identity: the same text printed twice yields two nodes,
    and reclaiming a partial line must move exactly the nodes it printed.
    """

    text: str
    style: NodeStyle | None = None


@dataclass
class EditBuffer:
    """The live contents of the host's input field."""

    text: str = ""
    cursor: int = 0

    def set(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)

    def clear(self) -> None:
        self.set("")


class ConsoleModel:
    """Committed output, the still-open partial line and the active prompt.

    Renderers subscribe to the signals; every signal is sent with the model as
    sender.
    """

    def __init__(self) -> None:
        self.appended = Signal("console.appended")
        self.prompt_changed = Signal("console.prompt_changed")
        self.cleared = Signal("console.cleared")
        self.input_disabled = Signal("console.input_disabled")
        self.edit_buffer = EditBuffer()
        self._output: list[OutputNode] = []
        self._partial_line: list[OutputNode] = []
        self._prompt: list[OutputNode] = []
        self._input_enabled = True

    @property
    def output(self) -> tuple[OutputNode, ...]:
        return tuple(self._output)

    @property
    def partial_line(self) -> tuple[OutputNode, ...]:
        return tuple(self._partial_line)

    @property
    def text(self) -> str:
        return "".join(node.text for node in self._output)

    @property
    def lines(self) -> list[str]:
        """Committed output split into lines, without a trailing empty line."""
        text = self.text
        if not text:
            return []
        return text.removesuffix("\n").split("\n")

    @property
    def prompt(self) -> str:
        return "".join(node.text for node in self._prompt)

    @property
    def input_enabled(self) -> bool:
        return self._input_enabled

    def print(self, text: str) -> None:
        self._append(OutputNode(text))

    def print_classified(self, text: str, span_class: SpanClass) -> None:
        self._append(OutputNode(text, span_class))

    def set_prompt(self, text: str) -> None:
        """Replace the prompt, pulling any partial line in front of it."""
        reclaimed = self._partial_line
        self._partial_line = []
        for node in reclaimed:
            self._detach(node)
        self._prompt = [*reclaimed, OutputNode(text)]
        self.prompt_changed.send(self, prompt=self.prompt, reclaimed=tuple(reclaimed))

    def commit_prompt_to_output(self, suffix: str = "") -> None:
        """Freeze the prompt and ``suffix`` (usually the submitted input) as an output line."""
        self._partial_line = []
        node = OutputNode(f"{self.prompt}{suffix}\n", "prompt-response")
        self._output.append(node)
        self.appended.send(self, node=node)

    def clear_screen(self) -> None:
        self._output.clear()
        self._partial_line = []
        self.cleared.send(self)

    def disable_input(self) -> None:
        self.set_prompt("")
        self.edit_buffer.clear()
        self._input_enabled = False
        self.input_disabled.send(self, prompt=self.prompt)

    def _append(self, node: OutputNode) -> None:
        if node.text.endswith("\n"):
            self._partial_line = []
        else:
            self._partial_line.append(node)
        self._output.append(node)
        self.appended.send(self, node=node)

    def _detach(self, node: OutputNode) -> None:
        for index in range(len(self._output) - 1, -1, -1):
            if self._output[index] is node:
                del self._output[index]
                return
