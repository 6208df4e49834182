"""Tests for the terminal host loop."""

from __future__ import annotations

import signal
from dataclasses import dataclass, field
from pathlib import Path

from turnbasic.cli.live import run_terminal
from turnbasic.config import get_settings
from turnbasic.runtime import ManualScheduler, Runtime


@dataclass
class _FakeRenderer:
    """Replays scripted lines; exceptions in the script are raised instead."""

    script: list[str | BaseException]
    prompts: list[str] = field(default_factory=list)
    flushed: bool = False

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.script:
            raise EOFError
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def flush(self) -> None:
        self.flushed = True


class _InterruptingScheduler(ManualScheduler):
    """Delivers SIGINT to the process after a few turns have run."""

    def __init__(self, interrupt_after: int) -> None:
        super().__init__()
        self._remaining = interrupt_after

    def run_next(self) -> bool:
        ran = super().run_next()
        self._remaining -= 1
        if self._remaining == 0:
            signal.raise_signal(signal.SIGINT)
        return ran


def _runtime(scheduler: ManualScheduler) -> Runtime:
    return Runtime.build(scheduler, settings=get_settings(seed=1, turn_delay_seconds=0, show_welcome=False))


def test_ctrl_c_at_idle_prompt_exits() -> None:
    scheduler = ManualScheduler()
    runtime = _runtime(scheduler)
    renderer = _FakeRenderer(script=[KeyboardInterrupt(), 'PRINT "UNREACHED"'])

    exit_code = run_terminal(runtime, renderer, scheduler)  # type: ignore[arg-type]

    assert exit_code == 0
    assert renderer.prompts == ["] "]
    assert renderer.flushed is True
    assert "UNREACHED" not in runtime.console.text


def test_ctrl_c_at_input_prompt_breaks_program(tmp_path: Path) -> None:
    program = tmp_path / "ask.bas"
    program.write_text("10 INPUT A\n20 PRINT A\n")
    scheduler = ManualScheduler()
    runtime = _runtime(scheduler)
    renderer = _FakeRenderer(script=[KeyboardInterrupt()])

    exit_code = run_terminal(runtime, renderer, scheduler, program=program)  # type: ignore[arg-type]

    assert exit_code == 0
    assert renderer.prompts == ["? ", "] "]
    assert runtime.console.lines == ["? ", "BREAK IN 10"]
    assert runtime.driver.fully_interactive is True


def test_sigint_while_running_breaks_at_statement_boundary(tmp_path: Path) -> None:
    program = tmp_path / "spin.bas"
    program.write_text("10 GOTO 10\n")
    scheduler = _InterruptingScheduler(interrupt_after=3)
    runtime = _runtime(scheduler)
    renderer = _FakeRenderer(script=[])
    previous = signal.getsignal(signal.SIGINT)

    exit_code = run_terminal(runtime, renderer, scheduler, program=program)  # type: ignore[arg-type]

    assert exit_code == 0
    assert runtime.console.lines == ["", "BREAK IN 10"]
    assert renderer.prompts == ["] "]
    assert scheduler.pending is False
    assert signal.getsignal(signal.SIGINT) is previous


def test_interactive_program_shows_welcome_first(tmp_path: Path) -> None:
    program = tmp_path / "one.bas"
    program.write_text("10 PRINT 1\n")
    scheduler = ManualScheduler()
    runtime = Runtime.build(scheduler, settings=get_settings(seed=1))
    renderer = _FakeRenderer(script=[])

    run_terminal(runtime, renderer, scheduler, program=program, keep_interactive=True)  # type: ignore[arg-type]

    assert runtime.console.lines[0].startswith("Welcome to TurnBASIC v")
    assert runtime.console.lines[1:] == ["1"]
    assert renderer.prompts == ["] "]
