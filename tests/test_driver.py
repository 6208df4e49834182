"""Tests for the turn-taking execution driver."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from turnbasic.console import ConsoleModel
from turnbasic.engine import BasicEngine, ExecutionState, OutputEvent
from turnbasic.errors import EngineConsistencyError, ProtocolViolationError
from turnbasic.runtime import ExecutionDriver, ManualScheduler


@dataclass
class _FakeEngine:
    state: ExecutionState = ExecutionState.IDLE
    output: list[OutputEvent] = field(default_factory=list)
    error: str | None = None
    calls: list[tuple[str, ...]] = field(default_factory=list)
    seeds: list[int] = field(default_factory=list)

    def get_state(self) -> ExecutionState:
        return self.state

    def start_evaluating(self, line: str) -> None:
        self.calls.append(("start", line))

    def continue_evaluating(self) -> None:
        self.calls.append(("continue",))

    def provide_input(self, value: str) -> None:
        self.calls.append(("input", value))

    def break_at_current_location(self) -> None:
        self.calls.append(("break",))

    def take_latest_output(self) -> list[OutputEvent]:
        output, self.output = self.output, []
        return output

    def take_latest_error(self) -> str | None:
        error, self.error = self.error, None
        if self.state is ExecutionState.ERRORED:
            self.state = ExecutionState.IDLE
        return error

    def seed_randomness(self, seed: int) -> None:
        self.seeds.append(seed)


def _driver(engine: object | None = None, **kwargs: object) -> tuple[ExecutionDriver, ConsoleModel, ManualScheduler]:
    console = ConsoleModel()
    scheduler = ManualScheduler()
    driver = ExecutionDriver(engine or BasicEngine(), console, scheduler, seed=1, **kwargs)  # type: ignore[arg-type]
    return driver, console, scheduler


def test_engine_is_seeded_once() -> None:
    engine = _FakeEngine()
    driver, _, scheduler = _driver(engine)

    driver.submit("PRINT 1")
    scheduler.run_until_idle()

    assert engine.seeds == [1]


def test_engine_is_seeded_from_clock_without_explicit_seed() -> None:
    engine = _FakeEngine()

    ExecutionDriver(engine, ConsoleModel(), ManualScheduler())

    assert len(engine.seeds) == 1
    assert engine.seeds[0] > 0


def test_non_numbered_lines_never_reach_engine() -> None:
    engine = _FakeEngine()
    driver, _, _ = _driver(engine)

    fed = driver.load_program("REM title\n10 PRINT 1\n  20 PRINT 2\nPRINT 3\n\n30 END\n")

    assert fed == 2
    assert engine.calls == [("start", "10 PRINT 1"), ("start", "30 END"), ("start", "RUN")]
    assert driver.batch_loaded is True


def test_batch_program_runs_to_completion_and_disables_input() -> None:
    driver, console, scheduler = _driver()

    driver.load_program("10 PRINT 1+2\n")
    scheduler.run_until_idle()

    assert console.lines == ["3"]
    assert driver.state is ExecutionState.IDLE
    assert console.input_enabled is False
    assert console.prompt == ""


def test_interactive_print_returns_to_idle_prompt() -> None:
    driver, console, scheduler = _driver()
    driver.take_turn()

    driver.submit('PRINT "HI"')
    scheduler.run_until_idle()

    assert console.lines == ["HI"]
    assert driver.state is ExecutionState.IDLE
    assert console.prompt == "] "
    assert console.input_enabled is True


@pytest.mark.parametrize("line", ['PRINT "X"', "10 INPUT A", "RUN", "GOTO 99", "10 GOTO 10", "INPUT A", "LIST"])
def test_submit_from_idle_ends_in_a_known_state(line: str) -> None:
    driver, _, _ = _driver()
    driver.submit("10 GOTO 10")

    driver.submit(line)

    assert driver.state in set(ExecutionState)


def test_submit_while_running_is_protocol_violation() -> None:
    driver, _, scheduler = _driver()
    driver.load_program("10 GOTO 10\n")

    assert driver.state is ExecutionState.RUNNING
    with pytest.raises(ProtocolViolationError):
        driver.submit("PRINT 1")
    assert scheduler.pending is True


def test_break_in_idle_is_a_no_op() -> None:
    engine = _FakeEngine()
    driver, console, scheduler = _driver(engine)

    assert driver.break_execution() is False
    assert engine.calls == []
    assert console.output == ()
    assert scheduler.pending is False


def test_break_while_running_stops_and_commits_prompt_line() -> None:
    driver, console, scheduler = _driver()
    driver.load_program("10 GOTO 10\n")
    scheduler.run_until_idle(max_turns=5)
    assert driver.state is ExecutionState.RUNNING

    assert driver.break_execution() is True

    assert driver.state is not ExecutionState.RUNNING
    assert any(node.style == "prompt-response" for node in console.output)
    assert console.lines == ["", "BREAK IN 10"]
    assert scheduler.pending is False
    assert driver.fully_interactive is True
    assert console.prompt == "] "


def test_break_while_awaiting_input() -> None:
    driver, console, _ = _driver()
    driver.load_program("10 INPUT A\n")
    assert console.prompt == "? "

    assert driver.break_execution("^C") is True

    assert console.lines == ["? ^C", "BREAK IN 10"]
    assert console.prompt == "] "


def test_cont_resumes_after_break() -> None:
    driver, _, scheduler = _driver()
    driver.load_program("10 GOTO 10\n")
    driver.break_execution()

    driver.submit("CONT")

    assert driver.state is ExecutionState.RUNNING
    assert scheduler.pending is True


def test_input_prompt_and_value_delivery() -> None:
    driver, console, scheduler = _driver()
    driver.load_program("10 INPUT A\n20 PRINT A * 2\n")
    assert driver.state is ExecutionState.AWAITING_INPUT
    assert console.prompt == "? "

    driver.submit("21")
    scheduler.run_until_idle()

    assert console.lines == ["42"]
    assert console.input_enabled is False


def test_reenter_and_extra_ignored_are_warning_lines() -> None:
    driver, console, scheduler = _driver()
    driver.load_program("10 INPUT A\n20 PRINT A\n")

    driver.submit("abc")
    scheduler.run_until_idle()
    assert console.prompt == "? "

    driver.submit("1,2")
    scheduler.run_until_idle()

    assert console.lines == ["REENTER", "EXTRA IGNORED", "1"]
    assert [node.style for node in console.output] == ["warning", "warning", None]


def test_program_error_is_rendered_with_context() -> None:
    driver, console, scheduler = _driver()

    driver.load_program("10 PRINT 1/0\n")
    scheduler.run_until_idle()

    assert console.lines == ["DIVISION BY ZERO ERROR IN 10", "| 10 PRINT 1/0"]
    assert [node.style for node in console.output] == ["error", "error-context"]
    assert driver.error_count == 1
    assert console.input_enabled is False


def test_error_in_loaded_line_does_not_stop_loading() -> None:
    driver, console, scheduler = _driver()

    driver.load_program('10 PRINT "OOPS\n20 PRINT 2\n')
    scheduler.run_until_idle()

    assert console.lines == ['SYNTAX ERROR (unterminated string)', '| 10 PRINT "OOPS', "2"]
    assert driver.error_count == 1


def test_interactive_error_returns_to_prompt() -> None:
    driver, console, _ = _driver()
    driver.take_turn()

    driver.submit("GOTO 50")

    assert console.lines == ["UNDEF'D STATEMENT ERROR", "| GOTO 50"]
    assert console.prompt == "] "


def test_missing_error_text_is_a_consistency_fault() -> None:
    engine = _FakeEngine(state=ExecutionState.ERRORED)
    driver, _, _ = _driver(engine)

    with pytest.raises(EngineConsistencyError):
        driver.take_turn()


def test_output_events_are_rendered_by_kind() -> None:
    engine = _FakeEngine(
        output=[
            OutputEvent.trace(10),
            OutputEvent.print("A"),
            OutputEvent.print("\n"),
            OutputEvent.warning("Use of undeclared variable 'X'.", 10),
            OutputEvent.brk(20),
            OutputEvent.reenter(),
            OutputEvent.extra_ignored(),
        ]
    )
    driver, console, _ = _driver(engine)

    driver.take_turn()

    assert [(node.text, node.style) for node in console.output] == [
        ("#10 ", "info"),
        ("A", None),
        ("\n", None),
        ("WARNING IN 10: Use of undeclared variable 'X'.\n", "warning"),
        ("BREAK IN 20\n", "warning"),
        ("REENTER\n", "warning"),
        ("EXTRA IGNORED\n", "warning"),
    ]


def test_running_turn_advances_once_and_reschedules() -> None:
    engine = _FakeEngine(state=ExecutionState.RUNNING)
    driver, _, scheduler = _driver(engine, turn_delay=0.25)

    driver.take_turn()

    assert engine.calls == [("continue",)]
    assert scheduler.next_delay == 0.25

    engine.state = ExecutionState.IDLE
    scheduler.run_until_idle()
    assert engine.calls == [("continue",)]


def test_only_one_turn_is_outstanding() -> None:
    engine = _FakeEngine(state=ExecutionState.RUNNING)
    driver, _, scheduler = _driver(engine)

    driver.take_turn()
    driver.take_turn()

    assert scheduler.run_until_idle(max_turns=1) == 1
    engine.state = ExecutionState.IDLE
    assert scheduler.run_until_idle() == 1
    assert engine.calls == [("continue",), ("continue",), ("continue",)]


def test_tracing_output_is_space_joined() -> None:
    driver, console, scheduler = _driver(BasicEngine(tracing=True))

    driver.load_program("10 PRINT 1\n20 PRINT 2\n")
    scheduler.run_until_idle()

    assert console.lines == ["#10 1", "#20 2"]


def test_keep_interactive_load_ends_at_prompt() -> None:
    driver, console, scheduler = _driver()

    driver.load_program("10 PRINT 1\n", keep_interactive=True)
    scheduler.run_until_idle()

    assert driver.batch_loaded is False
    assert console.prompt == "] "
    assert console.input_enabled is True


def test_capability_queries_follow_state() -> None:
    driver, _, _ = _driver()
    assert driver.can_process_input() is True
    assert driver.can_break() is False

    driver.load_program("10 GOTO 10\n")

    assert driver.can_process_input() is False
    assert driver.can_break() is True
