"""Runtime wiring for TurnBASIC."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings, get_settings
from ..console import ConsoleModel
from ..engine import BasicEngine
from .driver import ExecutionDriver
from .scheduler import Scheduler
from .session import ConsoleSession


@dataclass(frozen=True)
class Runtime:
    settings: Settings
    engine: BasicEngine
    console: ConsoleModel
    driver: ExecutionDriver
    session: ConsoleSession

    @classmethod
    def build(cls, scheduler: Scheduler, *, settings: Settings | None = None) -> Runtime:
        settings = settings or get_settings()
        engine = BasicEngine(warnings=settings.warnings, tracing=settings.tracing)
        console = ConsoleModel()
        driver = ExecutionDriver(
            engine,
            console,
            scheduler,
            turn_delay=settings.turn_delay_seconds,
            idle_prompt=settings.idle_prompt,
            input_prompt=settings.input_prompt,
            seed=settings.seed,
        )
        session = ConsoleSession(
            driver,
            console,
            break_sentinel=settings.break_sentinel,
            show_welcome=settings.show_welcome,
        )
        return cls(settings=settings, engine=engine, console=console, driver=driver, session=session)
