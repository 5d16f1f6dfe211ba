"""Scripted boot output shown before a terminal session accepts input."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from .interpreter import HELP_HINT, PROMPT

if TYPE_CHECKING:
    from .session import Session, TerminalController
    from .types import SessionContext

# Offsets from open(), not from the previous step.
INIT_DELAY_MS = 0
DEPENDENCIES_DELAY_MS = 300
SERVER_DELAY_MS = 1000
READY_DELAY_MS = 2000
WELCOME_DELAY_MS = 3000

RUN_COMMANDS: dict[str, str] = {
    "Python": "python main.py",
    "Java": "java Main",
    "C": "./run",
    "C++": "./run",
    "JavaScript": "npm start",
    "TypeScript": "npm start",
}
DEFAULT_RUN_COMMAND = "start"

LOCAL_URL = "http://localhost:3000"
NETWORK_URL = "http://192.168.1.5:3000"


@dataclass(frozen=True)
class BootStep:
    """Lines written together at one offset."""

    delay_ms: int
    lines: tuple[str, ...]
    prompt: bool = False


def run_command(language: str) -> str:
    """The command a project in ``language`` would be started with."""
    return RUN_COMMANDS.get(language, DEFAULT_RUN_COMMAND)


def welcome_step(context: SessionContext) -> BootStep:
    name, language = context.name, context.language
    if language == "Python":
        return BootStep(
            WELCOME_DELAY_MS,
            (
                "Starting application...",
                "Loaded modules successfully",
                f"Welcome to {name}!",
                HELP_HINT,
            ),
            prompt=True,
        )
    if language in ("JavaScript", "TypeScript"):
        return BootStep(
            WELCOME_DELAY_MS,
            (
                "Compiled successfully!",
                "",
                "You can now view the app in the browser.",
                "",
                f"  Local:            {LOCAL_URL}",
                f"  On Your Network:  {NETWORK_URL}",
                "",
                "Note that the development build is not optimized.",
                "To create a production build, use npm run build.",
                "",
            ),
        )
    return BootStep(
        WELCOME_DELAY_MS,
        (f"{name} started successfully!", "Ready for input..."),
        prompt=True,
    )


def boot_script(context: SessionContext) -> list[BootStep]:
    """The full boot narrative for a project, in firing order."""
    name, language = context.name, context.language
    return [
        BootStep(INIT_DELAY_MS, (f"> Initializing {language} project environment...",)),
        BootStep(DEPENDENCIES_DELAY_MS, ("> Loading dependencies...",)),
        BootStep(SERVER_DELAY_MS, ("> Setting up development server...",)),
        BootStep(
            READY_DELAY_MS,
            (
                f"> Project ready! Running {name} with {language}...",
                "",
                f"$ {run_command(language)}",
                "",
            ),
        ),
        welcome_step(context),
    ]


class BootSequencer:
    """Schedules a session's boot steps and installs the interpreter last."""

    def __init__(self, controller: TerminalController) -> None:
        self._controller = controller

    def start(self, session: Session) -> None:
        steps = boot_script(session.context)
        session.boot_steps_remaining = len(steps)
        for step in steps:
            self._controller.schedule(
                session,
                step.delay_ms,
                partial(self._emit, session, step),
                label=f"boot+{step.delay_ms}ms",
            )

    def _emit(self, session: Session, step: BootStep) -> None:
        surface = session.surface
        if surface is None:
            return
        for line in step.lines:
            surface.write_line(line)
        if step.prompt:
            surface.write(PROMPT)

        # Whichever step fires last hands over to the interpreter.
        session.boot_steps_remaining -= 1
        if session.boot_steps_remaining == 0:
            self._controller.install_interpreter(session)
