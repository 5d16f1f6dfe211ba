"""Line editing and command dispatch for an interactive terminal session."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from .session import Session, TerminalController
    from .surface import Surface
    from .types import KeyEvent

PROMPT = "> "
ERASE = "\b \b"
EXIT_GRACE_MS = 1000
HELP_HINT = 'Type "help" for available commands'

COMMAND_HELP: list[tuple[str, str]] = [
    ("help", "Display this help menu"),
    ("exit", "Close the terminal"),
    ("clear", "Clear the terminal"),
    ("info", "Show info about {name}"),
]


class LineInterpreter:
    """Turns key events into an editable line and runs completed lines.

    Commands are matched case-insensitively after trimming. Unknown input
    is echoed back with its original casing.
    """

    def __init__(self, controller: TerminalController, session: Session) -> None:
        self._controller = controller
        self._session = session
        self._commands: dict[str, Callable[[], None]] = {
            "help": self._help,
            "exit": self._exit,
            "clear": self._clear,
            "info": self._info,
        }

    @property
    def commands(self) -> list[str]:
        return list(self._commands)

    @property
    def _surface(self) -> Surface:
        surface = self._session.surface
        if surface is None:
            raise RuntimeError("interpreter used after its session was closed")
        return surface

    def handle_key(self, event: KeyEvent) -> None:
        if self._session.state != "interactive":
            return
        if event.enter:
            self._submit()
        elif event.backspace:
            self._backspace()
        elif event.key and event.key.isprintable():
            self._session.input_buffer.extend(event.key)
            self._surface.write(event.key)

    # -- Editing ---------------------------------------------------------------

    def _backspace(self) -> None:
        buffer = self._session.input_buffer
        if not buffer:
            return
        buffer.pop()
        self._surface.write(ERASE)

    def _submit(self) -> None:
        self._surface.write_line("")
        line = self._session.input_text.strip()
        self._session.input_buffer.clear()

        command = self._commands.get(line.lower())
        if command is not None:
            logger.debug(f"[terminal] {self._session.context.name}: {line.lower()}")
            command()
        elif line:
            self._unrecognized(line)
        else:
            self._prompt()

    # -- Commands --------------------------------------------------------------

    def _help(self) -> None:
        surface = self._surface
        surface.write_line("Available commands:")
        for command, description in COMMAND_HELP:
            description = description.format(name=self._session.context.name)
            surface.write_line(f"  {command} - {description}")
        self._prompt()

    def _exit(self) -> None:
        self._surface.write_line("Closing session...")
        self._session.state = "closing"
        self._controller.schedule(
            self._session, EXIT_GRACE_MS, self._controller.close, label="exit"
        )

    def _clear(self) -> None:
        self._surface.clear()
        self._prompt()

    def _info(self) -> None:
        context = self._session.context
        surface = self._surface
        surface.write_line(f"Project: {context.name}")
        surface.write_line(f"Language: {context.language}")
        surface.write_line(f"Topics: {', '.join(context.topics)}")
        self._prompt()

    def _unrecognized(self, line: str) -> None:
        self._surface.write_line(f"Command not recognized: {line}")
        self._surface.write_line(HELP_HINT)
        self._prompt()

    def _prompt(self) -> None:
        self._surface.write(PROMPT)
