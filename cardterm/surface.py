"""Text surfaces a terminal session writes to."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import pyte

from .errors import SurfaceDisposedError

DEFAULT_COLUMNS = 80
DEFAULT_ROWS = 20
DEFAULT_HISTORY = 1000

Container = Callable[[str], None]


class Surface(Protocol):
    """The narrow capability a session needs from a terminal widget."""

    def write(self, text: str) -> None: ...

    def write_line(self, text: str) -> None: ...

    def clear(self) -> None: ...

    def mount(self, container: Container | None) -> None: ...

    def dispose(self) -> None: ...


class ScreenSurface:
    """In-memory terminal surface backed by a pyte screen.

    Control sequences (``\\b``, ``\\r\\n``) are interpreted the way a real
    terminal would, so ``lines()`` shows what a user would see. ``transcript``
    keeps every chunk written, in order, since the last ``clear()``.

    If mounted into a container, the container is called with the rendered
    text after every change.
    """

    def __init__(
        self,
        *,
        columns: int = DEFAULT_COLUMNS,
        rows: int = DEFAULT_ROWS,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        self.columns = columns
        self.rows = rows
        self._history = history
        self._container: Container | None = None
        self.mounted = False
        self.disposed = False
        self.transcript: list[str] = []
        self._screen, self._stream = self._new_terminal()

    # -- Surface capability ----------------------------------------------------

    def mount(self, container: Container | None) -> None:
        self._check_live()
        self._container = container
        self.mounted = True
        self._render()

    def write(self, text: str) -> None:
        self._check_live()
        if not text:
            return
        self.transcript.append(text)
        self._stream.feed(text)
        self._render()

    def write_line(self, text: str) -> None:
        self.write(text + "\r\n")

    def clear(self) -> None:
        self._check_live()
        self.transcript.clear()
        self._screen, self._stream = self._new_terminal()
        self._render()

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.mounted = False
        self._container = None

    # -- Inspection ------------------------------------------------------------

    def lines(self) -> list[str]:
        """Rendered lines including scrollback, trailing blanks removed."""
        history_lines: list[str] = []
        for line in self._screen.history.top:
            history_lines.append(
                "".join(
                    line[x].data if x in line else " " for x in range(self.columns)
                ).rstrip()
            )
        rendered = history_lines + [line.rstrip() for line in self._screen.display]
        while rendered and not rendered[-1]:
            rendered.pop()
        return rendered

    def text(self) -> str:
        return "\n".join(self.lines())

    def output_lines(self) -> list[str]:
        """The transcript split into logical lines, ignoring cursor movement."""
        return "".join(self.transcript).split("\r\n")

    # -- Internals -------------------------------------------------------------

    def _new_terminal(self) -> tuple[pyte.HistoryScreen, pyte.Stream]:
        screen = pyte.HistoryScreen(self.columns, self.rows, history=self._history)
        screen.set_mode(pyte.modes.LNM)
        return screen, pyte.Stream(screen)

    def _check_live(self) -> None:
        if self.disposed:
            raise SurfaceDisposedError(message="Surface has been disposed")

    def _render(self) -> None:
        if self._container is not None:
            self._container(self.text())
