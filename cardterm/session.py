"""Terminal session lifecycle: open, close and token-guarded scheduling."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from .errors import AlreadyOpenError
from .interpreter import LineInterpreter
from .sequencer import BootSequencer
from .types import KeyEvent, SessionContext, SessionState

if TYPE_CHECKING:
    from .clock import Scheduler
    from .surface import Container, Surface


@dataclass(eq=False)
class Session:
    """State for one open/close cycle of a terminal.

    The instance itself is the validity token: a scheduled callback only
    runs while the controller's live session is the one that scheduled it.
    """

    context: SessionContext
    surface: Surface | None
    state: SessionState = "booting"
    input_buffer: list[str] = field(default_factory=list)
    pending_timers: set[int] = field(default_factory=set)
    boot_steps_remaining: int = 0
    interpreter: LineInterpreter | None = None

    @property
    def input_text(self) -> str:
        return "".join(self.input_buffer)


class TerminalController:
    """Owns the open/close state of a card's terminal and its surface.

    Example::

        clock = VirtualClock()
        terminal = TerminalController(ScreenSurface, clock)
        terminal.open(SessionContext("tetris", "Python", ["game"]))
        clock.run_until_idle()
        for event in keys_for("help"):
            terminal.handle_key(event)
    """

    def __init__(
        self,
        surface_factory: Callable[[], Surface],
        scheduler: Scheduler,
        *,
        container: Container | None = None,
    ) -> None:
        self._surface_factory = surface_factory
        self._scheduler = scheduler
        self._container = container
        self._session: Session | None = None
        self._timer_seq = 0

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return "closed"
        return self._session.state

    @property
    def is_open(self) -> bool:
        return self._session is not None

    # -- Lifecycle -------------------------------------------------------------

    def open(self, context: SessionContext) -> Session:
        """Acquire a surface and start the boot sequence."""
        if self._session is not None:
            raise AlreadyOpenError(
                message=(
                    f"Terminal for {self._session.context.name!r} is already "
                    f"{self._session.state}"
                ),
                state=self._session.state,
            )

        surface = self._surface_factory()
        try:
            surface.mount(self._container)
        except Exception:
            surface.dispose()
            raise

        session = Session(context=context, surface=surface)
        self._session = session
        logger.info(
            f"[terminal] opened session for {context.name} ({context.language or 'unknown'})"
        )
        BootSequencer(self).start(session)
        return session

    def close(self) -> None:
        """Invalidate the live session and release its surface.

        Safe to call at any time; only the first call after ``open()`` has
        an effect.
        """
        session = self._session
        if session is None:
            return

        self._session = None
        session.state = "closing"
        session.input_buffer.clear()
        session.interpreter = None
        dropped = len(session.pending_timers)
        session.pending_timers.clear()

        surface, session.surface = session.surface, None
        try:
            if surface is not None:
                surface.dispose()
        finally:
            session.state = "closed"
        logger.info(
            f"[terminal] closed session for {session.context.name} "
            f"({dropped} pending timer(s) invalidated)"
        )

    def toggle(self, context: SessionContext) -> bool:
        """Open when closed, close otherwise. Returns whether a session is open."""
        if self._session is None:
            self.open(context)
            return True
        self.close()
        return False

    # -- Input -----------------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> None:
        """Forward a key event to the interpreter once the session is interactive."""
        session = self._session
        if session is None or session.interpreter is None:
            logger.debug(f"[terminal] ignoring key {event.key!r} in state {self.state}")
            return
        session.interpreter.handle_key(event)

    # -- Scheduling ------------------------------------------------------------

    def schedule(
        self,
        session: Session,
        delay_ms: int,
        effect: Callable[[], None],
        *,
        label: str = "",
    ) -> int:
        """Run ``effect`` after ``delay_ms`` unless ``session`` is no longer live."""
        self._timer_seq += 1
        seq = self._timer_seq
        session.pending_timers.add(seq)

        def fire() -> None:
            session.pending_timers.discard(seq)
            if self._session is not session:
                logger.debug(f"[terminal] dropped stale timer #{seq} {label}".rstrip())
                return
            effect()

        self._scheduler.call_later(delay_ms, fire)
        logger.debug(f"[terminal] scheduled timer #{seq} in {delay_ms}ms {label}".rstrip())
        return seq

    def install_interpreter(self, session: Session) -> None:
        """Hand the session's input over to a line interpreter."""
        if self._session is not session:
            return
        session.input_buffer.clear()
        session.interpreter = LineInterpreter(self, session)
        session.state = "interactive"
        logger.debug(f"[terminal] {session.context.name} is interactive")
