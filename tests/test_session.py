"""Tests for cardterm.session — TerminalController lifecycle and boot timing."""

from collections.abc import Callable

import pytest

from cardterm.clock import VirtualClock
from cardterm.errors import AlreadyOpenError
from cardterm.session import TerminalController
from cardterm.surface import ScreenSurface
from cardterm.types import KeyEvent, SessionContext, keys_for


class CountingSurface(ScreenSurface):
    def __init__(self) -> None:
        super().__init__()
        self.dispose_calls = 0

    def dispose(self) -> None:
        self.dispose_calls += 1
        super().dispose()


class ShuffledScheduler:
    """Collects callbacks and fires them in whatever order the test asks."""

    def __init__(self) -> None:
        self.callbacks: list[tuple[int, Callable[[], None]]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.callbacks.append((delay_ms, callback))


def make_terminal(**kwargs):
    clock = VirtualClock()
    surfaces: list[CountingSurface] = []

    def factory() -> CountingSurface:
        surface = CountingSurface()
        surfaces.append(surface)
        return surface

    return TerminalController(factory, clock, **kwargs), clock, surfaces


def make_context(language: str = "Python") -> SessionContext:
    return SessionContext("tetris", language, ("game", "pygame"))


def type_line(terminal: TerminalController, text: str) -> None:
    for event in keys_for(text):
        terminal.handle_key(event)


class TestOpen:
    def test_open_acquires_surface_and_boots(self):
        terminal, _, surfaces = make_terminal()
        session = terminal.open(make_context())
        assert terminal.state == "booting"
        assert terminal.is_open
        assert session.surface is surfaces[0]
        assert surfaces[0].mounted is True
        assert session.input_buffer == []

    def test_open_twice_raises_without_state_change(self):
        terminal, _, surfaces = make_terminal()
        session = terminal.open(make_context())
        with pytest.raises(AlreadyOpenError) as exc:
            terminal.open(make_context("Java"))
        assert exc.value.state == "booting"
        assert terminal.session is session
        assert len(surfaces) == 1

    def test_open_while_interactive_raises(self):
        terminal, clock, _ = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()
        with pytest.raises(AlreadyOpenError):
            terminal.open(make_context())
        assert terminal.state == "interactive"

    def test_mount_into_container(self):
        rendered: list[str] = []
        terminal, clock, _ = make_terminal(container=rendered.append)
        terminal.open(make_context())
        clock.advance(0)
        assert rendered[-1] == "> Initializing Python project environment..."

    def test_failed_mount_releases_surface(self):
        disposed: list[bool] = []

        class BrokenSurface(ScreenSurface):
            def mount(self, container):
                raise RuntimeError("no container")

            def dispose(self):
                disposed.append(True)
                super().dispose()

        terminal = TerminalController(BrokenSurface, VirtualClock())
        with pytest.raises(RuntimeError):
            terminal.open(make_context())
        assert disposed == [True]
        assert terminal.state == "closed"


class TestBootTiming:
    def test_lines_appear_at_offsets(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        surface = surfaces[0]
        assert surface.transcript == []

        clock.advance(0)
        assert surface.output_lines() == [
            "> Initializing Python project environment...",
            "",
        ]
        clock.advance(299)
        assert len(surface.transcript) == 1
        clock.advance(1)
        assert "> Loading dependencies..." in surface.output_lines()
        clock.advance(700)
        assert "> Setting up development server..." in surface.output_lines()
        clock.advance(1000)
        assert "$ python main.py" in surface.output_lines()
        assert terminal.state == "booting"
        clock.advance(999)
        assert terminal.state == "booting"
        clock.advance(1)
        assert terminal.state == "interactive"

    def test_python_boot_transcript(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context("Python"))
        clock.run_until_idle()
        assert surfaces[0].output_lines() == [
            "> Initializing Python project environment...",
            "> Loading dependencies...",
            "> Setting up development server...",
            "> Project ready! Running tetris with Python...",
            "",
            "$ python main.py",
            "",
            "Starting application...",
            "Loaded modules successfully",
            "Welcome to tetris!",
            'Type "help" for available commands',
            "> ",
        ]

    def test_javascript_boot_transcript(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context("JavaScript"))
        clock.run_until_idle()
        lines = surfaces[0].output_lines()
        assert "$ npm start" in lines
        assert "Compiled successfully!" in lines
        assert "  Local:            http://localhost:3000" in lines
        assert "  On Your Network:  http://192.168.1.5:3000" in lines
        assert terminal.state == "interactive"

    def test_generic_boot_transcript(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context("Haskell"))
        clock.run_until_idle()
        lines = surfaces[0].output_lines()
        assert "$ start" in lines
        assert lines[-3:] == ["tetris started successfully!", "Ready for input...", "> "]

    def test_keys_ignored_while_booting(self):
        terminal, clock, surfaces = make_terminal()
        session = terminal.open(make_context())
        clock.advance(1500)
        type_line(terminal, "help")
        assert session.input_buffer == []
        assert "help" not in "".join(surfaces[0].transcript)

    def test_pending_timers_tracked(self):
        terminal, clock, _ = make_terminal()
        session = terminal.open(make_context())
        assert len(session.pending_timers) == 5
        clock.advance(300)
        assert len(session.pending_timers) == 3
        clock.run_until_idle()
        assert session.pending_timers == set()


class TestFiringOrder:
    def test_interpreter_installed_after_last_write_in_any_order(self):
        scheduler = ShuffledScheduler()
        writes: list[str] = []

        class RecordingSurface(ScreenSurface):
            def write(self, text):
                writes.append(terminal.state)
                super().write(text)

        terminal = TerminalController(RecordingSurface, scheduler)
        session = terminal.open(make_context())
        callbacks = [cb for _, cb in reversed(scheduler.callbacks)]

        for callback in callbacks[:-1]:
            callback()
            assert session.interpreter is None
            assert terminal.state == "booting"

        callbacks[-1]()
        assert terminal.state == "interactive"
        assert session.interpreter is not None
        assert set(writes) == {"booting"}


class TestClose:
    def test_close_disposes_once(self):
        terminal, clock, surfaces = make_terminal()
        session = terminal.open(make_context())
        clock.run_until_idle()
        terminal.close()
        terminal.close()
        assert surfaces[0].dispose_calls == 1
        assert terminal.state == "closed"
        assert session.state == "closed"
        assert session.surface is None
        assert terminal.session is None

    def test_close_without_open_is_noop(self):
        terminal, _, surfaces = make_terminal()
        terminal.close()
        assert surfaces == []
        assert terminal.state == "closed"

    def test_close_mid_boot_drops_remaining_lines(self):
        terminal, clock, surfaces = make_terminal()
        session = terminal.open(make_context())
        clock.advance(500)
        written = list(surfaces[0].transcript)
        terminal.close()
        assert session.pending_timers == set()

        clock.run_until_idle()
        assert surfaces[0].transcript == written
        assert surfaces[0].dispose_calls == 1
        assert terminal.state == "closed"

    def test_close_clears_input_buffer(self):
        terminal, clock, _ = make_terminal()
        session = terminal.open(make_context())
        clock.run_until_idle()
        for event in keys_for("hex", submit=False):
            terminal.handle_key(event)
        terminal.handle_key(KeyEvent.backspace_key())
        for event in keys_for("lp", submit=False):
            terminal.handle_key(event)
        assert session.input_text == "help"
        terminal.close()
        assert session.input_buffer == []

    def test_keys_after_close_are_ignored(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()
        terminal.close()
        type_line(terminal, "help")
        assert surfaces[0].dispose_calls == 1

    def test_dispose_once_per_open_over_many_cycles(self):
        terminal, clock, surfaces = make_terminal()
        for elapsed in (0, 250, 1200, 5000):
            terminal.open(make_context())
            clock.advance(elapsed)
            terminal.close()
        clock.run_until_idle()
        assert [s.dispose_calls for s in surfaces] == [1, 1, 1, 1]


class TestReopen:
    def test_reopen_builds_fresh_session(self):
        terminal, clock, surfaces = make_terminal()
        first = terminal.open(make_context())
        clock.advance(500)
        terminal.close()

        second = terminal.open(make_context("Java"))
        assert second is not first
        assert second.surface is surfaces[1]
        clock.run_until_idle()

        lines = surfaces[1].output_lines()
        assert lines.count("> Initializing Java project environment...") == 1
        assert "> Initializing Python project environment..." not in lines
        assert terminal.state == "interactive"

    def test_old_timers_do_not_touch_new_session(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        terminal.close()
        terminal.open(make_context("Rust"))
        clock.run_until_idle()
        assert surfaces[0].transcript == []
        assert surfaces[0].dispose_calls == 1
        assert surfaces[1].dispose_calls == 0


class TestToggle:
    def test_toggle_opens_then_closes(self):
        terminal, clock, surfaces = make_terminal()
        assert terminal.toggle(make_context()) is True
        assert terminal.state == "booting"
        clock.advance(100)
        assert terminal.toggle(make_context()) is False
        assert terminal.state == "closed"
        assert surfaces[0].dispose_calls == 1


class TestExit:
    def test_exit_closes_after_grace_delay(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()
        type_line(terminal, "exit")
        assert "Closing session..." in surfaces[0].output_lines()
        assert terminal.state == "closing"

        clock.advance(999)
        assert terminal.state == "closing"
        assert surfaces[0].dispose_calls == 0
        clock.advance(1)
        assert terminal.state == "closed"
        assert surfaces[0].dispose_calls == 1

    def test_exit_then_immediate_close_disposes_once(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()
        type_line(terminal, "exit")
        terminal.close()
        clock.advance(1000)
        assert surfaces[0].dispose_calls == 1
        assert terminal.state == "closed"

    def test_exit_grace_does_not_close_next_session(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()
        type_line(terminal, "exit")
        clock.advance(200)
        terminal.close()
        terminal.open(make_context())
        clock.advance(800)
        assert terminal.state == "booting"
        assert surfaces[1].dispose_calls == 0

    def test_open_while_closing_raises(self):
        terminal, clock, _ = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()
        type_line(terminal, "exit")
        with pytest.raises(AlreadyOpenError) as exc:
            terminal.open(make_context())
        assert exc.value.state == "closing"

    def test_keys_ignored_while_closing(self):
        terminal, clock, surfaces = make_terminal()
        session = terminal.open(make_context())
        clock.run_until_idle()
        type_line(terminal, "exit")
        before = list(surfaces[0].transcript)
        type_line(terminal, "help")
        assert surfaces[0].transcript == before
        assert session.input_buffer == []


class TestScenario:
    def test_help_bogus_exit(self):
        terminal, clock, surfaces = make_terminal()
        terminal.open(make_context())
        clock.run_until_idle()

        type_line(terminal, "help")
        type_line(terminal, "bogus")
        type_line(terminal, "exit")
        lines = surfaces[0].output_lines()

        help_at = lines.index("Available commands:")
        bogus_at = lines.index("Command not recognized: bogus")
        exit_at = lines.index("Closing session...")
        assert help_at < bogus_at < exit_at
        assert lines[help_at + 1 : help_at + 5] == [
            "  help - Display this help menu",
            "  exit - Close the terminal",
            "  clear - Clear the terminal",
            "  info - Show info about tetris",
        ]

        clock.advance(1000)
        assert terminal.state == "closed"
        assert surfaces[0].dispose_calls == 1
