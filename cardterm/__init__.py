"""cardterm — simulated project terminals for portfolio cards."""

__version__ = "0.1.0"

from .card import ProjectCard
from .clock import AsyncioScheduler, Scheduler, VirtualClock
from .errors import (
    AlreadyOpenError,
    AuthenticationError,
    CardtermError,
    ConnectionError,
    GitHubError,
    NotFoundError,
    RateLimitError,
    SurfaceDisposedError,
    TimeoutError,
    ValidationError,
)
from .github import GitHub
from .interpreter import LineInterpreter
from .sequencer import BootSequencer, BootStep, boot_script, run_command
from .session import Session, TerminalController
from .surface import ScreenSurface, Surface
from .types import (
    ContentEntry,
    KeyEvent,
    Repository,
    SessionContext,
    SessionState,
    keys_for,
)

__all__ = [
    # Session
    "TerminalController",
    "Session",
    "LineInterpreter",
    "BootSequencer",
    "BootStep",
    "boot_script",
    "run_command",
    # Surfaces and scheduling
    "Surface",
    "ScreenSurface",
    "Scheduler",
    "VirtualClock",
    "AsyncioScheduler",
    # GitHub
    "GitHub",
    "ProjectCard",
    # Errors
    "CardtermError",
    "AlreadyOpenError",
    "SurfaceDisposedError",
    "GitHubError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
    "AuthenticationError",
    "TimeoutError",
    "ConnectionError",
    # Types
    "SessionContext",
    "SessionState",
    "KeyEvent",
    "keys_for",
    "Repository",
    "ContentEntry",
]
