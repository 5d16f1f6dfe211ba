"""Type definitions for cardterm."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

# ---------------------------------------------------------------------------
# Enums / Literal unions
# ---------------------------------------------------------------------------

SessionState = Literal[
    "closed",
    "booting",
    "interactive",
    "closing",
]

ContentType = Literal["file", "dir", "symlink", "submodule"]

# ---------------------------------------------------------------------------
# Session types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionContext:
    """Display strings captured when a terminal session opens."""

    name: str
    language: str
    topics: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable snapshot.
        object.__setattr__(self, "topics", tuple(self.topics))


@dataclass(frozen=True)
class KeyEvent:
    """A raw key event forwarded from the hosting UI."""

    key: str = ""
    enter: bool = False
    backspace: bool = False

    @classmethod
    def char(cls, key: str) -> KeyEvent:
        return cls(key=key)

    @classmethod
    def enter_key(cls) -> KeyEvent:
        return cls(key="\r", enter=True)

    @classmethod
    def backspace_key(cls) -> KeyEvent:
        return cls(key="\x7f", backspace=True)


def keys_for(text: str, *, submit: bool = True) -> list[KeyEvent]:
    """Expand typed text into per-character key events."""
    events = [KeyEvent.char(ch) for ch in text]
    if submit:
        events.append(KeyEvent.enter_key())
    return events


# ---------------------------------------------------------------------------
# GitHub types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Repository:
    """Repository metadata shown on a project card."""

    name: str
    description: str
    language: str
    html_url: str
    homepage: str | None = None
    topics: Sequence[str] = field(default_factory=tuple)
    updated_at: str = ""
    stargazers: int = 0
    forks: int = 0


@dataclass(frozen=True)
class ContentEntry:
    """A file or directory in a repository listing."""

    type: ContentType
    name: str
    path: str
    sha: str
    size: int | None = None
    url: str | None = None
