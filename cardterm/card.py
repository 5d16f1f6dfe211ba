"""Project card — decides between a live demo link and a simulated terminal."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import SessionContext

if TYPE_CHECKING:
    from .session import TerminalController
    from .types import Repository

MAX_TOPIC_BADGES = 3


class ProjectCard:
    """A repository shown on the portfolio.

    Cards with a live site link to it. Cards without one, but with a known
    language, get a "Run Code" button that toggles a simulated terminal.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        username: str,
        has_html_file: bool,
        terminal: TerminalController,
    ) -> None:
        self.repository = repository
        self.username = username
        self.has_html_file = has_html_file
        self.terminal = terminal

    @property
    def live_url(self) -> str | None:
        if self.repository.homepage:
            return self.repository.homepage
        if self.has_html_file:
            return f"https://{self.username}.github.io/{self.repository.name}/"
        return None

    @property
    def can_run(self) -> bool:
        return self.live_url is None and bool(self.repository.language)

    @property
    def terminal_title(self) -> str:
        return f"{self.repository.name} Terminal"

    @property
    def terminal_open(self) -> bool:
        return self.terminal.is_open

    def context(self) -> SessionContext:
        return SessionContext(
            name=self.repository.name,
            language=self.repository.language,
            topics=tuple(self.repository.topics),
        )

    def topic_badges(self) -> list[str]:
        topics = list(self.repository.topics)
        badges = topics[:MAX_TOPIC_BADGES]
        if len(topics) > MAX_TOPIC_BADGES:
            badges.append(f"+{len(topics) - MAX_TOPIC_BADGES}")
        return badges

    def run_code(self) -> bool:
        """Toggle the terminal. Returns whether it is now open."""
        if not self.can_run:
            raise ValueError(
                f"{self.repository.name} has a live demo or no language to run"
            )
        return self.terminal.toggle(self.context())

    def close_terminal(self) -> None:
        self.terminal.close()
