"""GitHub client — repository metadata for project cards."""

from __future__ import annotations

import base64
import os
from typing import TYPE_CHECKING, Any

from loguru import logger

from .card import ProjectCard
from .http import HttpClient
from .types import ContentEntry, Repository

if TYPE_CHECKING:
    from .session import TerminalController

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3
DEFAULT_PAGE_SIZE = 100


class GitHub:
    """Read-only GitHub client.

    The token is optional; without one requests are anonymous and subject
    to the lower unauthenticated rate limit.

    Example::

        with GitHub() as gh:
            for repo in gh.repos("octocat"):
                print(repo.name, repo.language)
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
    ) -> None:
        self._http = HttpClient(
            token=token or os.environ.get("GITHUB_TOKEN") or None,
            base_url=base_url
            or os.environ.get("CARDTERM_GITHUB_URL")
            or DEFAULT_BASE_URL,
            timeout=timeout or DEFAULT_TIMEOUT,
            retries=retries if retries is not None else DEFAULT_RETRIES,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def __enter__(self) -> GitHub:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # -- Repositories ----------------------------------------------------------

    def repos(
        self,
        username: str,
        *,
        sort: str = "updated",
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Repository]:
        """List a user's public repositories, most recently updated first."""
        res = self._http.request(
            "GET",
            f"/users/{username}/repos",
            query={"sort": sort, "per_page": limit},
        )
        logger.debug(f"[github] {username}: {len(res)} repositories")
        return [_repository(r) for r in res]

    def repo(self, owner: str, name: str) -> Repository:
        """Get a single repository."""
        res = self._http.request("GET", f"/repos/{owner}/{name}")
        return _repository(res)

    # -- Contents --------------------------------------------------------------

    def contents(self, owner: str, repo: str, path: str = "") -> list[ContentEntry]:
        """List a directory. A file path yields a one-element list."""
        res = self._http.request(
            "GET", f"/repos/{owner}/{repo}/contents/{path.strip('/')}"
        )
        items = res if isinstance(res, list) else [res]
        return [
            ContentEntry(
                type=item["type"],
                name=item["name"],
                path=item["path"],
                sha=item["sha"],
                size=item.get("size"),
                url=item.get("url"),
            )
            for item in items
        ]

    def read_file(self, owner: str, repo: str, entry: ContentEntry) -> str:
        """Fetch a file's text.

        Markdown is fetched raw; other files come base64-encoded in the
        contents payload and are decoded here.
        """
        if entry.type != "file":
            raise ValueError(f"{entry.path} is a {entry.type}, not a file")
        path = f"/repos/{owner}/{repo}/contents/{entry.path}"
        if entry.name.lower().endswith(".md"):
            return self._http.request("GET", path, raw=True)

        res = self._http.request("GET", path)
        content = res.get("content") or ""
        if res.get("encoding") == "base64" and content:
            return base64.b64decode(content.replace("\n", "")).decode(
                "utf-8", errors="replace"
            )
        return content

    def readme(self, owner: str, repo: str) -> str | None:
        """The text of the first README at the repository root, if any."""
        for entry in self.contents(owner, repo):
            if entry.type == "file" and entry.name.lower().startswith("readme"):
                return self.read_file(owner, repo, entry)
        return None

    def has_html_file(self, owner: str, repo: str) -> bool:
        """Whether the repository root has an HTML page to serve."""
        return any(
            entry.type == "file" and entry.name.lower().endswith(".html")
            for entry in self.contents(owner, repo)
        )

    # -- Cards -----------------------------------------------------------------

    def card(
        self, owner: str, name: str, terminal: TerminalController
    ) -> ProjectCard:
        """Build a project card for a repository."""
        repository = self.repo(owner, name)
        return ProjectCard(
            repository,
            username=owner,
            has_html_file=self.has_html_file(owner, name),
            terminal=terminal,
        )


def _repository(data: dict[str, Any]) -> Repository:
    return Repository(
        name=data["name"],
        description=data.get("description") or "",
        language=data.get("language") or "",
        html_url=data["html_url"],
        homepage=data.get("homepage") or None,
        topics=tuple(data.get("topics") or ()),
        updated_at=data.get("updated_at") or "",
        stargazers=data.get("stargazers_count", 0),
        forks=data.get("forks_count", 0),
    )
