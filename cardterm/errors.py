"""Typed error hierarchy for cardterm."""

from __future__ import annotations

from typing import Literal

ErrorCode = Literal[
    "already_open",
    "surface_disposed",
    "bad_request",
    "unauthorized",
    "forbidden",
    "not_found",
    "rate_limited",
    "validation_error",
    "internal_error",
    "service_unavailable",
    "timeout",
    "connection_error",
]


class CardtermError(Exception):
    """Base error for all cardterm errors."""

    def __init__(self, *, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code


class AlreadyOpenError(CardtermError):
    """A terminal session is already open on this controller."""

    def __init__(self, *, message: str, state: str) -> None:
        super().__init__(code="already_open", message=message)
        self.state = state


class SurfaceDisposedError(CardtermError):
    """Output was written to a surface after it was disposed."""

    def __init__(self, *, message: str) -> None:
        super().__init__(code="surface_disposed", message=message)


# ---------------------------------------------------------------------------
# GitHub API errors
# ---------------------------------------------------------------------------


class GitHubError(CardtermError):
    """Base error for GitHub API failures."""

    def __init__(
        self,
        *,
        code: ErrorCode,
        message: str,
        status: int,
        request_id: str,
    ) -> None:
        super().__init__(code=code, message=message)
        self.status = status
        self.request_id = request_id


class NotFoundError(GitHubError):
    """Repository, user or path not found (HTTP 404)."""

    def __init__(self, *, message: str, request_id: str) -> None:
        super().__init__(
            code="not_found", message=message, status=404, request_id=request_id
        )


class RateLimitError(GitHubError):
    """Rate limited (HTTP 429, or 403 with an exhausted quota)."""

    def __init__(
        self,
        *,
        message: str,
        request_id: str,
        retry_after: float,
        status: int = 429,
    ) -> None:
        super().__init__(
            code="rate_limited",
            message=message,
            status=status,
            request_id=request_id,
        )
        self.retry_after = retry_after


class ValidationError(GitHubError):
    """Validation failed (HTTP 422)."""

    def __init__(self, *, message: str, request_id: str) -> None:
        super().__init__(
            code="validation_error",
            message=message,
            status=422,
            request_id=request_id,
        )


class AuthenticationError(GitHubError):
    """Authentication failed, bad or missing token (HTTP 401)."""

    def __init__(self, *, message: str, request_id: str) -> None:
        super().__init__(
            code="unauthorized", message=message, status=401, request_id=request_id
        )


class TimeoutError(GitHubError):
    """Request timed out before receiving a response."""

    def __init__(self, *, message: str, timeout_ms: int) -> None:
        super().__init__(
            code="timeout", message=message, status=0, request_id=""
        )
        self.timeout_ms = timeout_ms


class ConnectionError(GitHubError):
    """Network-level failure, could not connect to the server."""

    def __init__(
        self, *, message: str, cause: Exception | None = None
    ) -> None:
        super().__init__(
            code="connection_error", message=message, status=0, request_id=""
        )
        self.__cause__ = cause
