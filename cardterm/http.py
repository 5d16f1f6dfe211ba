"""Internal GitHub HTTP client with retry, backoff and error parsing."""

from __future__ import annotations

import random
import time
from typing import Any

import httpx
from loguru import logger

from .errors import (
    AuthenticationError,
    ConnectionError,
    GitHubError,
    NotFoundError,
    RateLimitError,
    TimeoutError,
    ValidationError,
)

MAX_RATE_LIMIT_WAIT_S = 60.0
GITHUB_ACCEPT = "application/vnd.github.v3+json"
GITHUB_RAW_ACCEPT = "application/vnd.github.raw"


def _backoff_delay(attempt: int) -> float:
    """Exponential backoff with jitter."""
    base = min(1.0 * (2**attempt), 30.0)
    jitter = random.random() * base * 0.5  # noqa: S311
    return base + jitter


class HttpClient:
    """Internal HTTP client for the GitHub REST API."""

    def __init__(
        self,
        *,
        token: str | None,
        base_url: str,
        timeout: float,
        retries: int,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {"Accept": accept}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        timeout: float | None = None,
        raw: bool = False,
    ) -> Any:
        """Make an API request with retry logic.

        Returns decoded JSON, or the response text when ``raw`` is set.
        """
        headers = self._headers(GITHUB_RAW_ACCEPT if raw else GITHUB_ACCEPT)
        params = _build_params(query) if query else None
        effective_timeout = timeout if timeout is not None else self._timeout

        last_error: Exception | None = None

        for attempt in range(self._retries + 1):
            if attempt > 0 and last_error is not None:
                if isinstance(last_error, RateLimitError):
                    delay = min(last_error.retry_after, MAX_RATE_LIMIT_WAIT_S)
                else:
                    delay = _backoff_delay(attempt - 1)
                logger.debug(
                    f"[github] retrying {method} {path} in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self._retries + 1})"
                )
                time.sleep(delay)

            try:
                response = self._client.request(
                    method,
                    path,
                    headers=headers,
                    params=params,
                    timeout=effective_timeout,
                )

                if response.is_success:
                    if response.status_code == 204:
                        return None
                    if raw:
                        return response.text
                    return response.json()

                error = _parse_error_response(response)

                if isinstance(error, RateLimitError) and attempt < self._retries:
                    last_error = error
                    continue

                if response.status_code >= 500 and attempt < self._retries:
                    last_error = error
                    continue

                raise error

            except httpx.TimeoutException as exc:
                if attempt < self._retries:
                    last_error = exc
                    continue
                raise TimeoutError(
                    message=f"Request timed out after {effective_timeout}s",
                    timeout_ms=int(effective_timeout * 1000),
                ) from exc

            except (httpx.ConnectError, httpx.NetworkError, OSError) as exc:
                if attempt < self._retries:
                    last_error = exc
                    continue
                raise ConnectionError(
                    message=str(exc) or "Network request failed",
                    cause=exc,
                ) from exc

        # Exhausted retries
        if last_error is not None:
            raise _wrap_raw_error(last_error, effective_timeout)
        raise ConnectionError(  # pragma: no cover
            message="Request failed after retries"
        )


def _build_params(
    query: dict[str, Any],
) -> dict[str, str]:
    """Build query params, filtering out None values."""
    return {k: str(v) for k, v in query.items() if v is not None}


def _try_parse_json(response: httpx.Response) -> dict[str, Any] | None:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _retry_after(response: httpx.Response) -> float:
    """Seconds to wait before retrying a rate-limited request."""
    header = response.headers.get("retry-after")
    if header:
        try:
            return max(float(header), 0.0)
        except ValueError:
            pass
    reset = response.headers.get("x-ratelimit-reset")
    if reset:
        try:
            return max(float(reset) - time.time(), 1.0)
        except ValueError:
            pass
    return 1.0


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return (
        response.status_code == 403
        and response.headers.get("x-ratelimit-remaining") == "0"
    )


def _parse_error_response(response: httpx.Response) -> GitHubError:
    status = response.status_code
    error_body = _try_parse_json(response)
    request_id = response.headers.get("x-github-request-id", "")
    message = (error_body or {}).get("message", f"HTTP {status}")

    if _is_rate_limited(response):
        return RateLimitError(
            message=message,
            request_id=request_id,
            retry_after=_retry_after(response),
            status=status,
        )
    if status == 401:
        return AuthenticationError(message=message, request_id=request_id)
    if status == 404:
        return NotFoundError(message=message, request_id=request_id)
    if status == 422:
        return ValidationError(message=message, request_id=request_id)
    if status == 400:
        code = "bad_request"
    elif status == 403:
        code = "forbidden"
    elif status == 503:
        code = "service_unavailable"
    else:
        code = "internal_error"
    return GitHubError(
        code=code,
        message=message,
        status=status,
        request_id=request_id,
    )


def _wrap_raw_error(error: Exception, timeout: float) -> GitHubError:
    if isinstance(error, GitHubError):
        return error
    if isinstance(error, httpx.TimeoutException):
        return TimeoutError(
            message=f"Request timed out after {timeout}s",
            timeout_ms=int(timeout * 1000),
        )
    return ConnectionError(
        message=str(error) or "Network request failed",
        cause=error,
    )
