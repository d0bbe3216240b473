"""Async GitHub REST client with rate-limit aware retries and log redaction."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Awaitable, Callable

import httpx

from forkpress.config.settings import settings
from forkpress.crawlers.github.contracts import (
    ContentContract,
    FetchResult,
    FetchState,
    RepoContract,
    TreeContract,
)

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"
RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"
JSON_MEDIA_TYPE = "application/vnd.github.v3+json"

_SENSITIVE_KEY = re.compile(r"(token|secret|password|authorization|api[_-]?key|session|cookie)", re.IGNORECASE)
_PAYLOAD_KEY = re.compile(r"^(body|content|readme|payload|raw_text|summary)$", re.IGNORECASE)
_INLINE_SECRETS = (
    (re.compile(r"(?i)\b(bearer|token)\s+[A-Za-z0-9_\-\.=]+"), r"\1 " + REDACTED),
    (re.compile(r"(?i)\b(access_token|token|api_key|apikey|key|secret)=([^&\s]+)"), r"\1=" + REDACTED),
)
_RESERVED_LOG_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys() | {"message", "asctime"}
)


class GitHubFetchError(Exception):
    """Raised when a GitHub request the run cannot do without fails."""


def sanitize_for_log(value: Any, key: str | None = None) -> Any:
    """Strip credentials and bulky payloads from a value before logging it."""
    if key is not None and _SENSITIVE_KEY.search(key) and not isinstance(value, (dict, list, tuple)):
        return REDACTED
    if key is not None and _PAYLOAD_KEY.match(key) and isinstance(value, str):
        return f"<redacted payload {len(value)} chars>"
    if isinstance(value, dict):
        return {k: sanitize_for_log(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_for_log(item) for item in value]
    if isinstance(value, str):
        cleaned = value
        for pattern, replacement in _INLINE_SECRETS:
            cleaned = pattern.sub(replacement, cleaned)
        return cleaned
    return value


def sanitize_log_extra(**fields: Any) -> dict[str, Any]:
    """Build a logging ``extra`` mapping with every field sanitized."""
    extra: dict[str, Any] = {}
    for key, value in fields.items():
        safe_key = f"ctx_{key}" if key in _RESERVED_LOG_ATTRS else key
        extra[safe_key] = sanitize_for_log(value, key=key)
    return extra


class GitHubClient:
    """Thin GitHub REST client returning :class:`FetchResult` contracts.

    Only the paginated listing raises; every other call reports failure
    through ``FetchState.FAILED`` so callers can degrade gracefully.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int | None = None,
        backoff_base_seconds: float = 1.0,
        backoff_max_seconds: float = 30.0,
        rate_limit_buffer_seconds: float = 1.0,
        timeout_seconds: float | None = None,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        token = token if token is not None else settings.GITHUB_TOKEN
        headers = {
            "Accept": JSON_MEDIA_TYPE,
            "User-Agent": settings.USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.GITHUB_API_URL,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds or settings.HTTP_TIMEOUT_SECONDS),
            follow_redirects=True,
            transport=transport,
        )
        self._max_retries = max(max_retries or settings.HTTP_MAX_RETRIES, 1)
        self._backoff_base = backoff_base_seconds
        self._backoff_max = backoff_max_seconds
        self._rate_limit_buffer = rate_limit_buffer_seconds
        self._sleep = sleeper

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_user_repos(self, username: str, *, per_page: int = 100, max_pages: int = 50) -> list[dict[str, Any]]:
        """Fetch every public repository of ``username``, newest update first.

        Raises:
            GitHubFetchError: if any page cannot be fetched.
        """
        repositories: list[dict[str, Any]] = []
        for page in range(1, max_pages + 1):
            result = await self._request(
                f"/users/{username}/repos",
                params={"sort": "updated", "per_page": per_page, "page": page},
            )
            if result.is_failed:
                raise GitHubFetchError(
                    f"GitHub API error listing repositories for {username}: "
                    f"status={result.status_code} error={sanitize_for_log(result.error)}"
                )
            batch = result.data or []
            repositories.extend(batch)
            if len(batch) < per_page:
                break
        return repositories

    async def get_repo(self, full_name: str) -> RepoContract:
        return await self._request(f"/repos/{full_name}")

    async def get_readme(self, full_name: str) -> ContentContract:
        return await self._request(f"/repos/{full_name}/readme", accept=RAW_MEDIA_TYPE)

    async def get_tree(self, full_name: str, ref: str = "HEAD") -> TreeContract:
        return await self._request(f"/repos/{full_name}/git/trees/{ref}", params={"recursive": 1})

    async def _request(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> FetchResult[Any]:
        headers = {"Accept": accept} if accept else None
        last_status: int | None = None
        last_error: str | None = None

        for attempt in range(1, self._max_retries + 1):
            try:
                response = await self._client.get(path, params=params, headers=headers)
            except httpx.HTTPError as exc:
                last_status, last_error = None, f"{type(exc).__name__}: {exc}"
                if attempt < self._max_retries:
                    await self._sleep(self._backoff(attempt))
                continue

            if response.status_code == 200:
                return self._parse_ok(response, raw=accept == RAW_MEDIA_TYPE)

            last_status = response.status_code
            last_error = f"HTTP {response.status_code}: {response.text[:200]}"

            if self._is_rate_limited(response) or response.status_code >= 500:
                if attempt < self._max_retries:
                    await self._sleep(self._retry_delay(response, attempt))
                continue
            break

        logger.warning(
            "GitHub request failed",
            extra=sanitize_log_extra(path=path, params=params, status_code=last_status, error=last_error),
        )
        return FetchResult(state=FetchState.FAILED, status_code=last_status, error=last_error)

    @staticmethod
    def _parse_ok(response: httpx.Response, *, raw: bool) -> FetchResult[Any]:
        if raw:
            text = response.text
            state = FetchState.OK if text.strip() else FetchState.EMPTY
            return FetchResult(state=state, data=text, status_code=200)

        try:
            data = response.json()
        except ValueError as exc:
            return FetchResult(state=FetchState.FAILED, status_code=200, error=f"Invalid JSON: {exc}")
        state = FetchState.OK if data else FetchState.EMPTY
        return FetchResult(state=state, data=data, status_code=200)

    @staticmethod
    def _is_rate_limited(response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code == 403:
            return (
                response.headers.get("x-ratelimit-remaining") == "0"
                or "retry-after" in response.headers
                or "x-ratelimit-reset" in response.headers
            )
        return False

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = response.headers.get("retry-after")
        if retry_after is not None:
            try:
                return min(float(retry_after) + self._rate_limit_buffer, self._backoff_max)
            except ValueError:
                pass

        reset_at = response.headers.get("x-ratelimit-reset")
        if reset_at is not None:
            try:
                wait = max(float(reset_at) - time.time(), 0.0)
                return min(wait + self._rate_limit_buffer, self._backoff_max)
            except ValueError:
                pass

        return self._backoff(attempt)

    def _backoff(self, attempt: int) -> float:
        return min(self._backoff_base * (2 ** (attempt - 1)), self._backoff_max)
