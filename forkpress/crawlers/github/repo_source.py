"""Repository listing and per-repository context gathering."""

from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any

from forkpress.config.settings import settings
from forkpress.crawlers.github.client import sanitize_log_extra
from forkpress.models.repository import ParentRef, RepositoryRecord
from forkpress.utils.helpers import truncate_string

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class RepoContext:
    """Everything the article writer may use for one repository."""

    repo: RepositoryRecord
    readme: str | None = None
    file_tree: list[str] = field(default_factory=list)


class RepositorySource:
    """Turns GitHub API responses into repository records and context."""

    def __init__(
        self,
        client: Any,
        *,
        username: str | None = None,
        readme_max_chars: int | None = None,
        file_tree_max_entries: int | None = None,
    ) -> None:
        self._client = client
        self._username = username or settings.GITHUB_USERNAME
        self._readme_max_chars = readme_max_chars or settings.README_MAX_CHARS
        self._file_tree_max_entries = file_tree_max_entries or settings.FILE_TREE_MAX_ENTRIES

    async def fetch_repositories(self) -> list[RepositoryRecord]:
        """List the user's repositories, skipping pages sites and archived repos.

        Raises:
            GitHubFetchError: propagated from the client; the run cannot continue.
        """
        payloads = await self._client.list_user_repos(self._username)
        records = [RepositoryRecord.from_payload(payload) for payload in payloads]
        kept = [
            record
            for record in records
            if ".github.io" not in record.name and not record.archived
        ]
        kept.sort(key=lambda record: record.updated_at or _EPOCH, reverse=True)

        fork_count = sum(1 for record in kept if record.is_fork)
        logger.info(
            f"Found {len(kept)} repos ({fork_count} forks, {len(kept) - fork_count} original)",
            extra=sanitize_log_extra(username=self._username, listed=len(records)),
        )
        return kept

    async def fetch_details(self, repo: RepositoryRecord) -> RepositoryRecord:
        """Add topics and parent info; on failure the record is returned as is."""
        result = await self._client.get_repo(repo.full_name)
        if not result.is_ok:
            logger.warning(f"Could not fetch details for {repo.name}")
            return repo

        data = result.data or {}
        return dataclasses.replace(
            repo,
            topics=frozenset(data.get("topics") or ()),
            parent=ParentRef.from_payload(data.get("parent")),
            details_loaded=True,
        )

    async def fetch_readme(self, repo: RepositoryRecord) -> str | None:
        result = await self._client.get_readme(repo.full_name)
        if not result.is_ok:
            logger.info(f"Could not fetch README for {repo.name}")
            return None
        return truncate_string(result.data, self._readme_max_chars)

    async def fetch_file_tree(self, repo: RepositoryRecord) -> list[str]:
        result = await self._client.get_tree(repo.full_name)
        if not result.is_ok:
            logger.info(f"Could not fetch tree for {repo.name}")
            return []

        entries = (result.data or {}).get("tree") or []
        paths = [entry["path"] for entry in entries if entry.get("type") == "blob" and entry.get("path")]
        return paths[: self._file_tree_max_entries]

    async def gather_context(self, repo: RepositoryRecord) -> RepoContext:
        """Fetch details, README and file tree concurrently."""
        detailed, readme, file_tree = await asyncio.gather(
            self.fetch_details(repo),
            self.fetch_readme(repo),
            self.fetch_file_tree(repo),
        )
        logger.info(
            f"  - README: {f'{len(readme)} chars' if readme else 'not found'}; "
            f"files: {len(file_tree)} discovered"
        )
        return RepoContext(repo=detailed, readme=readme, file_tree=file_tree)
