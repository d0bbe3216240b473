"""GitHub crawler primitives."""

from forkpress.crawlers.github.client import GitHubClient, GitHubFetchError
from forkpress.crawlers.github.contracts import (
    ContentContract,
    FetchResult,
    FetchState,
    RepoContract,
    TreeContract,
)
from forkpress.crawlers.github.repo_source import RepoContext, RepositorySource

__all__ = [
    "GitHubClient",
    "GitHubFetchError",
    "FetchState",
    "FetchResult",
    "RepoContract",
    "TreeContract",
    "ContentContract",
    "RepoContext",
    "RepositorySource",
]
