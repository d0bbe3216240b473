"""Repository snapshot as returned by the GitHub API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from forkpress.utils.helpers import parse_github_datetime


@dataclass(frozen=True)
class ParentRef:
    """Upstream repository a fork was created from."""

    name: str
    url: str
    stars: int = 0

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> ParentRef | None:
        if not payload:
            return None
        return cls(
            name=str(payload.get("full_name") or payload.get("name") or ""),
            url=str(payload.get("html_url") or ""),
            stars=int(payload.get("stargazers_count") or 0),
        )


@dataclass(frozen=True)
class RepositoryRecord:
    """Immutable snapshot of one repository, re-fetched on every run.

    Listing payloads do not carry topics or parent information; those are
    filled in from the detail endpoint with :func:`dataclasses.replace`.
    ``details_loaded`` records whether that fetch succeeded.
    """

    id: int
    name: str
    full_name: str
    html_url: str
    api_url: str
    description: str | None = None
    language: str | None = None
    stars: int = 0
    forks: int = 0
    is_fork: bool = False
    archived: bool = False
    topics: frozenset[str] = field(default_factory=frozenset)
    parent: ParentRef | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    details_loaded: bool = False

    @property
    def kind(self) -> str:
        return "fork" if self.is_fork else "original"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RepositoryRecord:
        """Build a record from a listing or detail payload."""
        owner = (payload.get("owner") or {}).get("login", "")
        name = str(payload["name"])
        return cls(
            id=int(payload["id"]),
            name=name,
            full_name=str(payload.get("full_name") or f"{owner}/{name}"),
            html_url=str(payload.get("html_url") or ""),
            api_url=str(payload.get("url") or ""),
            description=payload.get("description"),
            language=payload.get("language"),
            stars=int(payload.get("stargazers_count") or 0),
            forks=int(payload.get("forks_count") or 0),
            is_fork=bool(payload.get("fork", False)),
            archived=bool(payload.get("archived", False)),
            topics=frozenset(payload.get("topics") or ()),
            parent=ParentRef.from_payload(payload.get("parent")),
            created_at=parse_github_datetime(payload.get("created_at")),
            updated_at=parse_github_datetime(payload.get("updated_at")),
        )
