"""Persisted article document, serialized to forks.json"""

from __future__ import annotations

from datetime import datetime
import enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from forkpress.models.repository import RepositoryRecord
from forkpress.utils.helpers import display_name, estimate_read_time, parse_stored_datetime

NO_DESCRIPTION = "No description available"


class SummarySource(str, enum.Enum):
    """Where the article body came from"""
    AI = "ai"
    FALLBACK = "fallback"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParentInfo(_CamelModel):
    name: str
    url: str = ""
    stars: int = 0


class ArticleRecord(_CamelModel):
    """
    One blog article per repository

    ``id`` is the GitHub repository id and is unique within a document.
    """

    id: int
    name: str
    display_name: str
    description: str = NO_DESCRIPTION
    summary: str
    summary_source: SummarySource = SummarySource.AI
    url: str = ""
    language: str | None = None
    stars: int = 0
    forks: int = 0
    topics: list[str] = Field(default_factory=list)
    parent: ParentInfo | None = None
    type: str = "fork"
    image: str = ""
    read_time: int = 2
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at", "forkedAt"),
        serialization_alias="createdAt",
    )
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_dates(cls, value):
        if isinstance(value, str):
            return parse_stored_datetime(value)
        return value

    @field_validator("topics")
    @classmethod
    def sort_topics(cls, value: list[str]) -> list[str]:
        return sorted({topic for topic in value if topic})

    @classmethod
    def from_repository(
        cls,
        repo: RepositoryRecord,
        *,
        summary: str,
        source: SummarySource,
        image: str,
    ) -> ArticleRecord:
        """Create a new article for a repository with a fresh summary."""
        return cls(
            id=repo.id,
            name=repo.name,
            display_name=display_name(repo.name),
            summary=summary,
            summary_source=source,
            image=image,
            read_time=estimate_read_time(summary),
            created_at=repo.created_at,
            **_mutable_fields(repo),
        )

    def refreshed_from(self, repo: RepositoryRecord) -> ArticleRecord:
        """Copy with repository metadata updated; summary and read time kept.

        Topics and parent come from the detail endpoint; when that fetch failed
        the stored values are kept.
        """
        update = {
            "name": repo.name,
            "display_name": display_name(repo.name),
            **_mutable_fields(repo),
        }
        if not repo.details_loaded:
            update["topics"] = self.topics
            update["parent"] = self.parent
        return self.model_copy(update=update)


def _mutable_fields(repo: RepositoryRecord) -> dict:
    parent = None
    if repo.parent is not None:
        parent = ParentInfo(name=repo.parent.name, url=repo.parent.url, stars=repo.parent.stars)
    return {
        "description": repo.description or NO_DESCRIPTION,
        "url": repo.html_url,
        "language": repo.language,
        "stars": repo.stars,
        "forks": repo.forks,
        "topics": sorted(repo.topics),
        "parent": parent,
        "type": repo.kind,
        "updated_at": repo.updated_at,
    }


class PersistedDocument(_CamelModel):
    """Whole output document: metadata plus every article"""

    last_updated: datetime | None = None
    generated_with: str = ""
    total: int = 0
    ai_calls: int = 0
    articles: list[ArticleRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("articles", "forks"),
    )

    @field_validator("last_updated", mode="before")
    @classmethod
    def parse_last_updated(cls, value):
        if isinstance(value, str):
            return parse_stored_datetime(value)
        return value

    @property
    def is_empty(self) -> bool:
        return not self.articles

    def by_id(self) -> dict[int, ArticleRecord]:
        return {article.id: article for article in self.articles}

    def sorted_articles(self) -> list[ArticleRecord]:
        """Articles ordered by update timestamp, newest first; undated last."""
        dated = [a for a in self.articles if a.updated_at is not None]
        undated = [a for a in self.articles if a.updated_at is None]
        dated.sort(key=lambda a: a.updated_at, reverse=True)
        return dated + undated
