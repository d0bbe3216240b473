"""Data models"""

from forkpress.models.article import ArticleRecord, ParentInfo, PersistedDocument, SummarySource
from forkpress.models.repository import ParentRef, RepositoryRecord

__all__ = [
    "ArticleRecord",
    "ParentInfo",
    "PersistedDocument",
    "SummarySource",
    "ParentRef",
    "RepositoryRecord",
]
