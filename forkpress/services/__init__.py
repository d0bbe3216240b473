"""Generation, quality and persistence services"""

from forkpress.services.article_quality import Decision, classify, fallback_summary
from forkpress.services.article_writer import ArticleWriter, LLMQuotaExceeded, build_article_writer
from forkpress.services.document_store import DocumentStore
from forkpress.services.run_state import RunState

__all__ = [
    "Decision",
    "classify",
    "fallback_summary",
    "ArticleWriter",
    "LLMQuotaExceeded",
    "build_article_writer",
    "DocumentStore",
    "RunState",
]
