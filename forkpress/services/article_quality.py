"""Keep-or-regenerate decisions and the deterministic fallback article."""

from __future__ import annotations

import enum

from forkpress.config.settings import settings
from forkpress.models.article import ArticleRecord
from forkpress.models.repository import RepositoryRecord
from forkpress.utils.helpers import display_name

# Phrases that only appear in canned text: our own fallback templates and the
# stock replies an exhausted model endpoint tends to return.
FALLBACK_SIGNATURES = (
    "caught my attention for its practical approach",
    "demonstrates thoughtful software design",
    "Worth investigating if you're working with",
    "The codebase offers patterns worth studying",
    "I'm sorry, but I can't",
    "I cannot access external",
    "As an AI language model",
)


class Decision(str, enum.Enum):
    KEEP = "keep"
    REGENERATE = "regenerate"


def has_fallback_signature(text: str) -> bool:
    return any(signature in text for signature in FALLBACK_SIGNATURES)


def is_good_summary(text: str | None, *, min_chars: int | None = None) -> bool:
    """A summary is good when it is long enough and not canned."""
    min_chars = settings.MIN_ARTICLE_CHARS if min_chars is None else min_chars
    if not text or len(text) < min_chars:
        return False
    return not has_fallback_signature(text)


def classify(existing: ArticleRecord | None, *, force: bool = False, min_chars: int | None = None) -> Decision:
    """Decide whether a stored article survives this run."""
    if force or existing is None:
        return Decision.REGENERATE
    if is_good_summary(existing.summary, min_chars=min_chars):
        return Decision.KEEP
    return Decision.REGENERATE


def fallback_summary(repo: RepositoryRecord) -> str:
    """Templated article used when generation is unavailable or fails.

    Depends only on name, description and language, so identical inputs
    always produce identical text.
    """
    description = repo.description or ""
    language = repo.language or "various technologies"
    name = display_name(repo.name)

    if len(description) > 100:
        return (
            f"{description}\n\n"
            f"This {language} project caught my attention for its practical approach to solving "
            "real developer problems. The codebase offers patterns worth studying for anyone "
            "working in this space."
        )

    return (
        f"{name} is a {language} project that demonstrates thoughtful software design. "
        "While exploring the codebase, I found patterns and implementations that could "
        f"accelerate similar projects. Worth investigating if you're working with {language} "
        "or interested in clean, maintainable code architecture."
    )
