from __future__ import annotations

import pytest

from forkpress.models.article import ArticleRecord
from forkpress.models.repository import RepositoryRecord
from forkpress.services.article_quality import (
    FALLBACK_SIGNATURES,
    Decision,
    classify,
    fallback_summary,
    is_good_summary,
)
from forkpress.utils.helpers import estimate_read_time

GOOD_TEXT = (
    "Distributed tracing is one of those problems every team postpones until an outage forces it. "
    "This project wires OpenTelemetry spans through an async job runner without asking the caller "
    "to thread context objects by hand. The scheduler module keeps a small registry of handlers, and "
    "each dispatch wraps the handler in a span whose attributes come from the job payload. "
    "That design keeps instrumentation out of business code."
)


def _repo(**overrides) -> RepositoryRecord:
    fields = dict(
        id=1,
        name="trace-runner",
        full_name="octo/trace-runner",
        html_url="https://github.com/octo/trace-runner",
        api_url="https://api.github.com/repos/octo/trace-runner",
        description="Async job runner",
        language="Go",
    )
    fields.update(overrides)
    return RepositoryRecord(**fields)


def _article(summary: str) -> ArticleRecord:
    return ArticleRecord(id=1, name="trace-runner", display_name="trace runner", summary=summary)


def test_good_text_is_long_enough_for_the_threshold() -> None:
    assert len(GOOD_TEXT) >= 400
    assert is_good_summary(GOOD_TEXT, min_chars=400)


def test_missing_article_is_regenerated() -> None:
    assert classify(None, min_chars=400) is Decision.REGENERATE


def test_long_clean_summary_is_kept() -> None:
    assert classify(_article(GOOD_TEXT), min_chars=400) is Decision.KEEP


def test_short_summary_is_regenerated() -> None:
    assert classify(_article(GOOD_TEXT[:399]), min_chars=400) is Decision.REGENERATE


@pytest.mark.parametrize("signature", FALLBACK_SIGNATURES)
def test_summary_with_fallback_signature_is_regenerated(signature: str) -> None:
    assert classify(_article(GOOD_TEXT + " " + signature), min_chars=400) is Decision.REGENERATE


def test_force_regenerates_good_article() -> None:
    assert classify(_article(GOOD_TEXT), force=True, min_chars=400) is Decision.REGENERATE


def test_fallback_summary_is_deterministic_and_classified_as_fallback() -> None:
    repo = _repo()

    first = fallback_summary(repo)
    second = fallback_summary(_repo())

    assert first == second
    assert first.startswith("trace runner is a Go project")
    assert classify(_article(first * 5), min_chars=400) is Decision.REGENERATE


def test_fallback_summary_uses_long_description_verbatim() -> None:
    description = "A very long description " * 6
    text = fallback_summary(_repo(description=description, language=None))

    assert text.startswith(description)
    assert "This various technologies project caught my attention" in text


@pytest.mark.parametrize(
    "words,expected",
    [(1000, 5), (50, 2), (0, 2), (401, 3), (400, 2)],
)
def test_read_time_estimate(words: int, expected: int) -> None:
    assert estimate_read_time(" ".join(["word"] * words)) == expected
