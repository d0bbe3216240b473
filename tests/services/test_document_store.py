from __future__ import annotations

from datetime import datetime, timezone
import json
import logging

import pytest

from forkpress.models.article import ArticleRecord, ParentInfo, PersistedDocument, SummarySource
from forkpress.services.document_store import DocumentStore


def _article(article_id: int, updated_day: int | None) -> ArticleRecord:
    updated_at = datetime(2024, 5, updated_day, tzinfo=timezone.utc) if updated_day else None
    return ArticleRecord(
        id=article_id,
        name=f"repo-{article_id}",
        display_name=f"repo {article_id}",
        summary=f"summary {article_id}",
        summary_source=SummarySource.AI,
        topics=["b", "a"],
        parent=ParentInfo(name="up/repo", url="https://github.com/up/repo", stars=5),
        read_time=3,
        updated_at=updated_at,
    )


def test_missing_file_loads_as_empty_document(tmp_path) -> None:
    document = DocumentStore(tmp_path / "forks.json").load()

    assert document.is_empty
    assert document.ai_calls == 0


def test_unreadable_file_loads_as_empty_document(tmp_path) -> None:
    path = tmp_path / "forks.json"
    path.write_text("{not json", encoding="utf-8")

    assert DocumentStore(path).load().is_empty


def test_round_trip_preserves_articles_by_id(tmp_path) -> None:
    store = DocumentStore(tmp_path / "out" / "forks.json")
    document = PersistedDocument(
        last_updated=datetime(2024, 6, 1, tzinfo=timezone.utc),
        generated_with="openai: gpt-4o",
        ai_calls=4,
        articles=[_article(1, 3), _article(2, None), _article(3, 9)],
    )

    store.save(document)
    loaded = store.load()

    assert loaded.by_id() == document.by_id()
    assert loaded.total == 3
    assert loaded.ai_calls == 4


def test_save_orders_newest_first_with_camel_case_keys(tmp_path) -> None:
    path = tmp_path / "forks.json"
    DocumentStore(path).save(PersistedDocument(articles=[_article(1, 3), _article(2, None), _article(3, 9)]))

    raw = json.loads(path.read_text(encoding="utf-8"))

    assert [item["id"] for item in raw["articles"]] == [3, 1, 2]
    assert raw["total"] == 3
    assert "lastUpdated" in raw and "aiCalls" in raw
    assert raw["articles"][0]["displayName"] == "repo 3"
    assert raw["articles"][0]["readTime"] == 3
    assert raw["articles"][0]["summarySource"] == "ai"
    assert raw["articles"][0]["topics"] == ["a", "b"]
    assert list(tmp_path.iterdir()) == [path]


def test_legacy_forks_key_is_accepted(tmp_path) -> None:
    path = tmp_path / "forks.json"
    path.write_text(
        json.dumps(
            {
                "lastUpdated": "2024-01-01T00:00:00Z",
                "forks": [
                    {"id": 5, "name": "demo", "displayName": "demo", "summary": "text", "readTime": 2},
                ],
            }
        ),
        encoding="utf-8",
    )

    document = DocumentStore(path).load()

    assert list(document.by_id()) == [5]


def test_legacy_display_dates_are_parsed(tmp_path) -> None:
    path = tmp_path / "forks.json"
    path.write_text(
        json.dumps(
            {
                "lastUpdated": "June 2, 2024",
                "forks": [
                    {
                        "id": 5,
                        "name": "demo",
                        "displayName": "demo",
                        "summary": "text",
                        "forkedAt": "Mar 3, 2023",
                        "updatedAt": "May 1, 2024",
                    },
                    {"id": 6, "name": "other", "displayName": "other", "summary": "text", "updatedAt": "someday"},
                ],
            }
        ),
        encoding="utf-8",
    )

    document = DocumentStore(path).load()

    articles = document.by_id()
    assert document.last_updated == datetime(2024, 6, 2, tzinfo=timezone.utc)
    assert articles[5].created_at == datetime(2023, 3, 3, tzinfo=timezone.utc)
    assert articles[5].updated_at == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert articles[6].updated_at is None


def test_bad_article_is_skipped_and_the_rest_load(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "forks.json"
    path.write_text(
        json.dumps(
            {
                "aiCalls": 7,
                "articles": [
                    {"id": 1, "name": "good", "displayName": "good", "summary": "text"},
                    {"id": "not-a-number", "name": "bad", "displayName": "bad", "summary": "text"},
                    "garbage",
                    {"id": 3, "name": "also-good", "displayName": "also good", "summary": "text"},
                ],
            }
        ),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="forkpress.services.document_store"):
        document = DocumentStore(path).load()

    assert sorted(document.by_id()) == [1, 3]
    assert document.ai_calls == 7
    skipped = [record for record in caplog.records if record.msg == "Skipping unreadable stored article"]
    assert [record.index for record in skipped] == [1, 2]


def test_bad_metadata_keeps_the_articles(tmp_path) -> None:
    path = tmp_path / "forks.json"
    path.write_text(
        json.dumps(
            {
                "aiCalls": "many",
                "articles": [{"id": 1, "name": "good", "displayName": "good", "summary": "text"}],
            }
        ),
        encoding="utf-8",
    )

    document = DocumentStore(path).load()

    assert list(document.by_id()) == [1]
    assert document.ai_calls == 0
