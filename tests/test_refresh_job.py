from __future__ import annotations

from forkpress.crawlers.github.client import GitHubFetchError
from forkpress.jobs import refresh_articles
from forkpress.models.article import PersistedDocument


def test_main_returns_zero_and_forwards_force(monkeypatch) -> None:
    calls: list[dict] = []

    async def fake_run_refresh(**kwargs):
        calls.append(kwargs)
        return PersistedDocument(total=3, ai_calls=2)

    monkeypatch.setattr(refresh_articles, "run_refresh", fake_run_refresh)

    assert refresh_articles.main(["--force"]) == 0
    assert calls == [{"force": True}]


def test_main_reports_listing_failure_on_stderr(monkeypatch, capsys) -> None:
    async def failing_run_refresh(**_kwargs):
        raise GitHubFetchError("GitHub API error listing repositories for octo: status=503")

    monkeypatch.setattr(refresh_articles, "run_refresh", failing_run_refresh)

    assert refresh_articles.main([]) == 1
    assert "status=503" in capsys.readouterr().err
