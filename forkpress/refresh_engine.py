"""Content refresh engine: reconcile live repositories with stored articles."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence

from forkpress.config.settings import settings
from forkpress.crawlers.github.client import sanitize_log_extra
from forkpress.crawlers.github.repo_source import RepoContext, RepositorySource
from forkpress.models.article import ArticleRecord, PersistedDocument, SummarySource
from forkpress.models.repository import RepositoryRecord
from forkpress.services.article_quality import Decision, classify, fallback_summary
from forkpress.services.article_writer import ArticleWriter, LLMQuotaExceeded
from forkpress.services.document_store import DocumentStore
from forkpress.services.run_state import RunState
from forkpress.utils.helpers import cover_image_url, utcnow

logger = logging.getLogger(__name__)

FALLBACK_GENERATOR = "fallback template"


class ContentRefreshEngine:
    """Produces a fresh article document without regenerating good articles.

    Repositories whose stored article passes :func:`classify` only get their
    metadata refreshed. The rest are generated one at a time with a fixed
    delay between calls, rotating through the configured models, and fall back
    to a templated summary when generation is unavailable or keeps failing.
    """

    def __init__(
        self,
        *,
        source: RepositorySource,
        store: DocumentStore,
        writer: ArticleWriter | None,
        models: Sequence[str] | None = None,
        min_article_chars: int | None = None,
        max_consecutive_failures: int | None = None,
        delay_seconds: float | None = None,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._store = store
        self._writer = writer
        self._models = tuple(models if models is not None else settings.LLM_MODELS)
        self._min_chars = min_article_chars if min_article_chars is not None else settings.MIN_ARTICLE_CHARS
        self._max_failures = (
            max_consecutive_failures
            if max_consecutive_failures is not None
            else settings.MAX_CONSECUTIVE_FAILURES
        )
        self._delay = delay_seconds if delay_seconds is not None else settings.GENERATION_DELAY_SECONDS
        self._sleep = sleeper

    def new_run_state(self) -> RunState:
        return RunState.for_models(self._models, max_consecutive_failures=self._max_failures)

    async def run(self, *, force: bool = False) -> PersistedDocument:
        """Fetch, reconcile and persist.

        Raises:
            GitHubFetchError: the repository listing could not be fetched.
        """
        repositories = await self._source.fetch_repositories()
        existing = self.load_persisted()
        document = await self.reconcile(repositories, existing, force=force)
        self.persist(document)
        return document

    def load_persisted(self) -> PersistedDocument:
        return self._store.load()

    def persist(self, document: PersistedDocument) -> None:
        self._store.save(document)

    def classify(self, existing: ArticleRecord | None, *, force: bool = False) -> Decision:
        return classify(existing, force=force, min_chars=self._min_chars)

    async def reconcile(
        self,
        repositories: Sequence[RepositoryRecord],
        existing: PersistedDocument | None = None,
        *,
        force: bool = False,
        state: RunState | None = None,
    ) -> PersistedDocument:
        state = state or self.new_run_state()
        stored = (existing or PersistedDocument()).by_id()
        stats = {"kept": 0, "generated": 0, "fallback": 0}
        halt_logged = False
        articles: list[ArticleRecord] = []

        for index, repo in enumerate(repositories):
            previous = stored.get(repo.id)
            decision = self.classify(previous, force=force)
            logger.info(f"Processing {index + 1}/{len(repositories)}: {repo.name} ({decision.value})")

            if decision is Decision.KEEP:
                detailed = await self._source.fetch_details(repo)
                articles.append(previous.refreshed_from(detailed))
                stats["kept"] += 1
                continue

            summary: str | None = None
            if self._can_generate(state):
                context = await self._source.gather_context(repo)
                summary = await self.generate_article(context, state)
                if summary is None:
                    state.record_failure()
                else:
                    state.record_success()
                detailed = context.repo
                await self._sleep(self._delay)
            else:
                if self._writer is not None and not halt_logged:
                    logger.warning(
                        "Generation halted for the rest of this run",
                        extra=sanitize_log_extra(
                            consecutive_failures=state.consecutive_failures,
                            rate_limited=sorted(state.rate_limited),
                        ),
                    )
                    halt_logged = True
                detailed = await self._source.fetch_details(repo)

            if summary is None:
                summary, source = fallback_summary(detailed), SummarySource.FALLBACK
                stats["fallback"] += 1
            else:
                source = SummarySource.AI
                stats["generated"] += 1

            image = previous.image if previous is not None and previous.image else cover_image_url(index)
            article = ArticleRecord.from_repository(detailed, summary=summary, source=source, image=image)
            if previous is not None and not detailed.details_loaded:
                article = article.model_copy(update={"topics": previous.topics, "parent": previous.parent})
            articles.append(article)

        dropped = len(set(stored) - {repo.id for repo in repositories})
        logger.info(
            "Reconciliation completed",
            extra=sanitize_log_extra(**stats, dropped=dropped, ai_calls=state.ai_calls),
        )
        return PersistedDocument(
            last_updated=utcnow(),
            generated_with=self._generated_with(),
            total=len(articles),
            ai_calls=state.ai_calls,
            articles=articles,
        )

    async def generate_article(self, context: RepoContext, state: RunState) -> str | None:
        """Try each available model at most once; None means use the fallback.

        Only a rate-limit error moves on to the next model. Any other error, or
        a response shorter than the minimum article length, ends the attempt.
        """
        if self._writer is None:
            return None

        name = context.repo.name
        for _ in range(len(state.models)):
            model = state.select_model()
            if model is None:
                break

            state.record_call()
            try:
                article = await self._writer.write(context, model=model)
            except LLMQuotaExceeded as exc:
                logger.warning(
                    f"Model {model} rate limited; skipping it for the rest of the run",
                    extra=sanitize_log_extra(repo=name, error=str(exc)),
                )
                state.mark_rate_limited(model)
                continue
            except Exception as exc:
                logger.warning(
                    f"AI generation failed for {name}: {type(exc).__name__}",
                    extra=sanitize_log_extra(repo=name, model=model, error=str(exc)),
                )
                return None

            if len(article) < self._min_chars:
                logger.warning(f"AI response for {name} too short ({len(article)} chars); discarding")
                return None

            logger.info(f"  - Article: {len(article)} chars generated with {model}")
            return article

        if state.models:
            logger.warning(f"No model available for {name}; all models rate limited")
        else:
            logger.warning(f"No model configured; using the fallback for {name}")
        return None

    def _can_generate(self, state: RunState) -> bool:
        return self._writer is not None and not state.generation_halted

    def _generated_with(self) -> str:
        if self._writer is None:
            return FALLBACK_GENERATOR
        return f"{self._writer.name}: {', '.join(self._models)}"


def build_engine(client: Any, *, writer: ArticleWriter | None = None, output_path: str | None = None) -> ContentRefreshEngine:
    """Wire an engine from settings around an open GitHub client."""
    return ContentRefreshEngine(
        source=RepositorySource(client),
        store=DocumentStore(output_path),
        writer=writer,
    )
