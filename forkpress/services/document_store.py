"""JSON file persistence for the article document."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile

from pydantic import ValidationError

from forkpress.config.settings import settings
from forkpress.crawlers.github.client import sanitize_log_extra
from forkpress.models.article import ArticleRecord, PersistedDocument

logger = logging.getLogger(__name__)


class DocumentStore:
    """Reads and writes the whole document as one JSON file."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._path = Path(path or settings.OUTPUT_PATH)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PersistedDocument:
        """Return the previous document, or an empty one if there is none.

        An unreadable file is treated like a missing one: everything in it can
        be regenerated from the live repository list. Articles are validated
        one by one, so a single bad entry only costs that article.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No existing {self._path.name}; starting from an empty document")
            return PersistedDocument()

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            logger.warning(f"Ignoring unreadable {self._path.name}: {exc}")
            return PersistedDocument()
        if not isinstance(payload, dict):
            logger.warning(f"Ignoring unreadable {self._path.name}: expected a JSON object")
            return PersistedDocument()

        items = payload.get("articles", payload.get("forks")) or []
        if not isinstance(items, list):
            logger.warning(f"Ignoring article list in {self._path.name}: expected a JSON array")
            items = []

        articles: list[ArticleRecord] = []
        for index, item in enumerate(items):
            try:
                articles.append(ArticleRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "Skipping unreadable stored article",
                    extra=sanitize_log_extra(
                        index=index,
                        article_id=item.get("id") if isinstance(item, dict) else None,
                        errors=exc.error_count(),
                    ),
                )

        envelope = {key: value for key, value in payload.items() if key not in ("articles", "forks")}
        try:
            document = PersistedDocument.model_validate(envelope)
        except ValidationError as exc:
            logger.warning(f"Ignoring unreadable metadata in {self._path.name}: {exc.error_count()} validation errors")
            document = PersistedDocument()
        document = document.model_copy(update={"articles": articles})

        logger.info(f"Loaded {len(document.articles)} existing articles from {self._path}")
        return document

    def save(self, document: PersistedDocument) -> None:
        """Write the document in one go (temp file + rename)."""
        ordered = document.model_copy(
            update={"articles": document.sorted_articles(), "total": len(document.articles)}
        )
        payload = json.dumps(
            ordered.model_dump(mode="json", by_alias=True),
            indent=2,
            ensure_ascii=False,
        )

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload + "\n")
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Wrote {ordered.total} articles to {self._path}")
