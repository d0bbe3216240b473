"""
Refresh forks.json from the GitHub account's repositories.

Existing articles that look AI-written and long enough are kept; everything
else is (re)generated or falls back to the templated summary. Only a failed
repository listing aborts the run.

Usage:
    python -m forkpress.jobs.refresh_articles            # incremental refresh
    python -m forkpress.jobs.refresh_articles --force    # regenerate every article
"""

import asyncio
import logging
import sys
from typing import Optional, Sequence

from forkpress.config.settings import settings
from forkpress.crawlers.github.client import GitHubClient, GitHubFetchError
from forkpress.models.article import PersistedDocument
from forkpress.refresh_engine import build_engine
from forkpress.services.article_writer import build_article_writer
from forkpress.utils.logger import setup_logger

logger = logging.getLogger(__name__)


async def run_refresh(*, force: bool = False, output_path: Optional[str] = None) -> PersistedDocument:
    """Run one refresh end to end and return the written document."""
    writer = build_article_writer()
    async with GitHubClient() as client:
        engine = build_engine(client, writer=writer, output_path=output_path)
        return await engine.run(force=force)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    force = "--force" in args

    setup_logger("forkpress", level=settings.LOG_LEVEL)
    logger.info(f"Refreshing articles for {settings.GITHUB_USERNAME}" + (" (forced)" if force else ""))

    try:
        document = asyncio.run(run_refresh(force=force))
    except GitHubFetchError as exc:
        logger.error(f"Aborting refresh: {exc}")
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logger.info(f"Generated {settings.OUTPUT_PATH} with {document.total} articles ({document.ai_calls} AI calls)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
