"""One-shot crawl-and-index orchestration."""

import asyncio
import logging
import threading
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from tqdm import tqdm

from sitechat.core.crawler import SiteCrawler
from sitechat.core.indexer import Indexer
from sitechat.utils.browser import BrowserSession, open_browser_session
from sitechat.utils.logger import log_event

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[BrowserSession]]


class IndexingState:
    """
    Process-wide "indexing has started" flag.

    Starts unset, is set by the first successful :meth:`claim` and is never
    reset; re-indexing needs a restart.
    """

    def __init__(self):
        self._started = False
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._started

    def claim(self) -> bool:
        """Atomically set the flag. Returns True only for the first caller."""
        with self._lock:
            if self._started:
                return False
            self._started = True
            return True


class SiteIndexer:
    """
    Crawls a site and indexes every page it finds.

    Workflow:
    1. Open one browser session for the whole run
    2. Crawl from the seed URL to discover pages
    3. Index each page; a failing page is logged and skipped
    4. Close the session, whatever happened

    :meth:`trigger` starts this in the background at most once per
    ``IndexingState``.
    """

    def __init__(
        self,
        crawler: SiteCrawler,
        indexer: Indexer,
        state: IndexingState | None = None,
        max_depth: int = 2,
        session_factory: SessionFactory = open_browser_session,
    ):
        self.crawler = crawler
        self.indexer = indexer
        self.state = state or IndexingState()
        self.max_depth = max_depth
        self.session_factory = session_factory
        self.task: asyncio.Task | None = None

    def trigger(self, seed_url: str) -> bool:
        """
        Start indexing in the background unless it was already started.

        Must be called from a running event loop.

        Returns:
            True if this call started the run
        """
        if not self.state.claim():
            return False

        self.task = asyncio.create_task(self._run_in_background(seed_url))
        return True

    async def _run_in_background(self, seed_url: str) -> None:
        try:
            await self.ensure_all_indexed(seed_url)
        except Exception:
            logger.exception(f"Indexing run for {seed_url} failed")

    async def ensure_all_indexed(self, seed_url: str) -> dict[str, Any]:
        """
        Crawl ``seed_url`` and index every discovered page.

        Args:
            seed_url: Site entry point

        Returns:
            Statistics dictionary
        """
        stats: dict[str, Any] = {
            "pages_discovered": 0,
            "pages_indexed": 0,
            "pages_skipped": 0,
            "chunks_inserted": 0,
            "total_failures": 0,
            "start_time": datetime.now().isoformat(),
            "end_time": None,
        }

        async with self.session_factory() as session:
            urls = await self.crawler.crawl(session, seed_url, self.max_depth)
            stats["pages_discovered"] = len(urls)
            logger.info(f"Found pages: {sorted(urls)}")

            for url in tqdm(sorted(urls), desc="Indexing pages"):
                try:
                    inserted = await self.indexer.ensure_indexed(session, url)
                except Exception as e:
                    log_event(
                        logger,
                        "page_failed",
                        f"Error indexing {url}: {e}",
                        level=logging.ERROR,
                        url=url,
                        error=str(e),
                    )
                    stats["total_failures"] += 1
                    continue

                if inserted:
                    stats["pages_indexed"] += 1
                    stats["chunks_inserted"] += inserted
                else:
                    stats["pages_skipped"] += 1

        stats["end_time"] = datetime.now().isoformat()
        log_event(logger, "index_complete", f"Indexing complete. Stats: {stats}", **stats)
        return stats
