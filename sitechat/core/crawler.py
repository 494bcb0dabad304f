"""Same-origin site crawler for discovering pages to index."""

import asyncio
import logging

from sitechat.errors import NavigationError
from sitechat.models import CrawlVisit
from sitechat.utils.browser import BrowserSession, normalize_link, url_origin
from sitechat.utils.logger import log_event

logger = logging.getLogger(__name__)


class VisitedSet:
    """
    URLs already claimed by a crawl run.

    :meth:`claim` checks and adds under one lock, so two workers can never
    both claim the same URL.
    """

    def __init__(self, max_size: int | None = None):
        self._urls: set[str] = set()
        self._lock = asyncio.Lock()
        self.max_size = max_size

    async def claim(self, url: str) -> bool:
        """Mark ``url`` visited. Returns False if it already was, or the cap is hit."""
        async with self._lock:
            if url in self._urls:
                return False
            if self.max_size is not None and len(self._urls) >= self.max_size:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: str) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)


class SiteCrawler:
    """
    Discovers the pages of a site by following same-origin links.

    Workflow:
    1. Queue the seed URL with the full depth budget
    2. Workers take visits off the queue; each claims the URL in the shared
       visited set, opens the page, collects same-origin links and closes it
    3. Links are queued with one less level of depth
    4. The crawl ends when the queue is drained

    A visit with no depth left, or for an already-claimed URL, does nothing.
    A page that fails to load is logged and left out of the result without
    affecting any other visit.
    """

    def __init__(
        self,
        timeout_ms: int = 30000,
        max_concurrency: int = 4,
        max_pages: int | None = None,
    ):
        """
        Initialize crawler.

        Args:
            timeout_ms: Navigation timeout per page
            max_concurrency: Number of workers, and so of pages open at once
            max_pages: Optional cap on URLs visited per crawl
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")

        self.timeout_ms = timeout_ms
        self.max_concurrency = max_concurrency
        self.max_pages = max_pages

    async def crawl(
        self,
        session: BrowserSession,
        seed_url: str,
        max_depth: int = 2,
    ) -> set[str]:
        """
        Crawl from ``seed_url`` and return every page that loaded.

        Args:
            session: Open browser session
            seed_url: Starting URL; its origin bounds the crawl
            max_depth: Link levels to follow (the seed itself uses one)

        Returns:
            Unique URLs of successfully loaded pages
        """
        seed = normalize_link(seed_url)
        origin = url_origin(seed)

        visited = VisitedSet(self.max_pages)
        found: set[str] = set()
        queue: asyncio.Queue[CrawlVisit] = asyncio.Queue()
        queue.put_nowait(CrawlVisit(seed, max_depth))

        log_event(logger, "crawl_start", f"Crawling {seed} (depth {max_depth})", seed=seed)

        async def worker() -> None:
            while True:
                visit = await queue.get()
                try:
                    await self._visit(session, visit, origin, visited, found, queue)
                finally:
                    queue.task_done()

        workers = [asyncio.create_task(worker()) for _ in range(self.max_concurrency)]
        try:
            await queue.join()
        finally:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        log_event(
            logger,
            "crawl_complete",
            f"Found {len(found)} pages ({len(visited)} visited)",
            seed=seed,
            pages_found=len(found),
            pages_visited=len(visited),
        )
        return found

    async def _visit(
        self,
        session: BrowserSession,
        visit: CrawlVisit,
        origin: str,
        visited: VisitedSet,
        found: set[str],
        queue: asyncio.Queue,
    ) -> None:
        if visit.depth_remaining <= 0:
            return
        if not await visited.claim(visit.url):
            return

        try:
            async with session.open_page(visit.url, self.timeout_ms) as page:
                # Links found on the last level would be queued with no depth left
                if visit.depth_remaining > 1:
                    links = await page.outbound_links(origin)
                else:
                    links = set()
        except NavigationError as e:
            logger.warning(f"Error crawling {visit.url}: {e.reason}")
            return
        except Exception as e:
            logger.error(f"Unexpected error crawling {visit.url}: {e}")
            return

        found.add(visit.url)

        for link in sorted({normalize_link(link) for link in links}):
            if link not in visited:
                queue.put_nowait(CrawlVisit(link, visit.depth_remaining - 1))
