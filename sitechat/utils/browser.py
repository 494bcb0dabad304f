"""Headless browser sessions backed by Playwright."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urldefrag, urlparse

from playwright.async_api import Browser, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from sitechat.errors import NavigationError, NavigationTimeout
from sitechat.utils.text import NON_CONTENT_TAGS, extract_visible_text

logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


def url_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}".lower()


def normalize_link(url: str) -> str:
    """Drop the fragment so ``/page#a`` and ``/page`` are the same page."""
    return urldefrag(url).url


class PageDocument:
    """A loaded page. Only valid inside ``BrowserSession.open_page``."""

    def __init__(self, page: Page, url: str):
        self._page = page
        self.url = url

    async def extract_text(self, exclude_tags: tuple[str, ...] = NON_CONTENT_TAGS) -> str:
        """
        Get the page's visible text.

        Args:
            exclude_tags: Tag names stripped before reading text nodes

        Returns:
            Whitespace-normalized text in document order
        """
        try:
            html = await self._page.content()
        except PlaywrightError as e:
            raise NavigationError(self.url, str(e)) from e
        return extract_visible_text(html, exclude_tags)

    async def outbound_links(self, origin: str | None = None) -> set[str]:
        """
        Collect absolute anchor targets that share an origin.

        Args:
            origin: Origin to keep; defaults to the page's own origin

        Returns:
            Fragment-free absolute URLs
        """
        try:
            hrefs = await self._page.eval_on_selector_all(
                "a[href]",
                "elements => elements.map(el => el.href)",
            )
        except PlaywrightError as e:
            raise NavigationError(self.url, str(e)) from e

        wanted = (origin or url_origin(self._page.url or self.url)).lower()
        links = set()
        for href in hrefs:
            if not href:
                continue
            if url_origin(href) == wanted:
                links.add(normalize_link(href))
        return links


class BrowserSession:
    """
    One launched browser shared by every page opened during a run.

    Pages are opened with :meth:`open_page`, which always closes the page
    again, whether navigation succeeds or not.
    """

    def __init__(self, browser: Browser):
        self._browser = browser

    @asynccontextmanager
    async def open_page(self, url: str, timeout_ms: int = 30000) -> AsyncIterator[PageDocument]:
        """
        Navigate a fresh page to ``url`` and yield it.

        Args:
            url: URL to load
            timeout_ms: Navigation timeout in milliseconds

        Raises:
            NavigationTimeout: If the DOM is not ready before the timeout
            NavigationError: For any other navigation failure
        """
        page = await self._browser.new_page(ignore_https_errors=True)
        try:
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            except PlaywrightTimeoutError as e:
                raise NavigationTimeout(url, timeout_ms) from e
            except PlaywrightError as e:
                raise NavigationError(url, str(e)) from e

            yield PageDocument(page, url)
        finally:
            await page.close()

    async def close(self) -> None:
        await self._browser.close()


@asynccontextmanager
async def open_browser_session(headless: bool = True) -> AsyncIterator[BrowserSession]:
    """
    Launch Chromium and yield a session, closing the browser on exit.

    Usage:
        async with open_browser_session() as session:
            async with session.open_page(url) as page:
                text = await page.extract_text()
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless, args=BROWSER_ARGS)
        session = BrowserSession(browser)
        logger.debug("Browser session started")
        try:
            yield session
        finally:
            await session.close()
            logger.debug("Browser session closed")
