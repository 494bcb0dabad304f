"""Page extraction: load a page, read its visible text, chunk it."""

import logging

from sitechat.utils.browser import BrowserSession
from sitechat.utils.chunker import TextChunker
from sitechat.utils.text import NON_CONTENT_TAGS

logger = logging.getLogger(__name__)


class PageExtractor:
    """Turns one URL into a list of text chunks."""

    def __init__(
        self,
        chunker: TextChunker,
        timeout_ms: int = 30000,
        exclude_tags: tuple[str, ...] = NON_CONTENT_TAGS,
    ):
        self.chunker = chunker
        self.timeout_ms = timeout_ms
        self.exclude_tags = exclude_tags

    async def extract(self, session: BrowserSession, url: str) -> list[str]:
        """
        Load ``url`` in a new page and chunk its visible text.

        The page is closed before this returns, including on errors.

        Args:
            session: Open browser session
            url: Page to extract

        Returns:
            Chunks in page order (empty if the page has no usable text)

        Raises:
            NavigationError: If the page cannot be loaded or read
        """
        async with session.open_page(url, self.timeout_ms) as page:
            text = await page.extract_text(self.exclude_tags)

        chunks = self.chunker.chunk(text)
        logger.debug(f"Extracted {len(text)} chars, {len(chunks)} chunks from {url}")
        return chunks
