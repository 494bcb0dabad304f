"""Indexer that embeds page chunks into the vector store once per URL."""

import logging

from sitechat.core.embedder import Embedder
from sitechat.core.extractor import PageExtractor
from sitechat.models import PageChunk
from sitechat.stores.base import ChunkStore
from sitechat.utils.browser import BrowserSession
from sitechat.utils.logger import log_event

logger = logging.getLogger(__name__)


class Indexer:
    """
    Indexes single pages, at most once per URL.

    Workflow:
    1. Ask the store whether the URL already has chunks; if so, stop
    2. Extract and chunk the page
    3. Embed and insert each chunk in order, numbering them from 0

    The existence check is the only deduplication: a page whose content
    changes after it was indexed keeps its original chunks.
    """

    def __init__(
        self,
        store: ChunkStore,
        embedder: Embedder,
        extractor: PageExtractor,
    ):
        self.store = store
        self.embedder = embedder
        self.extractor = extractor

    async def ensure_indexed(self, session: BrowserSession, url: str) -> int:
        """
        Index ``url`` unless it is already in the store.

        Args:
            session: Open browser session used to load the page
            url: Page URL

        Returns:
            Number of chunks inserted (0 if already indexed or no usable text)

        Raises:
            NavigationError, EmbeddingError, StoreError: Whatever failed first.
                Chunks inserted before the failure stay in the store.
        """
        if await self.store.exists(url):
            logger.debug(f"Already indexed: {url}")
            return 0

        chunks = await self.extractor.extract(session, url)

        for chunk_index, text in enumerate(chunks):
            vector = await self.embedder.embed(text)
            await self.store.insert_chunk(PageChunk(url, chunk_index, text, vector))

        log_event(
            logger,
            "page_indexed",
            f"Indexed: {url} ({len(chunks)} chunks)",
            url=url,
            chunks=len(chunks),
        )
        return len(chunks)
