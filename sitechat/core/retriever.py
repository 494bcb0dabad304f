"""Semantic search over indexed page chunks."""

import logging

from sitechat.core.embedder import Embedder
from sitechat.stores.base import ChunkStore

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"


class Retriever:
    """Finds the stored chunks closest to a question."""

    def __init__(self, store: ChunkStore, embedder: Embedder):
        self.store = store
        self.embedder = embedder

    async def search(self, query: str, top_k: int = 5) -> str:
        """
        Retrieve context text for a query.

        Args:
            query: Free-text question
            top_k: Maximum number of chunks to return

        Returns:
            Matching chunk texts in relevance order, separated by blank
            lines; empty string when nothing matches

        Raises:
            EmbeddingError, StoreError: Propagated to the caller
        """
        vector = await self.embedder.embed(query)
        matches = await self.store.nearest_neighbors(vector, top_k)

        logger.debug(f"Retrieved {len(matches)} chunks for query")
        return CONTEXT_SEPARATOR.join(match.text for match in matches)
