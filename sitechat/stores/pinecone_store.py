"""Chunk store backed by a Pinecone index."""

import asyncio
import logging

from pinecone import Pinecone, ServerlessSpec

from sitechat.config.settings import Settings
from sitechat.errors import StoreError
from sitechat.models import PageChunk, ScoredText
from sitechat.stores.base import ChunkStore
from sitechat.utils.hash import chunk_id

logger = logging.getLogger(__name__)

# Pinecone metadata is limited per record; longer chunk text is rejected
MAX_METADATA_TEXT = 8000


class PineconeChunkStore(ChunkStore):
    """
    Stores one vector per page chunk.

    Record ids come from :func:`sitechat.utils.hash.chunk_id`, and metadata
    holds ``url``, ``chunk_index`` and ``text``. Because chunks are inserted
    in order starting at 0, a page counts as indexed when its chunk ``0``
    record exists.

    The Pinecone client is synchronous, so calls run in a worker thread.
    """

    def __init__(self, index, namespace: str = ""):
        """
        Initialize store.

        Args:
            index: Connected ``pinecone.Index``
            namespace: Pinecone namespace for all records
        """
        self.index = index
        self.namespace = namespace

    @classmethod
    def from_settings(cls, settings: Settings) -> "PineconeChunkStore":
        """Connect to the configured index, creating it if allowed."""
        pc = Pinecone(api_key=settings.pinecone_api_key)
        index_name = settings.pinecone_index_name

        existing_indexes = pc.list_indexes()
        index_names = [idx["name"] for idx in existing_indexes]

        if index_name not in index_names:
            if not settings.pinecone_create_index:
                raise ValueError(
                    f"Index {index_name} does not exist. "
                    "Set PINECONE_CREATE_INDEX=true to create it."
                )

            logger.info(f"Creating Pinecone index: {index_name}")
            pc.create_index(
                name=index_name,
                dimension=settings.embedding_dimensions,
                metric="cosine",
                spec=ServerlessSpec(
                    cloud="aws",
                    region=settings.pinecone_environment,
                ),
            )
            logger.info(f"Index {index_name} created successfully")

        return cls(pc.Index(index_name))

    async def exists(self, url: str) -> bool:
        try:
            response = await asyncio.to_thread(
                self.index.fetch,
                ids=[chunk_id(url, 0)],
                namespace=self.namespace,
            )
        except Exception as e:
            raise StoreError(f"Existence check failed for {url}: {e}") from e

        return bool(response.vectors)

    async def insert_chunk(self, chunk: PageChunk) -> None:
        if len(chunk.text) > MAX_METADATA_TEXT:
            raise StoreError(
                f"Chunk {chunk.chunk_index} of {chunk.url} has {len(chunk.text)} characters, "
                f"more than the {MAX_METADATA_TEXT} stored per record"
            )

        record = {
            "id": chunk_id(chunk.url, chunk.chunk_index),
            "values": chunk.embedding,
            "metadata": {
                "url": chunk.url,
                "chunk_index": chunk.chunk_index,
                "text": chunk.text,
            },
        }

        try:
            await asyncio.to_thread(
                self.index.upsert,
                vectors=[record],
                namespace=self.namespace,
            )
        except Exception as e:
            raise StoreError(f"Failed to insert chunk {chunk.chunk_index} of {chunk.url}: {e}") from e

    async def nearest_neighbors(self, embedding: list[float], k: int) -> list[ScoredText]:
        try:
            response = await asyncio.to_thread(
                self.index.query,
                vector=embedding,
                top_k=k,
                include_metadata=True,
                namespace=self.namespace,
            )
        except Exception as e:
            raise StoreError(f"Vector search failed: {e}") from e

        matches = []
        for match in response.matches or []:
            metadata = match.metadata or {}
            text = metadata.get("text")
            if text:
                matches.append(ScoredText(text=text, score=match.score))

        return matches
