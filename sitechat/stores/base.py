"""Abstract store interfaces used by the pipeline."""

from abc import ABC, abstractmethod

from sitechat.models import Lead, PageChunk, ScoredText


class ChunkStore(ABC):
    """
    Persistence for embedded page chunks.

    Implementations must:
    - report whether any chunk of a URL is stored (the indexing guard)
    - insert one chunk at a time (no multi-row transactions are assumed)
    - answer nearest-neighbour queries in descending relevance order

    Library failures are raised as ``StoreError``.
    """

    @abstractmethod
    async def exists(self, url: str) -> bool:
        """Return True if at least one chunk of ``url`` is stored."""

    @abstractmethod
    async def insert_chunk(self, chunk: PageChunk) -> None:
        """Persist one chunk."""

    @abstractmethod
    async def nearest_neighbors(self, embedding: list[float], k: int) -> list[ScoredText]:
        """Return up to ``k`` stored texts most similar to ``embedding``."""


class LeadStore(ABC):
    """Write-only persistence for captured leads."""

    @abstractmethod
    async def insert_lead(self, lead: Lead) -> None:
        """Persist one lead, raising ``StoreError`` on failure."""
