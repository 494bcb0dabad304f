"""Embedder that turns text into OpenAI embedding vectors."""

import logging

from openai import APIStatusError, AsyncOpenAI, RateLimitError

from sitechat.config.settings import Settings
from sitechat.errors import EmbeddingExhausted
from sitechat.utils.backoff import Backoff, Sleep, default_sleep

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("exhausted", "quota")


def is_quota_error(error: Exception) -> bool:
    """
    Check whether an API error means "slow down" rather than "broken request".

    Args:
        error: Exception raised by the embedding call

    Returns:
        True for rate-limit / quota-exceeded failures
    """
    if isinstance(error, RateLimitError):
        return True
    if isinstance(error, APIStatusError) and error.status_code == 429:
        return True
    message = str(error).lower()
    return any(marker in message for marker in QUOTA_MARKERS)


class Embedder:
    """
    Generates one embedding per text, retrying on quota errors.

    Retry policy:
    - a rate-limit / quota error waits ``initial_delay`` seconds, doubling
      the wait after every such error
    - any other error propagates immediately
    - after ``retries`` attempts ``EmbeddingExhausted`` is raised
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "text-embedding-3-small",
        dimensions: int | None = None,
        retries: int = 5,
        initial_delay: float = 2.0,
        sleep: Sleep = default_sleep,
    ):
        """
        Initialize embedder.

        Args:
            client: OpenAI async client
            model: Embedding model name
            dimensions: Requested vector size (model default if None)
            retries: Maximum attempts per text
            initial_delay: First backoff delay in seconds
            sleep: Coroutine used to wait between attempts
        """
        if retries < 1:
            raise ValueError(f"retries must be at least 1, got {retries}")

        self.client = client
        self.model = model
        self.dimensions = dimensions
        self.retries = retries
        self.initial_delay = initial_delay
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, client: AsyncOpenAI | None = None) -> "Embedder":
        return cls(
            client or AsyncOpenAI(api_key=settings.openai_api_key),
            model=settings.embedding_model,
            dimensions=settings.embedding_dimensions,
            retries=settings.embedding_retries,
            initial_delay=settings.embedding_initial_delay,
        )

    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            EmbeddingExhausted: If every attempt hit a quota error
        """
        backoff = Backoff(max_attempts=self.retries, delay=self.initial_delay)

        while not backoff.exhausted:
            backoff.record_attempt()
            try:
                return await self._create(text)
            except Exception as e:
                if not is_quota_error(e):
                    raise
                if backoff.exhausted:
                    logger.warning(f"Quota hit on final attempt {backoff.attempts}/{self.retries}")
                    break

                delay = backoff.next_delay()
                logger.warning(
                    f"Quota hit (attempt {backoff.attempts}/{self.retries}), "
                    f"retrying in {delay:.1f}s"
                )
                await self.sleep(delay)

        raise EmbeddingExhausted(backoff.attempts)

    async def _create(self, text: str) -> list[float]:
        kwargs = {"model": self.model, "input": text}
        if self.dimensions:
            kwargs["dimensions"] = self.dimensions

        # Quota retries belong to embed(), not the SDK
        client = self.client.with_options(max_retries=0)
        response = await client.embeddings.create(**kwargs)
        return response.data[0].embedding
