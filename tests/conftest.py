"""Pytest configuration and fixtures."""

import asyncio
from contextlib import asynccontextmanager

import pytest

from sitechat.config.settings import Settings
from sitechat.errors import NavigationTimeout
from sitechat.models import Lead, PageChunk, ScoredText
from sitechat.stores.base import ChunkStore, LeadStore
from sitechat.utils.browser import url_origin

PAGE_TEXT = (
    "Welcome to Example Test. We build websites, mobile apps and custom software "
    "for small businesses. Our team has over ten years of experience delivering "
    "projects on time. Contact us to discuss your next idea."
)


class FakePage:
    """Stands in for ``PageDocument``."""

    def __init__(self, url: str, text: str, links: set[str]):
        self.url = url
        self._text = text
        self._links = links

    async def extract_text(self, exclude_tags=()):
        return self._text

    async def outbound_links(self, origin=None):
        wanted = origin or url_origin(self.url)
        return {link for link in self._links if url_origin(link) == wanted}


class FakeSession:
    """
    Stands in for ``BrowserSession``.

    ``pages`` maps a URL to ``(text, links)``; URLs in ``timeouts`` or missing
    from ``pages`` fail like a navigation timeout.
    """

    def __init__(self, pages: dict[str, tuple[str, set[str]]], timeouts: set[str] | None = None):
        self.pages = pages
        self.timeouts = timeouts or set()
        self.opened: list[str] = []
        self.open_now = 0
        self.max_open = 0
        self.closed = False

    @asynccontextmanager
    async def open_page(self, url: str, timeout_ms: int = 30000):
        self.opened.append(url)
        self.open_now += 1
        self.max_open = max(self.max_open, self.open_now)
        try:
            await asyncio.sleep(0)
            if url in self.timeouts or url not in self.pages:
                raise NavigationTimeout(url, timeout_ms)
            text, links = self.pages[url]
            yield FakePage(url, text, links)
        finally:
            self.open_now -= 1

    async def close(self):
        self.closed = True


class FakeEmbedder:
    """Deterministic embedder that records every text it saw."""

    def __init__(self, fail_on: str | None = None):
        self.calls: list[str] = []
        self.fail_on = fail_on

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_on and self.fail_on in text:
            raise RuntimeError("embedding service unavailable")
        return [float(len(text)), 1.0, 0.0]


class FakeChunkStore(ChunkStore):
    """In-memory chunk store."""

    def __init__(self, matches: list[ScoredText] | None = None):
        self.rows: list[PageChunk] = []
        self.matches = matches or []
        self.queries: list[tuple[list[float], int]] = []

    async def exists(self, url: str) -> bool:
        return any(row.url == url for row in self.rows)

    async def insert_chunk(self, chunk: PageChunk) -> None:
        self.rows.append(chunk)

    async def nearest_neighbors(self, embedding, k):
        self.queries.append((embedding, k))
        return self.matches[:k]

    def urls(self) -> set[str]:
        return {row.url for row in self.rows}


class FakeLeadStore(LeadStore):
    """In-memory lead store."""

    def __init__(self, error: Exception | None = None):
        self.leads: list[Lead] = []
        self.error = error

    async def insert_lead(self, lead: Lead) -> None:
        if self.error:
            raise self.error
        self.leads.append(lead)


@pytest.fixture
def settings() -> Settings:
    """Settings with placeholder credentials."""
    return Settings(
        openai_api_key="test-key",
        pinecone_api_key="test-key",
        supabase_url="https://example.supabase.co",
        supabase_key="test-key",
        site_url="https://example.test/",
    )


@pytest.fixture
def page_text() -> str:
    return PAGE_TEXT


@pytest.fixture
def sample_html() -> str:
    """Sample HTML content for testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Test Page</title><style>body { color: red; }</style></head>
    <body>
        <!-- hero section -->
        <h1>Main   Heading</h1>
        <p>This is a test paragraph with <b>bold</b> text.</p>
        <script>console.log("tracking");</script>
        <noscript>Enable JavaScript</noscript>
        <svg><text>Logo</text></svg>
        <img src="hero.png" alt="Hero">
        <footer>
            Footer content
        </footer>
    </body>
    </html>
    """


@pytest.fixture
def site() -> FakeSession:
    """
    A small site: the seed links to one reachable page, one that times
    out and one on another origin.

    ``/about`` links back to the seed, forming a cycle.
    """
    return FakeSession(
        pages={
            "https://example.test/": (
                PAGE_TEXT,
                {
                    "https://example.test/about",
                    "https://example.test/slow",
                    "https://other.test/elsewhere",
                },
            ),
            "https://example.test/about": (
                "About us. " + PAGE_TEXT,
                {"https://example.test/", "https://example.test/team"},
            ),
            "https://example.test/team": ("Team page. " + PAGE_TEXT, set()),
        },
        timeouts={"https://example.test/slow"},
    )
