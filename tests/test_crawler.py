"""Tests for the site crawler."""

import asyncio

import pytest

from sitechat.core.crawler import SiteCrawler, VisitedSet

from conftest import PAGE_TEXT, FakeSession


@pytest.mark.asyncio
async def test_crawl_skips_unreachable_and_foreign_links(site):
    """The seed and its reachable same-origin link are found; the timeout is contained."""
    crawler = SiteCrawler(max_concurrency=2)

    urls = await crawler.crawl(site, "https://example.test/", max_depth=2)

    assert urls == {"https://example.test/", "https://example.test/about"}
    assert "https://example.test/slow" in site.opened
    assert "https://other.test/elsewhere" not in site.opened


@pytest.mark.asyncio
async def test_crawl_depth_bound(site):
    crawler = SiteCrawler()

    assert await crawler.crawl(site, "https://example.test/", max_depth=1) == {
        "https://example.test/"
    }
    assert await crawler.crawl(site, "https://example.test/", max_depth=0) == set()


@pytest.mark.asyncio
async def test_crawl_terminates_on_cycles():
    """Pages linking to each other are each visited once."""
    pages = {
        "https://example.test/": (PAGE_TEXT, {"https://example.test/a"}),
        "https://example.test/a": (PAGE_TEXT, {"https://example.test/b", "https://example.test/"}),
        "https://example.test/b": (PAGE_TEXT, {"https://example.test/a", "https://example.test/"}),
    }
    session = FakeSession(pages)
    crawler = SiteCrawler(max_concurrency=3)

    urls = await crawler.crawl(session, "https://example.test/", max_depth=10)

    assert urls == set(pages)
    assert sorted(session.opened) == sorted(pages)


@pytest.mark.asyncio
async def test_crawl_strips_fragments():
    pages = {
        "https://example.test/": (
            PAGE_TEXT,
            {"https://example.test/faq#pricing", "https://example.test/faq#support"},
        ),
        "https://example.test/faq": (PAGE_TEXT, set()),
    }
    session = FakeSession(pages)

    urls = await SiteCrawler().crawl(session, "https://example.test/#top", max_depth=2)

    assert urls == {"https://example.test/", "https://example.test/faq"}
    assert session.opened.count("https://example.test/faq") == 1


@pytest.mark.asyncio
async def test_crawl_respects_concurrency_limit():
    links = {f"https://example.test/p{i}" for i in range(12)}
    pages = {"https://example.test/": (PAGE_TEXT, links)}
    pages.update({link: (PAGE_TEXT, set()) for link in links})
    session = FakeSession(pages)

    urls = await SiteCrawler(max_concurrency=3).crawl(session, "https://example.test/")

    assert len(urls) == 13
    assert session.max_open <= 3


@pytest.mark.asyncio
async def test_crawl_max_pages():
    links = {f"https://example.test/p{i}" for i in range(10)}
    pages = {"https://example.test/": (PAGE_TEXT, links)}
    pages.update({link: (PAGE_TEXT, set()) for link in links})
    session = FakeSession(pages)

    urls = await SiteCrawler(max_pages=4).crawl(session, "https://example.test/")

    assert len(urls) == 4
    assert "https://example.test/" in urls


@pytest.mark.asyncio
async def test_crawl_of_unreachable_seed_is_empty():
    session = FakeSession({}, timeouts={"https://example.test/"})

    assert await SiteCrawler().crawl(session, "https://example.test/") == set()


@pytest.mark.asyncio
async def test_visited_set_claims_once_under_concurrency():
    visited = VisitedSet()

    results = await asyncio.gather(*[visited.claim("https://example.test/") for _ in range(20)])

    assert results.count(True) == 1
    assert len(visited) == 1
    assert "https://example.test/" in visited


def test_invalid_concurrency():
    with pytest.raises(ValueError):
        SiteCrawler(max_concurrency=0)
