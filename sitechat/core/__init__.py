"""Core pipeline components."""

from sitechat.core.chat import ChatService
from sitechat.core.crawler import SiteCrawler
from sitechat.core.embedder import Embedder
from sitechat.core.extractor import PageExtractor
from sitechat.core.indexer import Indexer
from sitechat.core.leads import LeadService
from sitechat.core.orchestrator import IndexingState, SiteIndexer
from sitechat.core.retriever import Retriever

__all__ = [
    "SiteCrawler",
    "PageExtractor",
    "Embedder",
    "Indexer",
    "Retriever",
    "IndexingState",
    "SiteIndexer",
    "LeadService",
    "ChatService",
]
