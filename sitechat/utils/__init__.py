"""Utility functions for browsing, text processing, and logging."""

from sitechat.utils.backoff import Backoff
from sitechat.utils.browser import BrowserSession, open_browser_session
from sitechat.utils.chunker import TextChunker
from sitechat.utils.hash import chunk_id, compute_hash
from sitechat.utils.logger import get_logger, log_event
from sitechat.utils.text import extract_visible_text, normalize_whitespace

__all__ = [
    "open_browser_session",
    "BrowserSession",
    "extract_visible_text",
    "normalize_whitespace",
    "TextChunker",
    "Backoff",
    "compute_hash",
    "chunk_id",
    "get_logger",
    "log_event",
]
