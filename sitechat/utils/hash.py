"""Stable identifiers for indexed chunks."""

import hashlib


def compute_hash(content: str | bytes) -> str:
    """
    Compute SHA-256 hash of content.

    Examples:
        >>> compute_hash("Hello, World!")
        'dffd6021bb2bd5b0af676290809ec3a53191dd81c7f70a4b28688a362182986f'
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    return hashlib.sha256(content).hexdigest()


def url_key(url: str) -> str:
    """Short hash prefix shared by every chunk record of a page."""
    return compute_hash(url)[:16]


def chunk_id(url: str, chunk_index: int) -> str:
    """
    Build the vector record id for one chunk of a page.

    Ids look like ``<url_key>#<chunk_index>`` so all chunks of a URL share a
    prefix and chunk ``0`` exists whenever the page has been indexed.

    Args:
        url: Page URL
        chunk_index: Position of the chunk within the page

    Returns:
        Vector record id
    """
    return f"{url_key(url)}#{chunk_index}"
