"""HTML text extraction and whitespace normalization."""

import re

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

# Elements whose text never reaches the reader
NON_CONTENT_TAGS = ("script", "style", "noscript", "svg", "img")

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim the ends."""
    return _WHITESPACE.sub(" ", text).strip()


def extract_visible_text(
    html: str,
    exclude_tags: tuple[str, ...] | list[str] = NON_CONTENT_TAGS,
) -> str:
    """
    Extract the visible text of a page in document order.

    Non-content elements are removed first, then every remaining text node
    under ``<body>`` with non-blank content is concatenated with a single
    space between nodes and the result is whitespace-normalized.

    Args:
        html: Rendered page HTML
        exclude_tags: Tag names removed before walking text nodes

    Returns:
        Normalized page text (empty if the page has no visible text)
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup(list(exclude_tags)):
        element.decompose()

    root = soup.body or soup
    pieces = [
        node
        for node in root.find_all(string=True)
        if node.strip() and not isinstance(node, PreformattedString)
    ]

    return normalize_whitespace(" ".join(pieces))
