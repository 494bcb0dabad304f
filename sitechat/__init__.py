"""Support chat backend: crawl a site, index it, answer questions about it."""

__version__ = "0.1.0"
