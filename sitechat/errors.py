"""Exception hierarchy for the indexing and retrieval pipeline."""


class SitechatError(Exception):
    """Base class for all sitechat errors."""


class NavigationError(SitechatError):
    """A page could not be loaded or evaluated."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class NavigationTimeout(NavigationError):
    """Page navigation exceeded its timeout."""

    def __init__(self, url: str, timeout_ms: int):
        super().__init__(url, f"timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class EmbeddingError(SitechatError):
    """Base class for embedding failures."""


class EmbeddingExhausted(EmbeddingError):
    """Raised when rate-limit retries are used up."""

    def __init__(self, attempts: int):
        super().__init__(f"Max retries reached for embedding ({attempts} attempts)")
        self.attempts = attempts


class StoreError(SitechatError):
    """A vector or row store operation failed."""


class LeadValidationError(SitechatError):
    """A lead submission is missing a required field or has a malformed one."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
