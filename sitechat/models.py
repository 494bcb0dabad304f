"""Data models shared across the pipeline."""

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class CrawlVisit:
    """A queued crawl step: a URL and how many link levels remain."""

    url: str
    depth_remaining: int


@dataclass(frozen=True)
class PageChunk:
    """One embedded chunk of a page, as written to the vector store."""

    url: str
    chunk_index: int
    text: str
    embedding: list[float]


@dataclass(frozen=True)
class ScoredText:
    """A nearest-neighbour match."""

    text: str
    score: float


class Lead(BaseModel):
    """
    A contact request captured by the chat widget.

    The widget sends camelCase keys (``fullName``, ``inquiryType``, ...);
    snake_case field names are accepted too.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    name: str = Field(..., alias="fullName", min_length=1)
    email: str
    phone: str | None = None
    company: str | None = None
    inquiry_type: str | None = None
    message: str | None = None
    contact_method: str | None = None
    best_time: str | None = None
    agree: bool = False
    newsletter: bool = False

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email address")
        return value

    def to_row(self) -> dict:
        """Column mapping for the leads table."""
        return self.model_dump(by_alias=False)
