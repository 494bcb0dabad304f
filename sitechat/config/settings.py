"""Configuration settings using Pydantic."""

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = Field(..., description="OpenAI API key")

    # Pinecone
    pinecone_api_key: str = Field(..., description="Pinecone API key")
    pinecone_environment: str = Field(default="us-east-1", description="Pinecone region")
    pinecone_index_name: str = Field(default="sitechat-index", description="Pinecone index name")
    pinecone_create_index: bool = Field(
        default=False,
        description="Create the Pinecone index on startup if it is missing",
    )

    # Supabase (lead capture)
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_key: str = Field(..., description="Supabase service key")
    leads_table: str = Field(default="user_leads", description="Table receiving leads")

    # Site
    site_url: str = Field(
        default="https://www.techmurugan.in/",
        description="Seed URL crawled and indexed on first request",
    )

    # Crawling
    crawl_max_depth: int = Field(default=2, description="Link depth followed from the seed")
    crawl_max_concurrency: int = Field(
        default=4,
        description="Maximum browser pages open at once while crawling",
    )
    crawl_max_pages: int | None = Field(
        default=None,
        description="Optional cap on pages visited per crawl",
    )
    navigation_timeout_ms: int = Field(default=30000, description="Page navigation timeout")

    # Chunking
    chunk_size: int = Field(default=800, description="Chunk size in characters")
    chunk_overlap: int = Field(default=200, description="Chunk overlap in characters")
    min_chunk_length: int = Field(
        default=50,
        description="Chunks this short or shorter are dropped",
    )

    # Embedding
    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model",
    )
    embedding_dimensions: int = Field(default=1536, description="Embedding dimensions")
    embedding_retries: int = Field(default=5, description="Attempts before giving up on quota errors")
    embedding_initial_delay: float = Field(
        default=2.0,
        description="First backoff delay in seconds, doubled after each quota error",
    )

    # Retrieval and chat
    retrieval_top_k: int = Field(default=4, description="Chunks retrieved per question")
    chat_model: str = Field(default="gpt-4o-mini", description="OpenAI chat model")
    chat_max_steps: int = Field(default=10, description="Maximum model calls per reply")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Path | None = Field(default=None, description="Optional JSONL log file")

    # Server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")


def load_prompt_config() -> dict:
    """Load system prompt templates from YAML file."""
    config_path = Path(__file__).parent / "prompts.yaml"
    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
