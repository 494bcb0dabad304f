"""HTTP API for the chat widget."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from openai import AsyncOpenAI
from pydantic import BaseModel

from sitechat.config.settings import Settings, get_settings
from sitechat.core.chat import ChatService
from sitechat.core.crawler import SiteCrawler
from sitechat.core.embedder import Embedder
from sitechat.core.extractor import PageExtractor
from sitechat.core.indexer import Indexer
from sitechat.core.leads import LeadService
from sitechat.core.orchestrator import IndexingState, SiteIndexer
from sitechat.core.retriever import Retriever
from sitechat.errors import LeadValidationError, StoreError
from sitechat.stores.pinecone_store import PineconeChunkStore
from sitechat.stores.supabase_store import SupabaseLeadStore
from sitechat.utils.chunker import TextChunker
from sitechat.utils.logger import configure_logging

logger = logging.getLogger(__name__)


# --- Pydantic Models ---
class ChatPart(BaseModel):
    type: str = "text"
    text: str | None = None


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    parts: list[ChatPart] = []
    content: str | None = None
    metadata: dict[str, Any] | None = None

    def text(self) -> str:
        joined = " ".join(part.text for part in self.parts if part.type == "text" and part.text)
        return joined or self.content or ""


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = []
    query: str | None = None


@dataclass
class Services:
    """Everything a request handler needs, built once per process."""

    settings: Settings
    site_indexer: SiteIndexer
    retriever: Retriever
    leads: LeadService
    chat: ChatService


def build_services(settings: Settings) -> Services:
    """Wire the pipeline from settings."""
    client = AsyncOpenAI(api_key=settings.openai_api_key)
    chunk_store = PineconeChunkStore.from_settings(settings)
    lead_store = SupabaseLeadStore.from_settings(settings)

    embedder = Embedder.from_settings(settings, client=client)
    chunker = TextChunker(
        chunk_size=settings.chunk_size,
        overlap=settings.chunk_overlap,
        min_length=settings.min_chunk_length,
    )
    extractor = PageExtractor(chunker, timeout_ms=settings.navigation_timeout_ms)
    crawler = SiteCrawler(
        timeout_ms=settings.navigation_timeout_ms,
        max_concurrency=settings.crawl_max_concurrency,
        max_pages=settings.crawl_max_pages,
    )
    site_indexer = SiteIndexer(
        crawler,
        Indexer(chunk_store, embedder, extractor),
        state=IndexingState(),
        max_depth=settings.crawl_max_depth,
    )

    retriever = Retriever(chunk_store, embedder)
    leads = LeadService(lead_store)
    chat = ChatService(
        client,
        retriever,
        leads,
        model=settings.chat_model,
        max_steps=settings.chat_max_steps,
        top_k=settings.retrieval_top_k,
    )

    return Services(settings, site_indexer, retriever, leads, chat)


def to_model_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Convert widget messages to chat-completion messages, dropping empty ones."""
    converted = []
    for message in messages:
        if message.role == "system":
            continue
        text = message.text()
        if text:
            converted.append({"role": message.role, "content": text})
    return converted


def create_app(services: Services | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Prebuilt services; built from settings at startup if None
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            settings = get_settings()
            configure_logging(settings.log_level, settings.log_file)
            app.state.services = build_services(settings)
        yield

    app = FastAPI(title="sitechat", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health(request: Request):
        services: Services = request.app.state.services
        return {"status": "ok", "indexing_started": services.site_indexer.state.started}

    @app.post("/api/chat")
    async def chat(body: ChatRequest, request: Request):
        services: Services = request.app.state.services
        last_user = next((m for m in reversed(body.messages) if m.role == "user"), None)

        form = (last_user.metadata or {}).get("form") if last_user else None
        if isinstance(form, dict):
            try:
                lead = await services.leads.submit(form)
            except LeadValidationError as e:
                return JSONResponse({"error": e.message, "field": e.field}, status_code=422)
            except StoreError as e:
                logger.error(f"Lead insert error: {e}")
                return JSONResponse({"error": "Failed to save lead"}, status_code=500)
            return {"text": services.leads.acknowledgement(lead)}

        query = body.query or (last_user.text() if last_user else "")

        if services.site_indexer.trigger(services.settings.site_url):
            logger.info(f"Started background indexing of {services.settings.site_url}")

        context = ""
        if query:
            try:
                context = await services.retriever.search(query, services.settings.retrieval_top_k)
            except Exception as e:
                logger.error(f"Vector search error: {e}")

        reply = services.chat.stream_reply(to_model_messages(body.messages), context, query)
        return StreamingResponse(reply, media_type="text/plain; charset=utf-8")

    return app
