"""Tests for prompt assembly and the streamed tool loop."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from sitechat.core.chat import NO_DOCUMENTS, ChatService, PromptTemplates
from sitechat.core.leads import LeadService
from sitechat.core.retriever import Retriever
from sitechat.models import ScoredText

from conftest import FakeChunkStore, FakeEmbedder, FakeLeadStore

PROMPTS = {
    "assistant_name": "Siluku",
    "site_name": "Example",
    "with_context": "You are {assistant_name} for {site_name}.\nContext:\n{context}",
    "without_context": "You are {assistant_name} for {site_name}. No context.",
}


def text_event(text):
    delta = SimpleNamespace(content=text, tool_calls=None)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


def tool_event(index, call_id=None, name=None, arguments=None):
    function = SimpleNamespace(name=name, arguments=arguments)
    call = SimpleNamespace(index=index, id=call_id, function=function)
    delta = SimpleNamespace(content=None, tool_calls=[call])
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


async def stream_of(*events):
    for event in events:
        yield event


def make_service(steps, matches=None, lead_store=None, max_steps=10):
    client = Mock()
    client.chat.completions.create = AsyncMock(side_effect=[stream_of(*step) for step in steps])
    store = FakeChunkStore(matches=matches or [])
    retriever = Retriever(store, FakeEmbedder())
    leads = LeadService(lead_store or FakeLeadStore())
    service = ChatService(
        client,
        retriever,
        leads,
        model="gpt-4o-mini",
        max_steps=max_steps,
        top_k=4,
        prompts=PromptTemplates(PROMPTS),
    )
    return service, client


async def collect(stream):
    return "".join([piece async for piece in stream])


def test_prompt_with_context():
    prompt = PromptTemplates(PROMPTS).render("We are open 9 to 5 {weekdays}.")

    assert prompt == "You are Siluku for Example.\nContext:\nWe are open 9 to 5 {weekdays}."


def test_prompt_without_context():
    assert PromptTemplates(PROMPTS).render("") == "You are Siluku for Example. No context."


def test_default_prompts_load():
    prompt = PromptTemplates().render("Retrieved text")

    assert "Retrieved text" in prompt


@pytest.mark.asyncio
async def test_streams_plain_reply():
    service, client = make_service([[text_event("Hello"), text_event(" there!")]])
    history = [{"role": "user", "content": "hi"}]

    reply = await collect(service.stream_reply(history, context="Some context"))

    assert reply == "Hello there!"
    messages = client.chat.completions.create.await_args.kwargs["messages"]
    assert messages[0]["role"] == "system"
    assert "Some context" in messages[0]["content"]
    assert messages[1:] == history


@pytest.mark.asyncio
async def test_retrieval_tool_round_trip():
    steps = [
        [
            tool_event(0, call_id="call_1", name="retrieve_document", arguments='{"query": '),
            tool_event(0, arguments='"pricing"}'),
        ],
        [text_event("Plans start at ₹999.")],
    ]
    service, client = make_service(steps, matches=[ScoredText("Plans start at ₹999.", 0.9)])

    reply = await collect(service.stream_reply([{"role": "user", "content": "price?"}]))

    assert reply == "Plans start at ₹999."
    assert client.chat.completions.create.await_count == 2

    second_messages = client.chat.completions.create.await_args_list[1].kwargs["messages"]
    assistant, tool = second_messages[-2], second_messages[-1]
    assert assistant["tool_calls"][0]["function"] == {
        "name": "retrieve_document",
        "arguments": '{"query": "pricing"}',
    }
    assert tool["tool_call_id"] == "call_1"
    assert json.loads(tool["content"]) == {"text": "Plans start at ₹999."}


@pytest.mark.asyncio
async def test_stops_after_max_steps():
    loop_step = [tool_event(0, call_id="call", name="retrieve_document", arguments="{}")]
    service, client = make_service([loop_step, loop_step], max_steps=2)

    reply = await collect(service.stream_reply([{"role": "user", "content": "?"}], fallback_query="?"))

    assert reply == ""
    assert client.chat.completions.create.await_count == 2


@pytest.mark.asyncio
async def test_retrieve_tool_uses_fallback_query():
    service, _ = make_service([])

    result = await service.run_tool("retrieve_document", "{}", fallback_query="opening hours")

    assert result == {"text": NO_DOCUMENTS}
    assert service.retriever.embedder.calls == ["opening hours"]


@pytest.mark.asyncio
async def test_collect_form_tool_stores_lead():
    lead_store = FakeLeadStore()
    service, _ = make_service([], lead_store=lead_store)

    result = await service.run_tool(
        "collect_form",
        json.dumps({"fullName": "Jane Doe", "email": "jane@example.com", "phone": "12345"}),
    )

    assert result == {"text": "Thanks Jane Doe! Your inquiry has been received."}
    assert lead_store.leads[0].phone == "12345"


@pytest.mark.asyncio
async def test_collect_form_tool_reports_validation_error():
    lead_store = FakeLeadStore()
    service, _ = make_service([], lead_store=lead_store)

    result = await service.run_tool(
        "collect_form",
        json.dumps({"fullName": "Jane Doe", "email": "not-an-email"}),
    )

    assert "error" in result
    assert "email" in result["error"]
    assert lead_store.leads == []


@pytest.mark.asyncio
async def test_unknown_tool_and_bad_arguments():
    service, _ = make_service([])

    assert await service.run_tool("send_email", "{}") == {"error": "Unknown tool: send_email"}
    assert "error" in await service.run_tool("retrieve_document", "{not json")
