"""Chat replies: prompt assembly and streamed model calls with tools."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from sitechat.config.settings import load_prompt_config
from sitechat.core.leads import LeadService
from sitechat.core.retriever import Retriever
from sitechat.errors import SitechatError

logger = logging.getLogger(__name__)

NO_DOCUMENTS = "No relevant documents found."

TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "retrieve_document",
            "description": "Retrieve relevant content from the indexed website.",
            "parameters": {
                "type": "object",
                "properties": {"query": {"type": "string"}},
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "collect_form",
            "description": "Collect full customer inquiry details (name, email, phone, etc.)",
            "parameters": {
                "type": "object",
                "properties": {
                    "fullName": {"type": "string"},
                    "email": {"type": "string", "format": "email"},
                    "phone": {"type": "string"},
                    "company": {"type": "string"},
                    "inquiryType": {"type": "string"},
                    "message": {"type": "string"},
                    "contactMethod": {"type": "string"},
                    "bestTime": {"type": "string"},
                    "agree": {"type": "boolean", "default": False},
                    "newsletter": {"type": "boolean", "default": False},
                },
                "required": ["fullName", "email"],
            },
        },
    },
]


class PromptTemplates:
    """System prompts loaded from ``prompts.yaml``."""

    def __init__(self, config: dict | None = None):
        self.config = config or load_prompt_config()

    def render(self, context: str) -> str:
        """Pick the template for whether context was retrieved and fill it in."""
        key = "with_context" if context else "without_context"
        return self.config[key].format(
            assistant_name=self.config.get("assistant_name", "Assistant"),
            site_name=self.config.get("site_name", "this website"),
            context=context,
        )


class ChatService:
    """
    Streams assistant replies grounded on retrieved site content.

    The model can call two tools while answering:
    - ``retrieve_document`` searches the index again with its own query
    - ``collect_form`` stores a lead

    Each tool round costs one model step; a reply uses at most ``max_steps``.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        retriever: Retriever,
        leads: LeadService,
        model: str = "gpt-4o-mini",
        max_steps: int = 10,
        top_k: int = 4,
        prompts: PromptTemplates | None = None,
    ):
        self.client = client
        self.retriever = retriever
        self.leads = leads
        self.model = model
        self.max_steps = max_steps
        self.top_k = top_k
        self.prompts = prompts or PromptTemplates()

    async def stream_reply(
        self,
        messages: list[dict[str, Any]],
        context: str = "",
        fallback_query: str = "",
    ) -> AsyncIterator[str]:
        """
        Stream the assistant's reply text.

        Args:
            messages: Conversation as OpenAI chat messages (no system message)
            context: Retrieved site text, possibly empty
            fallback_query: Query used when a retrieval tool call has none

        Yields:
            Text deltas as the model produces them
        """
        conversation = [{"role": "system", "content": self.prompts.render(context)}, *messages]

        for _ in range(self.max_steps):
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=conversation,
                tools=TOOLS,
                stream=True,
            )

            content: list[str] = []
            calls: dict[int, dict[str, str]] = {}

            async for event in stream:
                if not event.choices:
                    continue
                delta = event.choices[0].delta

                if delta.content:
                    content.append(delta.content)
                    yield delta.content

                for call in delta.tool_calls or []:
                    entry = calls.setdefault(call.index, {"id": "", "name": "", "arguments": ""})
                    if call.id:
                        entry["id"] = call.id
                    if call.function and call.function.name:
                        entry["name"] += call.function.name
                    if call.function and call.function.arguments:
                        entry["arguments"] += call.function.arguments

            if not calls:
                return

            ordered = [calls[index] for index in sorted(calls)]
            conversation.append(
                {
                    "role": "assistant",
                    "content": "".join(content) or None,
                    "tool_calls": [
                        {
                            "id": call["id"],
                            "type": "function",
                            "function": {"name": call["name"], "arguments": call["arguments"]},
                        }
                        for call in ordered
                    ],
                }
            )

            for call in ordered:
                result = await self.run_tool(call["name"], call["arguments"], fallback_query)
                conversation.append(
                    {
                        "role": "tool",
                        "tool_call_id": call["id"],
                        "content": json.dumps(result),
                    }
                )

        logger.warning(f"Reply stopped after {self.max_steps} steps")

    async def run_tool(self, name: str, arguments: str, fallback_query: str = "") -> dict[str, Any]:
        """
        Execute one tool call.

        Args:
            name: Tool name
            arguments: JSON-encoded arguments from the model
            fallback_query: Query used when ``retrieve_document`` gets none

        Returns:
            Tool result, ``{"error": ...}`` if it failed
        """
        try:
            args = json.loads(arguments) if arguments else {}
        except json.JSONDecodeError:
            return {"error": f"Invalid arguments for {name}"}

        try:
            if name == "retrieve_document":
                docs = await self.retriever.search(args.get("query") or fallback_query, self.top_k)
                return {"text": docs or NO_DOCUMENTS}

            if name == "collect_form":
                lead = await self.leads.submit(args)
                return {"text": self.leads.acknowledgement(lead)}

        except SitechatError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return {"error": str(e)}

        return {"error": f"Unknown tool: {name}"}
