"""
Message suggestions for visitors of a public inbox page.

An OpenAI chat model (through LangChain) writes three open-ended questions
joined by ``||``; the router streams its output as server-sent events.
"""

import json
import logging
from typing import AsyncIterator

from langchain_openai import ChatOpenAI

from whisperbox.database.config.config import Settings
from whisperbox.database.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

SEPARATOR = "||"

SUGGESTION_PROMPT = (
    "Create a list of three open-ended and engaging questions formatted as a single string. "
    "Each question should be separated by '||'. These questions are for an anonymous social "
    "messaging platform and should be suitable for a diverse audience. Avoid personal or "
    "sensitive topics, focusing instead on universal themes that encourage friendly interaction. "
    "For example, your output should be structured like this: "
    "'What's a hobby you've recently started?||If you could have dinner with any historical "
    "figure, who would it be?||What's a simple thing that makes you happy?'. "
    "Ensure the questions are intriguing, foster curiosity, and contribute to a positive and "
    "welcoming conversational environment."
)


def build_suggestion_model(settings: Settings) -> ChatOpenAI:
    """
    Create the chat model used for suggestions.

    Raises:
        ServiceUnavailableError: no OpenAI `API_KEY` is configured.
    """
    if not settings.API_KEY:
        raise ServiceUnavailableError("Message suggestions are not configured")
    return ChatOpenAI(model=settings.OPEN_AI_MODEL, api_key=settings.API_KEY, temperature=0.9)


def sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


async def stream_suggestions(model) -> AsyncIterator[str]:
    """
    Yield the model output as SSE frames: ``data: {"response": ..., "status": 200}``.

    A failure mid-stream ends the stream with a ``status: 500`` frame, since
    the response status has already been sent.
    """
    try:
        async for chunk in model.astream(SUGGESTION_PROMPT):
            content = chunk.content if hasattr(chunk, "content") else str(chunk)
            if content:
                yield sse_event({"response": content, "status": 200})
    except Exception:
        logger.exception("Suggestion generation failed")
        yield sse_event({"response": "Failed to generate suggestions", "status": 500})


def parse_suggestions(text: str) -> list[str]:
    """Split the joined model output into individual questions."""
    return [part.strip().strip("'\"") for part in text.split(SEPARATOR) if part.strip().strip("'\"")]


async def generate_suggestions(model) -> list[str]:
    result = await model.ainvoke(SUGGESTION_PROMPT)
    content = result.content if hasattr(result, "content") else str(result)
    return parse_suggestions(content)
