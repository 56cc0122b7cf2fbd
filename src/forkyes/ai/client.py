"""
ForkYes - Completion client.

The AI service talks to the language model through the CompletionClient
protocol: messages in, free text out. Nothing here promises the text is
well-formed JSON; that is the parser's problem.
"""

import logging
from typing import Protocol

from openai import AsyncOpenAI

from forkyes.ai.prompt_logger import log_prompt
from forkyes.config import settings

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        request_type: str = "completion",
    ) -> str:
        ...


class OpenAICompletionClient:
    """CompletionClient backed by the OpenAI chat completions API."""

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        self.client = AsyncOpenAI(api_key=settings.openai_api_key) if client is None else client

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        request_type: str = "completion",
    ) -> str:
        """
        Make one chat completion call and return the reply text.

        Returns "" when the model sends no content. Transport and API
        errors propagate after being logged.
        """
        try:
            resp = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            log_prompt(
                request_type=request_type,
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                error=str(e),
            )
            raise

        text = (resp.choices[0].message.content or "") if resp.choices else ""
        log_prompt(
            request_type=request_type,
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response=text,
        )
        logger.debug(f"{request_type}: {model} returned {len(text)} chars")
        return text


# Singleton client instance
_client: OpenAICompletionClient | None = None


def get_completion_client() -> OpenAICompletionClient:
    """
    Get the process-wide OpenAI completion client.

    Uses singleton pattern to reuse the HTTP connection pool.
    """
    global _client

    if _client is None:
        _client = OpenAICompletionClient()

    return _client
