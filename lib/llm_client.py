# =============================================================================
# lib/llm_client.py - OpenAI Chat Client
# =============================================================================
# Thin async wrapper around the OpenAI chat completions API.
#
# The rest of the application only needs one operation:
#   "given a system context and a message list, return one assistant message"
#
# Usage:
#   from lib.llm_client import LLMClient
#   llm = LLMClient()
#   reply = await llm.complete(system_prompt, [{"role": "user", "content": "hi"}])
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class LLMReply:
    """One assistant message plus token usage (if the API reported it)."""
    content: str | None
    usage: dict[str, Any] | None = field(default=None)


class LLMClient:
    """
    Async OpenAI client shared by the completion engine and the assistant.

    The underlying AsyncOpenAI client is created lazily so importing this
    module never requires network configuration.
    """

    def __init__(self, model: str | None = None, api_key: str | None = None):
        self.model = model or settings.OPENAI_MODEL
        self._api_key = api_key or settings.OPENAI_API_KEY
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
            logger.info(f"OpenAI client initialized with model={self.model}")
        return self._client

    async def complete(
        self,
        system: str,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> LLMReply:
        """
        Send `system` + `messages` and return the first choice.

        Errors from the API propagate; callers decide whether to surface
        or swallow them.
        """
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": system}, *messages],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = None
        if response.choices:
            content = response.choices[0].message.content

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = response.usage.model_dump()

        return LLMReply(content=content, usage=usage)
