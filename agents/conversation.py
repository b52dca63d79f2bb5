# =============================================================================
# agents/conversation.py - Conversation Manager
# =============================================================================
# Maintains the ordered chat history with the SQL assistant and extracts
# runnable code from its replies.
#
# Ordering:
# - Ordinals are assigned here, at append time, never by callers.
# - A user turn is appended before the assistant call is awaited, so a second
#   user message can arrive while a reply is still outstanding. Late replies
#   get the next ordinal when they land; the log never has gaps.
#
# Every assistant request sends the FULL history, prefixed with a system
# context rebuilt from the current schema and editor buffer.
#
# Usage:
#   manager = ConversationManager(llm)
#   reply = await manager.send("show me all rows", schema_text, editor_text)
#   for block in extract_code_blocks(reply.text):
#       ...
# =============================================================================

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from app.config import settings
from app.exceptions import AssistantError, InputValidationError
from agents.prompts.context_builder import ContextKind, build_context
from core.models.chat import (
    CodeBlock,
    ConversationMessage,
    MessageRole,
    MessageSegment,
)
from lib.memory import format_messages_for_openai, parse_api_messages

logger = logging.getLogger(__name__)


DEFAULT_GREETING = (
    "Hello! I'm your SQL assistant. I can help you write queries, understand "
    "your database schema, and analyze your data. What would you like to know?"
)

APOLOGY_MESSAGE = (
    "Sorry, I encountered an error. Please make sure your OpenAI API key is "
    "configured correctly."
)

_FENCE = re.compile(r"```([\s\S]*?)```")


# =============================================================================
# Code Fence Extraction
# =============================================================================

def _parse_fence(inner: str) -> CodeBlock:
    """
    Split fence contents into language tag and code.

    The first line is the language tag; an empty tag (or a fence with no
    line break at all) means "text".
    """
    if "\n" not in inner:
        return CodeBlock(language="text", code=inner.strip())

    first_line, code = inner.split("\n", 1)
    language = first_line.strip() or "text"
    return CodeBlock(language=language, code=code.strip("\n").rstrip())


def split_message(text: str) -> list[MessageSegment]:
    """
    Split assistant text into prose and code segments in display order.

    Empty prose between adjacent fences is dropped.
    """
    segments: list[MessageSegment] = []
    position = 0

    for match in _FENCE.finditer(text):
        prose = text[position:match.start()]
        if prose.strip():
            segments.append(MessageSegment(text=prose.strip("\n")))
        segments.append(MessageSegment(block=_parse_fence(match.group(1))))
        position = match.end()

    tail = text[position:]
    if tail.strip():
        segments.append(MessageSegment(text=tail.strip("\n")))

    return segments


def extract_code_blocks(text: str) -> list[CodeBlock]:
    """
    Every fenced block in `text`, in order.

    Example:
        extract_code_blocks("Try:\\n```sql\\nSELECT 1;\\n```")
        # [CodeBlock(language="sql", code="SELECT 1;")]
    """
    return [_parse_fence(match.group(1)) for match in _FENCE.finditer(text)]


# =============================================================================
# Conversation Manager
# =============================================================================

class ConversationManager:
    """
    Append-only conversation with the SQL assistant.

    Args:
        llm: Object with `async complete(system, messages, temperature, max_tokens)`
        greeting: Initial assistant message (None for an empty log)
        max_messages: Optional window of history sent to the LLM
            (default: settings.CHAT_MAX_MESSAGES, None = unbounded)
    """

    def __init__(
        self,
        llm: Any,
        greeting: str | None = DEFAULT_GREETING,
        max_messages: int | None = None,
    ):
        self.llm = llm
        self.max_messages = max_messages if max_messages is not None else settings.CHAT_MAX_MESSAGES
        self._messages: list[ConversationMessage] = []
        self.last_usage: dict[str, Any] | None = None

        if greeting:
            self._append(MessageRole.ASSISTANT, greeting)

    @classmethod
    def from_api_messages(
        cls,
        llm: Any,
        messages: Iterable[Mapping[str, Any]],
        max_messages: int | None = None,
    ) -> "ConversationManager":
        """Rebuild a conversation from an API payload, assigning ordinals in order."""
        manager = cls(llm, greeting=None, max_messages=max_messages)
        for role, text in parse_api_messages(messages):
            manager._append(role, text)
        return manager

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    @property
    def history(self) -> list[ConversationMessage]:
        """Copy of the full ordered log."""
        return list(self._messages)

    def _append(self, role: MessageRole, text: str) -> ConversationMessage:
        message = ConversationMessage(
            ordinal=len(self._messages) + 1,
            role=role,
            text=text,
        )
        self._messages.append(message)
        return message

    def append_user_turn(self, text: str) -> ConversationMessage:
        """
        Append a user message.

        Raises:
            InputValidationError: If text is blank
        """
        if not text or not text.strip():
            raise InputValidationError("Message cannot be empty", field="message")
        return self._append(MessageRole.USER, text)

    def messages_for_llm(self) -> list[dict[str, str]]:
        return format_messages_for_openai(self._messages, self.max_messages)

    # -------------------------------------------------------------------------
    # Assistant Turns
    # -------------------------------------------------------------------------

    async def request_assistant_turn(
        self,
        schema_text: str | None,
        current_buffer: str | None = None,
    ) -> ConversationMessage:
        """
        Ask the assistant to reply to the history as it is right now.

        The system context is rebuilt for this call. The reply is appended
        when it arrives.

        Raises:
            AssistantError: If the LLM returns no content
        """
        system = build_context(ContextKind.CONVERSATION, schema_text, current_buffer)
        messages = self.messages_for_llm()
        logger.info(f"Requesting assistant turn with {len(messages)} message(s) of history")

        reply = await self.llm.complete(
            system,
            messages,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS,
        )

        if not reply.content or not reply.content.strip():
            raise AssistantError()

        self.last_usage = reply.usage
        return self._append(MessageRole.ASSISTANT, reply.content)

    async def send(
        self,
        text: str,
        schema_text: str | None,
        current_buffer: str | None = None,
    ) -> ConversationMessage:
        """
        Append a user message and get the assistant's reply.

        Failures of the assistant call are rendered as an apologetic
        assistant message instead of being raised.

        Raises:
            InputValidationError: If text is blank
        """
        self.append_user_turn(text)

        try:
            return await self.request_assistant_turn(schema_text, current_buffer)
        except Exception as e:
            logger.error(f"Assistant turn failed: {e}")
            return self._append(MessageRole.ASSISTANT, APOLOGY_MESSAGE)
