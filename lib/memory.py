# =============================================================================
# lib/memory.py - Conversation History Helpers
# =============================================================================
# Converts conversation history between the shapes used in the app:
# - API payloads: [{"role": "user", "content": "..."}]
# - ConversationMessage objects (ordinal, role, text)
# - OpenAI messages array
#
# History sent to the LLM is unbounded unless a max_messages window is given,
# in which case only the most recent messages are kept.
#
# Usage:
#   from lib.memory import format_messages_for_openai
#   payload = format_messages_for_openai(history, max_messages=20)
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from app.exceptions import InputValidationError
from core.models.chat import ConversationMessage, MessageRole

logger = logging.getLogger(__name__)


# Frontends sometimes label assistant turns "ai"
_ROLE_ALIASES = {
    "user": MessageRole.USER,
    "assistant": MessageRole.ASSISTANT,
    "ai": MessageRole.ASSISTANT,
}


def parse_role(value: Any) -> MessageRole:
    """
    Map an API role string to MessageRole.

    Raises:
        InputValidationError: For roles other than user/assistant
    """
    role = _ROLE_ALIASES.get(str(value).strip().lower())
    if role is None:
        raise InputValidationError(
            f"Unsupported message role: {value!r} (expected 'user' or 'assistant')",
            field="messages",
        )
    return role


def parse_api_messages(raw: Iterable[Mapping[str, Any]]) -> list[tuple[MessageRole, str]]:
    """
    Validate an API message list into (role, text) pairs, in order.

    Raises:
        InputValidationError: If an entry is not a role/content object
    """
    parsed = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise InputValidationError(
                f"Message {index} must be an object with role and content",
                field="messages",
            )
        content = item.get("content")
        if content is None:
            content = item.get("message", "")
        parsed.append((parse_role(item.get("role", item.get("type"))), str(content)))
    return parsed


def window_messages(
    messages: Sequence[ConversationMessage],
    max_messages: int | None = None,
) -> list[ConversationMessage]:
    """Keep the last `max_messages` messages; None keeps everything."""
    if max_messages is None or len(messages) <= max_messages:
        return list(messages)
    logger.debug(f"Truncating conversation from {len(messages)} to {max_messages} messages")
    return list(messages[-max_messages:])


def format_messages_for_openai(
    messages: Sequence[ConversationMessage],
    max_messages: int | None = None,
) -> list[dict[str, str]]:
    """
    Format conversation messages for OpenAI's messages array.

    Example:
        format_messages_for_openai([ConversationMessage(ordinal=1, role="user", text="Hello")])
        # [{"role": "user", "content": "Hello"}]
    """
    return [msg.to_openai() for msg in window_messages(messages, max_messages)]
