# =============================================================================
# tests/test_memory.py - Memory Module Tests
# =============================================================================
# This module contains tests for:
# - Role parsing from API payloads
# - API message validation
# - History windowing and OpenAI message formatting
# =============================================================================

from __future__ import annotations

import pytest

from app.exceptions import InputValidationError
from core.models.chat import ConversationMessage, MessageRole
from lib.memory import (
    format_messages_for_openai,
    parse_api_messages,
    parse_role,
    window_messages,
)


def make_history(count: int) -> list[ConversationMessage]:
    roles = [MessageRole.USER, MessageRole.ASSISTANT]
    return [
        ConversationMessage(ordinal=i, role=roles[(i - 1) % 2], text=f"message {i}")
        for i in range(1, count + 1)
    ]


# =============================================================================
# parse_role Tests
# =============================================================================

class TestParseRole:
    """Test role mapping."""

    @pytest.mark.parametrize("value,expected", [
        ("user", MessageRole.USER),
        ("assistant", MessageRole.ASSISTANT),
        ("ai", MessageRole.ASSISTANT),
        (" User ", MessageRole.USER),
    ])
    def test_known_roles(self, value, expected):
        assert parse_role(value) is expected

    @pytest.mark.parametrize("value", ["system", "tool", None, ""])
    def test_unknown_roles(self, value):
        with pytest.raises(InputValidationError) as exc_info:
            parse_role(value)

        assert exc_info.value.details == {"field": "messages"}


# =============================================================================
# parse_api_messages Tests
# =============================================================================

class TestParseApiMessages:
    """Test API payload validation."""

    def test_role_content_pairs(self, sample_chat_messages):
        parsed = parse_api_messages(sample_chat_messages)

        assert parsed == [
            (MessageRole.ASSISTANT, "Hello! I'm your SQL assistant."),
            (MessageRole.USER, "show me all rows"),
        ]

    def test_frontend_shape(self):
        parsed = parse_api_messages([{"type": "ai", "message": "Hi"}])

        assert parsed == [(MessageRole.ASSISTANT, "Hi")]

    def test_non_object_entry(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_api_messages([{"role": "user", "content": "ok"}, "oops"])

        assert "Message 1" in exc_info.value.message

    def test_empty_list(self):
        assert parse_api_messages([]) == []


# =============================================================================
# Formatting Tests
# =============================================================================

class TestFormatMessages:
    """Test windowing and OpenAI formatting."""

    def test_format_messages_for_openai(self):
        formatted = format_messages_for_openai(make_history(2))

        assert formatted == [
            {"role": "user", "content": "message 1"},
            {"role": "assistant", "content": "message 2"},
        ]

    def test_format_messages_empty(self):
        assert format_messages_for_openai([]) == []

    def test_unbounded_by_default(self):
        assert len(window_messages(make_history(50))) == 50

    def test_window_keeps_most_recent(self):
        windowed = window_messages(make_history(10), max_messages=3)

        assert [m.ordinal for m in windowed] == [8, 9, 10]

    def test_window_larger_than_history(self):
        assert len(window_messages(make_history(2), max_messages=20)) == 2
