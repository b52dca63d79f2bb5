# =============================================================================
# tests/test_context_builder.py - Prompt Context Tests
# =============================================================================
# Tests for the system prompts sent with completion and chat requests.
# =============================================================================

from __future__ import annotations

import pytest

from agents.prompts import ContextKind, build_completion_user_message, build_context
from agents.prompts.context_builder import NO_CONVERSATION_SCHEMA, NO_EDITOR_QUERY
from core.models.schema import NO_SCHEMA_MARKER

SCHEMA = "Table: dummytable\n  - id (integer, not null, auto-increment)"


class TestCompletionContext:
    """Test the completion system prompt."""

    def test_embeds_schema(self):
        system = build_context(ContextKind.COMPLETION, SCHEMA)

        assert "<database_schema>\n" + SCHEMA + "\n</database_schema>" in system

    def test_examples_use_first_table(self):
        system = build_context("completion", SCHEMA)

        assert 'suggest " * FROM dummytable;"' in system
        assert "{table}" not in system

    def test_missing_schema(self):
        system = build_context(ContextKind.COMPLETION, None)

        assert NO_SCHEMA_MARKER in system
        assert "your_table" in system

    def test_ignores_editor_buffer(self):
        system = build_context(ContextKind.COMPLETION, SCHEMA, "DELETE FROM secret;")

        assert "DELETE FROM secret;" not in system


class TestConversationContext:
    """Test the chat system prompt."""

    def test_embeds_schema_and_buffer(self):
        system = build_context(ContextKind.CONVERSATION, SCHEMA, "SELECT * FROM dummytable;")

        assert SCHEMA in system
        assert "<current_editor_query>\n```sql\nSELECT * FROM dummytable;\n```" in system
        assert "UPDATE dummytable SET name = 'John' WHERE id = 1;" in system

    @pytest.mark.parametrize("buffer", [None, "", "   "])
    def test_empty_buffer(self, buffer):
        system = build_context(ContextKind.CONVERSATION, SCHEMA, buffer)

        assert NO_EDITOR_QUERY in system

    def test_missing_schema(self):
        system = build_context(ContextKind.CONVERSATION, "", "SELECT 1;")

        assert NO_CONVERSATION_SCHEMA in system

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            build_context("summarize", SCHEMA)


def test_completion_user_message():
    message = build_completion_user_message("SELECT * FR", 11)

    assert message == (
        'Partial query: "SELECT * FR"\n'
        "Cursor position: 11\n"
        "\n"
        "What should I suggest for completion?"
    )
