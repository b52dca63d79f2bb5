# =============================================================================
# agents/prompts/context_builder.py - System Context for Completion and Chat
# =============================================================================
# Builds the system prompt for both LLM call sites:
# - completion: inline SQL autocomplete (ghost text in the editor)
# - conversation: the chat assistant
#
# The context is rebuilt on every request from the current schema text and,
# for conversation, the current editor buffer. Nothing here does I/O.
#
# Usage:
#   system = build_context(ContextKind.CONVERSATION, schema_text, editor_text)
# =============================================================================

from __future__ import annotations

from enum import Enum

from core.models.schema import NO_SCHEMA_MARKER


class ContextKind(str, Enum):
    COMPLETION = "completion"
    CONVERSATION = "conversation"


NO_CONVERSATION_SCHEMA = "No schema information available"
NO_EDITOR_QUERY = "No query currently in the editor"


# =============================================================================
# Base Prompts
# =============================================================================

COMPLETION_SYSTEM_PROMPT = """
<role>
You are an AI-powered SQL autocomplete engine that provides intelligent inline suggestions like GitHub Copilot.
Your job is to predict what the user wants to type next and provide a SINGLE inline completion.
</role>

<rules>
1. Return ONLY the completion text that should appear after the user's current input
2. Don't include the user's existing text, only what comes next
3. No explanations, no markdown, no quotes - SQL only
4. For incomplete queries, suggest the most likely complete SQL statement
5. Keep suggestions practical and executable against the schema
6. Use proper SQL syntax and formatting
7. Focus on common SQL patterns (SELECT, INSERT, UPDATE, DELETE)
</rules>

<examples>
- User types "SELECT" -> suggest " * FROM {table};"
- User types "SELECT * FROM" -> suggest " {table};"
- User types "INSERT" -> suggest " INTO {table} (name, description) VALUES ('', '');"
- User types "UPDATE {table} SET" -> suggest " name = '' WHERE id = ;"
- User types "DELETE" -> suggest " FROM {table} WHERE id = ;"
</examples>
"""

CONVERSATION_SYSTEM_PROMPT = """
<role>
You are a helpful SQL database assistant. You help users write SQL queries and understand their database.
You can see what the user is currently working on in their SQL editor.
</role>

<guidelines>
1. When writing SQL queries, always wrap them in markdown code blocks with the sql language tag (```sql)
2. Be helpful and explain your reasoning; break complex queries down step by step
3. Always use the actual table and column names from the schema
4. If the user asks for "all rows" or "all data", use the specific table names from the schema
5. CRITICAL: Use REAL values, not placeholders, so queries run without editing
   - Good: UPDATE {table} SET name = 'John' WHERE id = 1;
   - Bad: UPDATE {table} SET column_name = 'value' WHERE condition;
6. Use the editor contents when relevant:
   - Offer improvements to the current query
   - Help debug issues with the current SQL
   - Suggest next steps or variations
   - Explain what the current query does
7. Be conversational and friendly
</guidelines>
"""


def _primary_table(schema_text: str | None) -> str:
    """First table named in the rendered schema, used in examples."""
    if schema_text:
        for line in schema_text.splitlines():
            if line.startswith("Table: "):
                return line[len("Table: "):].strip()
    return "your_table"


# =============================================================================
# Dynamic Prompt Builders
# =============================================================================

def build_completion_context(schema_text: str | None) -> str:
    """System prompt for inline completion, grounded in the schema."""
    table = _primary_table(schema_text)
    return f"""{COMPLETION_SYSTEM_PROMPT.replace("{table}", table)}
<database_schema>
{schema_text or NO_SCHEMA_MARKER}
</database_schema>

Be intelligent and context-aware. Predict the most useful completion.
"""


def build_conversation_context(schema_text: str | None, current_buffer: str | None) -> str:
    """System prompt for the assistant: schema plus the editor contents."""
    table = _primary_table(schema_text)

    if current_buffer and current_buffer.strip():
        editor_section = f"```sql\n{current_buffer}\n```"
    else:
        editor_section = NO_EDITOR_QUERY

    return f"""{CONVERSATION_SYSTEM_PROMPT.replace("{table}", table)}
<database_schema>
{schema_text or NO_CONVERSATION_SCHEMA}
</database_schema>

<current_editor_query>
{editor_section}
</current_editor_query>

The user is working with a PostgreSQL database through Supabase.
"""


def build_context(
    kind: ContextKind | str,
    schema_text: str | None,
    current_buffer: str | None = None,
) -> str:
    """
    Build the system context for a completion or conversation request.

    Args:
        kind: "completion" or "conversation"
        schema_text: Rendered SchemaDescription (may be empty)
        current_buffer: Editor text; only used for conversation

    Example:
        system = build_context("completion", cache.text)
    """
    kind = ContextKind(kind)
    if kind is ContextKind.COMPLETION:
        return build_completion_context(schema_text)
    return build_conversation_context(schema_text, current_buffer)


def build_completion_user_message(partial_query: str, cursor_position: int) -> str:
    """User turn for a completion call."""
    return (
        f'Partial query: "{partial_query}"\n'
        f"Cursor position: {cursor_position}\n"
        "\n"
        "What should I suggest for completion?"
    )
