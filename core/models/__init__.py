# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - schema.py: Schema description (tables/columns) for AI context
# - execution.py: Statement kinds, execution reports, table snapshots
# - completion.py: Inline completion requests and suggestions
# - chat.py: Conversation messages and fenced code blocks
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Schema Models - What the AI knows about the database
# -----------------------------------------------------------------------------
from .schema import (
    NO_SCHEMA_MARKER,
    ColumnDescriptor,
    SchemaDescription,
    TableDescriptor,
)

# -----------------------------------------------------------------------------
# Execution Models - Running SQL
# -----------------------------------------------------------------------------
from .execution import (
    ExecutionReport,
    StatementKind,
    TableColumn,
    TableSnapshot,
)

# -----------------------------------------------------------------------------
# Completion Models - Inline suggestions
# -----------------------------------------------------------------------------
from .completion import (
    CompletionRequest,
    CompletionState,
    CompletionSuggestion,
)

# -----------------------------------------------------------------------------
# Chat Models - Conversational interface
# -----------------------------------------------------------------------------
from .chat import (
    CodeBlock,
    ConversationMessage,
    MessageRole,
    MessageSegment,
)

__all__ = [
    # Schema
    "NO_SCHEMA_MARKER",
    "ColumnDescriptor",
    "SchemaDescription",
    "TableDescriptor",
    # Execution
    "ExecutionReport",
    "StatementKind",
    "TableColumn",
    "TableSnapshot",
    # Completion
    "CompletionRequest",
    "CompletionState",
    "CompletionSuggestion",
    # Chat
    "CodeBlock",
    "ConversationMessage",
    "MessageRole",
    "MessageSegment",
]
