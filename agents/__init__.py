# =============================================================================
# agents/ - LLM-Facing Components
# =============================================================================
# This package contains everything that talks to the language model:
# - completion_engine.py: Debounced, supersession-safe inline completion
# - conversation.py: Chat history, assistant turns, code fence extraction
#
# Prompts:
# - prompts/context_builder.py: System contexts for completion and chat
# =============================================================================

from agents.completion_engine import (
    InlineCompletionEngine,
    make_llm_fetcher,
    normalize_suggestion,
    request_completion,
)
from agents.conversation import (
    ConversationManager,
    extract_code_blocks,
    split_message,
)

__all__ = [
    # Completion
    "InlineCompletionEngine",
    "make_llm_fetcher",
    "normalize_suggestion",
    "request_completion",
    # Conversation
    "ConversationManager",
    "extract_code_blocks",
    "split_message",
]
