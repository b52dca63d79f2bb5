# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients and helpers:
# - supabase_client.py: Typed Supabase wrapper (raw SQL RPC, table reads)
# - llm_client.py: Async OpenAI chat client
# - memory.py: Conversation history formatting for the LLM
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError, SupabaseDataStore
from lib.llm_client import LLMClient, LLMReply
from lib.memory import (
    format_messages_for_openai,
    parse_api_messages,
    window_messages,
)

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    "SupabaseDataStore",
    # OpenAI
    "LLMClient",
    "LLMReply",
    # Memory/Context
    "format_messages_for_openai",
    "parse_api_messages",
    "window_messages",
]
