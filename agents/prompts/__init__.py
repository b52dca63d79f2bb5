# =============================================================================
# agents/prompts/ - System Prompts
# =============================================================================
# This package contains the system prompts for both LLM call sites:
# - context_builder.py: inline completion and chat assistant contexts
#
# Prompts are rebuilt per request so schema and editor changes are always
# reflected. Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.context_builder import (
    ContextKind,
    build_completion_user_message,
    build_context,
)

__all__ = [
    "ContextKind",
    "build_completion_user_message",
    "build_context",
]
