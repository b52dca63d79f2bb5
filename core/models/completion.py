# =============================================================================
# core/models/completion.py - Inline Completion Schemas
# =============================================================================
# - CompletionRequest: snapshot of the editor when a completion is issued
# - CompletionSuggestion: the single continuation shown as ghost text
# - CompletionState: where a per-editor completion engine currently is
#
# Only one CompletionRequest is live per editor session; a newer request
# supersedes every older one.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CompletionState(str, Enum):
    """
    Completion engine state machine.

        idle -> debouncing -> requesting -> idle
                    ^  |
                    +--+  (keystroke restarts the timer)
    """
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    REQUESTING = "requesting"


class CompletionRequest(BaseModel):
    """Editor state captured at the moment a completion call is issued."""

    model_config = ConfigDict(frozen=True)

    request_id: int = Field(..., ge=1)
    buffer_text: str
    cursor_offset: int = Field(..., ge=0)
    schema_snapshot: str = ""


class CompletionSuggestion(BaseModel):
    """
    Text to insert at the cursor.

    An empty `text` means "no suggestion" and is not an error.
    """

    model_config = ConfigDict(frozen=True)

    request_id: int
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text
