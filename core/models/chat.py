# =============================================================================
# core/models/chat.py - Conversation Schemas
# =============================================================================
# These models define the conversational side of the workspace:
# - MessageRole: who sent a message
# - ConversationMessage: one ordered turn in the conversation log
# - CodeBlock: a fenced block extracted from an assistant reply
# - MessageSegment: prose or code piece of a message, in display order
#
# Ordinals are assigned by the ConversationManager at append time, never by
# the caller, so the log has a total order even when replies arrive late.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """
    Who sent the message in a conversation.

    - user: The human user
    - assistant: The SQL assistant
    """
    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(BaseModel):
    """
    One turn in the append-only conversation log.

    Example:
        {"ordinal": 2, "role": "user", "text": "show me all rows"}
    """

    model_config = ConfigDict(frozen=True)

    ordinal: int = Field(..., ge=1, description="Position in the log, gap-free")
    role: MessageRole
    text: str

    def to_openai(self) -> dict[str, str]:
        """Format as an OpenAI chat message."""
        return {"role": self.role.value, "content": self.text}


class CodeBlock(BaseModel):
    """
    A fenced block from assistant text.

    The first line inside the fence is the language tag; the rest is code.
    Only SQL blocks can be sent to the execution dispatcher.
    """

    model_config = ConfigDict(frozen=True)

    language: str = "text"
    code: str

    @property
    def executable(self) -> bool:
        return self.language.lower() == "sql"

    def to_api(self) -> dict[str, object]:
        return {
            "language": self.language,
            "code": self.code,
            "executable": self.executable,
        }


class MessageSegment(BaseModel):
    """
    A renderable piece of a message: either prose or a code block.

    Exactly one of `text` and `block` is set.
    """

    text: str | None = None
    block: CodeBlock | None = None

    @property
    def is_code(self) -> bool:
        return self.block is not None
