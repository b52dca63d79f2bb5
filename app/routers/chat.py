# =============================================================================
# app/routers/chat.py - SQL Assistant Chat Endpoint
# =============================================================================
# Stateless chat: the client sends the whole conversation on every request.
# The server rebuilds the conversation (assigning ordinals in list order),
# grounds the system context in the schema and the editor contents, and
# returns the assistant reply with its fenced code blocks pre-extracted.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter
from openai import OpenAIError
from pydantic import BaseModel, ConfigDict, Field

from app.dependencies import LLMDep, SchemaCacheDep
from app.exceptions import InputValidationError, UpstreamServiceError
from agents.conversation import ConversationManager, extract_code_blocks

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ChatRequest(BaseModel):
    """Full conversation so far plus workspace context."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "messages": [{"role": "user", "content": "show me all rows"}],
                    "schema": "Table: dummytable\n  - id (integer, not null, auto-increment)",
                    "currentQuery": "SELECT * FROM dummytable;",
                }
            ]
        },
    )

    messages: list[dict[str, Any]] | None = Field(
        default=None,
        description="Ordered conversation: [{role, content}, ...]",
    )
    schema_text: str | None = Field(
        default=None,
        alias="schema",
        description="Rendered schema; the server's cached schema is used if omitted",
    )
    current_query: str | None = Field(
        default=None,
        alias="currentQuery",
        description="Current SQL editor contents",
    )


class ChatData(BaseModel):
    message: str
    usage: dict[str, Any] | None = None
    codeBlocks: list[dict[str, Any]] = Field(default_factory=list)


class ChatResponse(BaseModel):
    success: bool = True
    data: ChatData


# =============================================================================
# Endpoint
# =============================================================================

@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    llm: LLMDep,
    schema_cache: SchemaCacheDep,
):
    """
    Get the assistant's next reply.

    SQL in the reply is fenced as ```sql blocks; each one is returned in
    `codeBlocks` with `executable: true` so the client can offer "Run".
    """
    if request.messages is None:
        raise InputValidationError("Messages array is required", field="messages")

    schema_text = request.schema_text or schema_cache.text
    logger.debug(f"Schema being sent to AI: {schema_text[:200]}...")
    logger.debug(f"Current SQL query: {request.current_query or 'No current query'}")

    conversation = ConversationManager.from_api_messages(llm, request.messages)

    try:
        reply = await conversation.request_assistant_turn(schema_text, request.current_query)
    except OpenAIError as e:
        logger.error(f"Chat error: {e}")
        raise UpstreamServiceError("OpenAI", str(e) or "Failed to process chat")

    return ChatResponse(
        success=True,
        data=ChatData(
            message=reply.text,
            usage=conversation.last_usage,
            codeBlocks=[block.to_api() for block in extract_code_blocks(reply.text)],
        ),
    )
