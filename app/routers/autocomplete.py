# =============================================================================
# app/routers/autocomplete.py - Inline Completion Endpoint
# =============================================================================
# One-shot inline SQL completion for editors that manage their own debounce.
# Editors that want server-side debounce use the /ws/editor WebSocket.
# =============================================================================

import logging

from fastapi import APIRouter
from openai import OpenAIError
from pydantic import BaseModel, ConfigDict, Field

from app.dependencies import LLMDep, SchemaCacheDep
from app.exceptions import UpstreamServiceError
from agents.completion_engine import request_completion

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class AutocompleteRequest(BaseModel):
    """Request an inline completion for the current editor text."""

    model_config = ConfigDict(populate_by_name=True)

    partial_query: str | None = Field(
        default=None,
        alias="partialQuery",
        description="Editor text up to the cursor",
        examples=["SELECT"],
    )
    cursor_position: int | None = Field(
        default=None,
        ge=0,
        alias="cursorPosition",
        description="Cursor offset in the editor text",
    )
    schema_text: str | None = Field(
        default=None,
        alias="schema",
        description="Rendered schema; the server's cached schema is used if omitted",
    )


class AutocompleteResponse(BaseModel):
    success: bool = True
    suggestion: str = Field(default="", examples=[" * FROM dummytable;"])


# =============================================================================
# Endpoint
# =============================================================================

@router.post("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    request: AutocompleteRequest,
    llm: LLMDep,
    schema_cache: SchemaCacheDep,
):
    """
    Suggest the text that should follow the user's input.

    An empty suggestion means the model had nothing useful to add.
    """
    partial = request.partial_query
    logger.debug(
        f"Autocomplete request: cursor={request.cursor_position}, "
        f"has_schema={bool(request.schema_text)}"
    )

    schema_text = request.schema_text or schema_cache.text

    try:
        suggestion = await request_completion(
            llm,
            partial,
            request.cursor_position,
            schema_text,
        )
    except OpenAIError as e:
        logger.error(f"Autocomplete error: {e}")
        raise UpstreamServiceError("OpenAI", str(e) or "Failed to generate autocomplete")

    return AutocompleteResponse(success=True, suggestion=suggestion)
