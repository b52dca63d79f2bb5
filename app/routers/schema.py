# =============================================================================
# app/routers/schema.py - Schema Description Endpoint
# =============================================================================
# Re-introspects the configured tables and returns the prompt-ready text.
# Introspection degrades to fallback columns instead of failing.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import SchemaCacheDep

logger = logging.getLogger(__name__)

router = APIRouter()


class SchemaData(BaseModel):
    tables: dict[str, list[dict[str, Any]]]
    schemaDescription: str


class SchemaResponse(BaseModel):
    success: bool = True
    data: SchemaData


@router.get("/get-schema", response_model=SchemaResponse)
async def get_schema(schema_cache: SchemaCacheDep):
    """
    Describe the database schema for the assistant.

    Also replaces the server's cached schema, so later completion and chat
    requests that omit `schema` use this description.
    """
    description = await schema_cache.refresh()

    return SchemaResponse(
        success=True,
        data=SchemaData(
            tables=description.to_api(),
            schemaDescription=description.render(),
        ),
    )
