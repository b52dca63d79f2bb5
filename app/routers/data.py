# =============================================================================
# app/routers/data.py - Table Data Endpoints
# =============================================================================
# Provides the results-view snapshot and simple record CRUD for the
# workspace table (settings.primary_table).
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from app.config import settings
from app.dependencies import DataStoreDep, SchemaCacheDep
from app.exceptions import InputValidationError, UpstreamServiceError
from core.models.execution import TableColumn, TableSnapshot
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class TableDataResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class RecordCreate(BaseModel):
    """New record for the workspace table."""
    name: str | None = Field(default=None, examples=["John Doe"])
    description: str | None = Field(default=None, examples=["Sample description"])


# =============================================================================
# Snapshot Endpoint
# =============================================================================

@router.get("/get-table-data", response_model=TableDataResponse)
async def get_table_data(store: DataStoreDep, schema_cache: SchemaCacheDep):
    """
    All rows of the workspace table, ordered by id.

    Columns come from the first row (types unknown). For an empty table the
    schema's descriptor (or the fallback columns) is used instead.
    """
    table = settings.primary_table

    try:
        rows = await store.fetch_table_rows(table)
    except SupabaseClientError as e:
        logger.error(f"Database error: {e}")
        raise UpstreamServiceError("database", e.message)

    descriptor = schema_cache.current.get_table(table) if schema_cache.current else None
    if descriptor is None:
        descriptor = schema_cache.introspector.fallback_for(table)

    fallback = [
        TableColumn(name=col.name, type=col.type, nullable=col.nullable)
        for col in descriptor.columns
    ]
    snapshot = TableSnapshot.from_rows(rows, fallback)
    return TableDataResponse(success=True, data=snapshot.to_api())


# =============================================================================
# Record Endpoints
# =============================================================================

@router.get("/records")
async def list_records(store: DataStoreDep):
    """List every record of the workspace table."""
    try:
        records = await store.fetch_table_rows(settings.primary_table)
    except SupabaseClientError as e:
        raise UpstreamServiceError("database", e.message)

    return {"success": True, "data": records, "count": len(records)}


@router.post("/records", status_code=201)
async def create_record(request: RecordCreate, store: DataStoreDep):
    """Create a record. `name` is required."""
    if not request.name:
        raise InputValidationError("Name is required", field="name")

    try:
        record = await store.insert_record(
            settings.primary_table,
            {"name": request.name, "description": request.description},
        )
    except SupabaseClientError as e:
        raise UpstreamServiceError("database", e.message)

    return {"success": True, "data": record}


@router.delete("/records")
async def delete_record(
    store: DataStoreDep,
    id: str | None = Query(default=None, description="Record id to delete"),
):
    """Delete a record by id."""
    if not id:
        raise InputValidationError("ID is required", field="id")

    try:
        await store.delete_record(settings.primary_table, id)
    except SupabaseClientError as e:
        raise UpstreamServiceError("database", e.message)

    return {"success": True, "message": "Record deleted successfully"}
