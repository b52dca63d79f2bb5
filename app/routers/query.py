# =============================================================================
# app/routers/query.py - SQL Execution Endpoint
# =============================================================================
# Runs arbitrary SQL from the editor (or an assistant code block) and returns
# a normalized result. Refreshes the shared schema after mutating statements
# so the assistant sees any structural change.
# =============================================================================

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies import DispatcherDep, SchemaCacheDep
from app.exceptions import InputValidationError
from core.models.execution import StatementKind

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class RunQueryRequest(BaseModel):
    """SQL to execute."""
    query: str | None = Field(
        default=None,
        description="Any SQL statement",
        examples=["SELECT * FROM dummytable;", "DELETE FROM dummytable WHERE id = 1;"],
    )


class RunQueryResponse(BaseModel):
    """Normalized execution result."""
    success: bool = True
    data: Any = None
    rowCount: int = 0
    query: str
    message: str
    statementKind: StatementKind
    executedAt: datetime


# =============================================================================
# Endpoint
# =============================================================================

@router.post("/run-query", response_model=RunQueryResponse)
async def run_query(
    request: RunQueryRequest,
    dispatcher: DispatcherDep,
    schema_cache: SchemaCacheDep,
):
    """
    Execute a SQL statement.

    - select: `data` is the row list, `rowCount` the number of rows
    - insert/update/delete/other: `data` is `{"rowsAffected": n}`

    Clients should re-fetch /get-table-data when `statementKind` is not
    `select`.
    """
    if request.query is None:
        raise InputValidationError("SQL query is required", field="query")

    report = await dispatcher.execute(request.query)

    if report.needs_refresh:
        await schema_cache.refresh()

    return RunQueryResponse(
        success=True,
        data=report.result_payload(),
        rowCount=report.affected_count,
        query=report.query,
        message=report.human_message,
        statementKind=report.statement_kind,
        executedAt=report.executed_at,
    )
