# =============================================================================
# core/models/execution.py - Query Execution Schemas
# =============================================================================
# These models define the result contract for running SQL:
# - StatementKind: coarse classification by leading keyword
# - ExecutionReport: normalized result for every statement kind
# - TableColumn / TableSnapshot: what the results view displays
#
# ExecutionReport is a tagged variant keyed by statement_kind:
#   select  -> rows is a list, affected_count == len(rows)
#   others  -> rows is None, affected_count is the engine's rowsAffected
# =============================================================================

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class StatementKind(str, Enum):
    """
    Classification of a SQL statement by its leading keyword.

    Only affects how the raw result is interpreted, never how it is run.
    """
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    OTHER = "other"

    @property
    def is_mutating(self) -> bool:
        return self is not StatementKind.SELECT


class ExecutionReport(BaseModel):
    """
    Uniform result of executing one SQL statement.

    Example (select):
        {
            "statement_kind": "select",
            "rows": [{"id": 1, "name": "John"}],
            "affected_count": 1,
            "human_message": "Query returned 1 row(s)"
        }

    Example (delete):
        {
            "statement_kind": "delete",
            "rows": null,
            "affected_count": 1,
            "human_message": "Deleted 1 row(s) successfully"
        }
    """

    statement_kind: StatementKind
    rows: list[dict[str, Any]] | None = None
    affected_count: int = Field(default=0, ge=0)
    human_message: str
    query: str = ""
    executed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @model_validator(mode="after")
    def _check_variant(self) -> "ExecutionReport":
        if self.statement_kind is StatementKind.SELECT:
            if self.rows is None:
                raise ValueError("select reports must carry rows")
            if self.affected_count != len(self.rows):
                raise ValueError("select affected_count must equal the row count")
        elif self.rows is not None:
            raise ValueError(f"{self.statement_kind.value} reports carry no rows")
        return self

    @property
    def needs_refresh(self) -> bool:
        """Mutating statements leave the displayed snapshot stale."""
        return self.statement_kind.is_mutating

    def result_payload(self) -> Any:
        """The `data` field of the run-query response."""
        if self.statement_kind is StatementKind.SELECT:
            return self.rows
        return {"rowsAffected": self.affected_count}


class TableColumn(BaseModel):
    """A column header in the results view."""
    name: str
    type: str = "unknown"
    nullable: bool = True


class TableSnapshot(BaseModel):
    """
    Rows and columns currently displayed in the results view.

    Not owned by the execution pipeline: callers build one from a full
    table read, or from a select report.
    """

    rows: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[TableColumn] = Field(default_factory=list)
    row_count: int = 0

    @classmethod
    def from_rows(
        cls,
        rows: list[dict[str, Any]],
        fallback_columns: list[TableColumn] | None = None,
    ) -> "TableSnapshot":
        """
        Build a snapshot, deriving columns from the first row's keys.

        Types can't be recovered from row objects, so derived columns are
        typed 'unknown' and nullable. Empty results use `fallback_columns`.
        """
        if rows:
            columns = [TableColumn(name=key) for key in rows[0].keys()]
        else:
            columns = list(fallback_columns or [])
        return cls(rows=rows, columns=columns, row_count=len(rows))

    @classmethod
    def from_report(cls, report: ExecutionReport) -> "TableSnapshot":
        if report.statement_kind is not StatementKind.SELECT:
            raise ValueError("Only select reports can populate a snapshot directly")
        return cls.from_rows(report.rows or [])

    def to_api(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "columns": [column.model_dump() for column in self.columns],
            "rowCount": self.row_count,
        }
