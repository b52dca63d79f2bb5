# =============================================================================
# core/services/query_service.py - Query Execution Dispatcher
# =============================================================================
# Sends SQL text to the database and normalizes whatever comes back.
#
# Every statement goes through the same execute_sql RPC call. The leading
# keyword only decides how the raw result is read:
#   select                  -> JSON array of row objects
#   insert/update/delete/.. -> {"rowsAffected": n}
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.config import settings
from app.exceptions import ConfigurationError, ExecutionError, InputValidationError
from core.models.execution import ExecutionReport, StatementKind

logger = logging.getLogger(__name__)


# SQL to create the RPC function the dispatcher relies on
EXECUTE_SQL_FUNCTION_DDL = """\
create or replace function {name}(query_text text)
returns json
language plpgsql
security definer
as $$
declare
  result json;
  affected integer;
begin
  if lower(ltrim(query_text)) like 'select%' then
    execute format('select coalesce(json_agg(t), ''[]''::json) from (%s) t', rtrim(query_text, '; '))
      into result;
    return result;
  end if;
  execute query_text;
  get diagnostics affected = row_count;
  return json_build_object('rowsAffected', affected);
end;
$$;"""

_MUTATION_MESSAGES = {
    StatementKind.INSERT: "Inserted {n} row(s) successfully",
    StatementKind.UPDATE: "Updated {n} row(s) successfully",
    StatementKind.DELETE: "Deleted {n} row(s) successfully",
}


def classify_statement(statement: str) -> StatementKind:
    """
    Classify by the trimmed, case-folded leading keyword.

    Example:
        classify_statement("  select * from t") -> StatementKind.SELECT
        classify_statement("WITH x AS (...)")   -> StatementKind.OTHER
    """
    text = statement.strip().casefold()
    for kind in (StatementKind.SELECT, StatementKind.INSERT, StatementKind.UPDATE, StatementKind.DELETE):
        if text.startswith(kind.value):
            return kind
    return StatementKind.OTHER


def _is_missing_function(message: str) -> bool:
    lowered = message.lower()
    if "could not find the function" in lowered:
        # PostgREST schema cache miss
        return True
    return "function" in lowered and "does not exist" in lowered


def _affected_count(raw: Any) -> int:
    if isinstance(raw, Mapping) and "rowsAffected" in raw:
        return int(raw["rowsAffected"] or 0)
    return 0


def build_report(statement: str, kind: StatementKind, raw: Any) -> ExecutionReport:
    """Normalize a raw execute_sql payload into an ExecutionReport."""
    if kind is StatementKind.SELECT:
        rows = list(raw) if isinstance(raw, list) else []
        return ExecutionReport(
            statement_kind=kind,
            rows=rows,
            affected_count=len(rows),
            human_message=f"Query returned {len(rows)} row(s)",
            query=statement,
        )

    count = _affected_count(raw)
    template = _MUTATION_MESSAGES.get(kind, "{n} row(s) affected")
    return ExecutionReport(
        statement_kind=kind,
        rows=None,
        affected_count=count,
        human_message=template.format(n=count),
        query=statement,
    )


class QueryDispatcher:
    """
    Executes SQL statements and returns ExecutionReports.

    Args:
        store: Object with `async execute_sql(query) -> Any`
    """

    def __init__(self, store: Any):
        self.store = store

    async def execute(self, statement: str | None) -> ExecutionReport:
        """
        Run one statement.

        Raises:
            InputValidationError: Blank statement (no database call is made)
            ConfigurationError: The execute_sql function is missing
            ExecutionError: Any other database error, message verbatim
        """
        if statement is None or not statement.strip():
            raise InputValidationError("Query cannot be empty", field="query")

        trimmed = statement.strip()
        kind = classify_statement(trimmed)
        logger.info(f"Executing {kind.value} statement: {trimmed[:80]}")

        try:
            raw = await self.store.execute_sql(trimmed)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            if _is_missing_function(message):
                function_name = settings.EXECUTE_SQL_FUNCTION
                logger.error(f"Execution facility missing: {message}")
                raise ConfigurationError(
                    message=(
                        f"Database function not found. Please create the {function_name} "
                        "function in your Supabase database."
                    ),
                    suggestion="Run this SQL in the Supabase SQL editor:\n"
                    + EXECUTE_SQL_FUNCTION_DDL.format(name=function_name),
                )
            logger.warning(f"Query execution failed: {message}")
            raise ExecutionError(message, query=trimmed)

        report = build_report(trimmed, kind, raw)
        logger.debug(f"Execution finished: {report.human_message}")
        return report
