# =============================================================================
# core/workspace.py - Workspace Session
# =============================================================================
# One user's SQL workspace: an editor buffer, the schema the assistant sees,
# a completion engine, a conversation, and the results view.
#
# Feedback paths wired here:
# - run_buffer(): editor "Run" -> dispatcher -> results view
# - run_code_block(): assistant SQL fence -> editor buffer -> dispatcher
# - after a mutating statement the snapshot is re-fetched and the schema is
#   re-introspected
#
# The buffer has a single writer: the user (set_buffer) or run_code_block.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.config import settings
from app.exceptions import InputValidationError, SQLPilotException
from agents.completion_engine import InlineCompletionEngine, make_llm_fetcher
from agents.conversation import ConversationManager
from core.models.chat import CodeBlock, ConversationMessage
from core.models.execution import ExecutionReport, TableColumn, TableSnapshot
from core.services.query_service import QueryDispatcher
from core.services.schema_service import SchemaCache

logger = logging.getLogger(__name__)


DEFAULT_QUERY = """SELECT
  id,
  name,
  description
FROM public.{table}
ORDER BY id ASC;"""


@dataclass
class EditorBuffer:
    """Editor text and cursor offset."""
    text: str = ""
    cursor: int = 0

    def replace(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)


class WorkspaceSession:
    """
    Ties editor, schema, completion, conversation and execution together.

    Args:
        store: Async data store (execute_sql, fetch_table_rows, ...)
        llm: LLM client shared by completion and chat
        schema_cache: Shared SchemaCache
        table: Table shown in the results view
        on_suggestion: Optional callback for inline suggestions
        completion_delay: Debounce delay override (seconds)

    Example:
        session = WorkspaceSession(store, llm, cache)
        await session.start()
        report = await session.run_buffer()
    """

    def __init__(
        self,
        store: Any,
        llm: Any,
        schema_cache: SchemaCache,
        table: str | None = None,
        on_suggestion: Any = None,
        completion_delay: float | None = None,
    ):
        self.store = store
        self.schema_cache = schema_cache
        self.table = table or settings.primary_table
        self.dispatcher = QueryDispatcher(store)
        self.conversation = ConversationManager(llm)
        self.completion = InlineCompletionEngine(
            fetch=make_llm_fetcher(llm),
            delay=completion_delay,
            on_suggestion=on_suggestion,
            schema_provider=lambda: self.schema_cache.text,
        )
        self.buffer = EditorBuffer()
        self.buffer.replace(DEFAULT_QUERY.format(table=self.table))

        self.snapshot = TableSnapshot()
        self.last_report: ExecutionReport | None = None
        self.last_error: str | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Load the schema and the initial results view."""
        await self.schema_cache.refresh()
        await self.refresh_snapshot()

    def close(self) -> None:
        self.completion.close()

    # -------------------------------------------------------------------------
    # Editor
    # -------------------------------------------------------------------------

    def set_buffer(self, text: str, cursor: int | None = None) -> None:
        """User edit: update the buffer and restart the completion debounce."""
        self.buffer.text = text
        self.buffer.cursor = len(text) if cursor is None else cursor
        self.completion.buffer_changed(self.buffer.text, self.buffer.cursor)

    def accept_suggestion(self, suggestion: str) -> None:
        """Insert an accepted inline suggestion at the cursor."""
        text, cursor = self.buffer.text, self.buffer.cursor
        self.buffer.text = text[:cursor] + suggestion + text[cursor:]
        self.buffer.cursor = cursor + len(suggestion)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _fallback_columns(self) -> list[TableColumn]:
        description = self.schema_cache.current
        table = description.get_table(self.table) if description else None
        if table is None:
            return []
        return [
            TableColumn(name=col.name, type=col.type, nullable=col.nullable)
            for col in table.columns
        ]

    async def refresh_snapshot(self) -> TableSnapshot:
        """
        Re-read the results table.

        On failure the previous snapshot stays on screen and the error is
        recorded in last_error.
        """
        try:
            rows = await self.store.fetch_table_rows(self.table)
        except Exception as e:
            self.last_error = getattr(e, "message", None) or str(e)
            logger.warning(f"Failed to refresh table snapshot: {self.last_error}")
            return self.snapshot

        self.snapshot = TableSnapshot.from_rows(rows, self._fallback_columns())
        return self.snapshot

    async def execute(self, statement: str) -> ExecutionReport:
        """
        Run a statement and update the results view.

        select results repopulate the view directly; anything else triggers
        a snapshot re-fetch and a schema refresh. Errors are recorded in
        last_error and re-raised; the displayed data is left untouched.
        """
        self.last_error = None
        try:
            report = await self.dispatcher.execute(statement)
        except SQLPilotException as e:
            self.last_error = e.message
            raise

        self.last_report = report
        if report.needs_refresh:
            await self.refresh_snapshot()
            await self.schema_cache.refresh()
        else:
            self.snapshot = TableSnapshot.from_report(report)

        return report

    async def run_buffer(self) -> ExecutionReport:
        """The editor's Run action."""
        return await self.execute(self.buffer.text)

    async def run_code_block(self, block: CodeBlock) -> ExecutionReport:
        """
        Run an assistant SQL fence: put it in the editor, then execute.

        Raises:
            InputValidationError: If the block is not SQL
        """
        if not block.executable:
            raise InputValidationError(
                f"Only sql blocks can be run (got '{block.language}')",
                field="language",
            )
        self.buffer.replace(block.code)
        return await self.run_buffer()

    # -------------------------------------------------------------------------
    # Conversation
    # -------------------------------------------------------------------------

    async def ask(self, text: str) -> ConversationMessage:
        """Send a chat message grounded in the current schema and buffer."""
        return await self.conversation.send(
            text,
            self.schema_cache.text,
            self.buffer.text,
        )
