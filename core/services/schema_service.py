# =============================================================================
# core/services/schema_service.py - Schema Introspection
# =============================================================================
# Builds the textual schema the AI is grounded in.
#
# Introspection is a heuristic, not a catalog read: we fetch one sample row
# per table and infer columns from its keys. When a table is empty or can't
# be read, a known fallback descriptor set is substituted instead, so
# describing the schema never fails the caller. It degrades.
#
# SchemaCache holds the latest description. Readers always see a complete
# description because refresh() swaps the reference in one assignment.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from core.models.schema import (
    NO_SCHEMA_MARKER,
    ColumnDescriptor,
    SchemaDescription,
    TableDescriptor,
)

logger = logging.getLogger(__name__)


# Columns that are never nullable when inferred from a sample row
NOT_NULL_COLUMNS = frozenset({"id", "name"})

# Substituted for a table that is empty or unreachable
DEFAULT_FALLBACK_COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor(name="id", type="integer", nullable=False, default="auto-increment", position=1),
    ColumnDescriptor(name="name", type="text", nullable=False, position=2),
    ColumnDescriptor(name="description", type="text", nullable=True, position=3),
)


def infer_columns(sample_row: Mapping[str, Any]) -> tuple[ColumnDescriptor, ...]:
    """
    Infer column descriptors from one row object, keeping key order.

    Only a column literally named `id` is typed integer; everything else is
    text. `id` and `name` are not null.
    """
    return tuple(
        ColumnDescriptor(
            name=key,
            type="integer" if key == "id" else "text",
            nullable=key not in NOT_NULL_COLUMNS,
            default="auto-increment" if key == "id" else None,
            position=index,
        )
        for index, key in enumerate(sample_row.keys(), start=1)
    )


class SchemaIntrospector:
    """
    Produces a SchemaDescription from the data store.

    Args:
        store: Object with `async fetch_sample_rows(table, limit)`
        fallbacks: Optional per-table fallback columns. Tables without an
            entry use DEFAULT_FALLBACK_COLUMNS.
    """

    def __init__(
        self,
        store: Any,
        fallbacks: Mapping[str, Sequence[ColumnDescriptor]] | None = None,
    ):
        self.store = store
        self.fallbacks = {name: tuple(cols) for name, cols in (fallbacks or {}).items()}

    def fallback_for(self, table: str) -> TableDescriptor:
        columns = self.fallbacks.get(table, DEFAULT_FALLBACK_COLUMNS)
        return TableDescriptor(name=table, columns=columns, degraded=True)

    async def describe_table(self, table: str) -> TableDescriptor:
        """Describe one table, degrading to its fallback on any problem."""
        try:
            rows = await self.store.fetch_sample_rows(table, 1)
        except Exception as e:
            logger.warning(f"Schema probe failed for {table}, using fallback: {e}")
            return self.fallback_for(table)

        if not rows:
            logger.debug(f"Table {table} is empty, using fallback columns")
            return self.fallback_for(table)

        return TableDescriptor(name=table, columns=infer_columns(rows[0]))

    async def describe_schema(self, table_names: Iterable[str]) -> SchemaDescription:
        """
        Describe every named table in order.

        Never raises for introspection problems; see describe_table().
        """
        tables = [await self.describe_table(name) for name in table_names]
        description = SchemaDescription(tables=tuple(tables))

        degraded = [t.name for t in tables if t.degraded]
        logger.info(
            f"Schema introspected: {len(tables)} table(s)"
            + (f", fallback used for {degraded}" if degraded else "")
        )
        return description


class SchemaCache:
    """
    Shared, read-mostly holder for the current SchemaDescription.

    Example:
        cache = SchemaCache(SchemaIntrospector(store), ["dummytable"])
        await cache.refresh()
        prompt_schema = cache.text
    """

    def __init__(self, introspector: SchemaIntrospector, table_names: Sequence[str]):
        self.introspector = introspector
        self.table_names = list(table_names)
        self._current: SchemaDescription | None = None

    @property
    def current(self) -> SchemaDescription | None:
        return self._current

    @property
    def text(self) -> str:
        if self._current is None:
            return NO_SCHEMA_MARKER
        return self._current.render()

    async def refresh(self) -> SchemaDescription:
        """Re-introspect and replace the cached description wholesale."""
        description = await self.introspector.describe_schema(self.table_names)
        self._current = description
        return description
