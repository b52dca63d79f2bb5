# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Running raw SQL through the execute_sql RPC function
# - Probing a sample row for schema introspection
# - Reading the full table for the results view
# - Simple record create/delete on the workspace table
#
# SupabaseDataStore exposes the same operations as coroutines so the async
# services never block the event loop on the synchronous client.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   rows = SupabaseClient.fetch_sample_rows("dummytable", limit=1)
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    `message` carries the engine's own text so callers can inspect it
    (e.g. to recognise a missing RPC function).
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _engine_message(error: Exception) -> str:
    """Extract the PostgREST message from an APIError, or fall back to str()."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        result = SupabaseClient.execute_sql("SELECT * FROM dummytable")
        rows = SupabaseClient.fetch_table_rows("dummytable")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Raw SQL
    # -------------------------------------------------------------------------

    @classmethod
    def execute_sql(cls, query: str) -> Any:
        """
        Run arbitrary SQL through the execute_sql RPC function.

        The function returns a JSON array of row objects for reads and an
        object like {"rowsAffected": n} for writes. The raw payload is
        returned untouched; interpretation belongs to the dispatcher.

        Raises:
            SupabaseClientError: With the engine's message if the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(
                settings.EXECUTE_SQL_FUNCTION,
                {"query_text": query},
            ).execute()
            return response.data

        except Exception as e:
            raise SupabaseClientError(
                message=_engine_message(e),
                code="EXECUTE_SQL_FAILED",
                details={"function": settings.EXECUTE_SQL_FUNCTION},
            )

    # -------------------------------------------------------------------------
    # Table Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_sample_rows(cls, table: str, limit: int = 1) -> list[dict[str, Any]]:
        """
        Fetch up to `limit` rows from a table, in storage order.

        Used by schema introspection to infer column names.

        Raises:
            SupabaseClientError: If the table can't be read
        """
        client = cls.get_client()

        try:
            response = client.table(table).select("*").limit(limit).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to read sample rows: {_engine_message(e)}",
                code="FETCH_SAMPLE_FAILED",
                suggestion=f"Check that table '{table}' exists and is exposed to the API",
                details={"table": table, "limit": limit}
            )

    @classmethod
    def fetch_table_rows(cls, table: str, order_by: str = "id") -> list[dict[str, Any]]:
        """
        Fetch all rows of a table ordered ascending by `order_by`.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select("*")
                .order(order_by, desc=False)
                .execute()
            )
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} rows from {table}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch table data: {_engine_message(e)}",
                code="FETCH_TABLE_FAILED",
                details={"table": table}
            )

    # -------------------------------------------------------------------------
    # Record Writes
    # -------------------------------------------------------------------------

    @classmethod
    def insert_record(cls, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one record and return it as stored (with generated id).

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert([record]).execute()

            if not response.data:
                raise SupabaseClientError(
                    message="Insert returned no data",
                    code="INSERT_RECORD_FAILED",
                    details={"table": table}
                )

            logger.info(f"Inserted record into {table}: id={response.data[0].get('id')}")
            return response.data[0]

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert record: {_engine_message(e)}",
                code="INSERT_RECORD_FAILED",
                details={"table": table}
            )

    @classmethod
    def delete_record(cls, table: str, record_id: str | int) -> None:
        """
        Delete a record by id.

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()

        try:
            client.table(table).delete().eq("id", record_id).execute()
            logger.info(f"Deleted record {record_id} from {table}")

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete record: {_engine_message(e)}",
                code="DELETE_RECORD_FAILED",
                details={"table": table, "id": str(record_id)}
            )


class SupabaseDataStore:
    """
    Async facade over SupabaseClient.

    Each call runs the synchronous client in a worker thread, so awaiting a
    data store round trip is a suspension point on the event loop.
    """

    def __init__(self, client: type[SupabaseClient] = SupabaseClient):
        self.client = client

    async def execute_sql(self, query: str) -> Any:
        return await asyncio.to_thread(self.client.execute_sql, query)

    async def fetch_sample_rows(self, table: str, limit: int = 1) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self.client.fetch_sample_rows, table, limit)

    async def fetch_table_rows(self, table: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self.client.fetch_table_rows, table)

    async def insert_record(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.insert_record, table, record)

    async def delete_record(self, table: str, record_id: str | int) -> None:
        await asyncio.to_thread(self.client.delete_record, table, record_id)
