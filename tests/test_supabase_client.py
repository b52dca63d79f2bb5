# =============================================================================
# tests/test_supabase_client.py - Supabase Wrapper Tests
# =============================================================================
# Tests use a mocked Supabase client to avoid database calls.
# =============================================================================

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from lib.supabase_client import SupabaseClient, SupabaseClientError, SupabaseDataStore


class PostgrestError(Exception):
    """Stand-in for postgrest's APIError, which exposes `.message`."""

    def __init__(self, message: str):
        super().__init__({"message": message})
        self.message = message


@pytest.fixture
def mock_client():
    client = MagicMock()
    with patch.object(SupabaseClient, "get_client", return_value=client):
        yield client


class TestExecuteSql:
    """Test the RPC call."""

    def test_calls_rpc_with_query_text(self, mock_client):
        mock_client.rpc.return_value.execute.return_value = MagicMock(data=[{"id": 1}])

        result = SupabaseClient.execute_sql("SELECT * FROM dummytable")

        mock_client.rpc.assert_called_once_with(
            "execute_sql", {"query_text": "SELECT * FROM dummytable"}
        )
        assert result == [{"id": 1}]

    def test_returns_raw_payload(self, mock_client):
        mock_client.rpc.return_value.execute.return_value = MagicMock(data={"rowsAffected": 2})

        assert SupabaseClient.execute_sql("DELETE FROM dummytable") == {"rowsAffected": 2}

    def test_error_keeps_engine_message(self, mock_client):
        mock_client.rpc.return_value.execute.side_effect = PostgrestError(
            'column "nope" does not exist'
        )

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.execute_sql("SELECT nope FROM dummytable")

        assert exc_info.value.message == 'column "nope" does not exist'
        assert exc_info.value.code == "EXECUTE_SQL_FAILED"


class TestTableOperations:
    """Test table reads and writes."""

    def test_fetch_table_rows_ordered_by_id(self, mock_client):
        query = mock_client.table.return_value.select.return_value.order.return_value
        query.execute.return_value = MagicMock(data=[{"id": 1}, {"id": 2}])

        rows = SupabaseClient.fetch_table_rows("dummytable")

        mock_client.table.assert_called_once_with("dummytable")
        mock_client.table.return_value.select.return_value.order.assert_called_once_with("id", desc=False)
        assert rows == [{"id": 1}, {"id": 2}]

    def test_fetch_sample_rows_empty(self, mock_client):
        query = mock_client.table.return_value.select.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=None)

        assert SupabaseClient.fetch_sample_rows("dummytable") == []

    def test_insert_without_data_fails(self, mock_client):
        mock_client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.insert_record("dummytable", {"name": "x"})

        assert exc_info.value.code == "INSERT_RECORD_FAILED"

    def test_delete_filters_by_id(self, mock_client):
        SupabaseClient.delete_record("dummytable", "3")

        mock_client.table.return_value.delete.return_value.eq.assert_called_once_with("id", "3")


class TestSupabaseDataStore:
    """Test the async facade."""

    @pytest.mark.asyncio
    async def test_delegates_to_client(self):
        client = MagicMock()
        client.execute_sql.return_value = [{"id": 1}]
        store = SupabaseDataStore(client)

        assert await store.execute_sql("SELECT 1") == [{"id": 1}]
        client.execute_sql.assert_called_once_with("SELECT 1")

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        client = MagicMock()
        client.fetch_table_rows.side_effect = SupabaseClientError("timeout")

        with pytest.raises(SupabaseClientError):
            await SupabaseDataStore(client).fetch_table_rows("dummytable")
