# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides an in-memory data store and a scripted LLM
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("SCHEMA_TABLES", "dummytable")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import AsyncMock, MagicMock

import pytest

from lib.llm_client import LLMReply


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sample_rows():
    """Rows of the workspace table."""
    return [
        {"id": 1, "name": "John Doe", "description": "First record"},
        {"id": 2, "name": "Jane Smith", "description": None},
    ]


@pytest.fixture
def fake_store(sample_rows):
    """
    Data store double with the SupabaseDataStore interface.

    execute_sql returns the sample rows for a select by default; tests set
    return_value / side_effect for other statements.
    """
    store = MagicMock()
    store.execute_sql = AsyncMock(return_value=sample_rows)
    store.fetch_sample_rows = AsyncMock(return_value=sample_rows[:1])
    store.fetch_table_rows = AsyncMock(return_value=sample_rows)
    store.insert_record = AsyncMock(
        return_value={"id": 3, "name": "New", "description": None}
    )
    store.delete_record = AsyncMock(return_value=None)
    return store


@pytest.fixture
def fake_llm():
    """LLM double whose complete() returns a fixed reply."""
    llm = MagicMock()
    llm.complete = AsyncMock(
        return_value=LLMReply(
            content="Here you go:\n```sql\nSELECT * FROM dummytable;\n```",
            usage={"prompt_tokens": 120, "completion_tokens": 15, "total_tokens": 135},
        )
    )
    return llm


@pytest.fixture
def sample_chat_messages():
    """Sample API chat payload."""
    return [
        {"role": "assistant", "content": "Hello! I'm your SQL assistant."},
        {"role": "user", "content": "show me all rows"},
    ]
