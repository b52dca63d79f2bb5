# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# All providers return process-wide singletons. Tests replace them with
# app.dependency_overrides.
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.services.query_service import QueryDispatcher
from core.services.schema_service import SchemaCache, SchemaIntrospector
from lib.llm_client import LLMClient
from lib.supabase_client import SupabaseDataStore


@lru_cache
def get_data_store() -> SupabaseDataStore:
    """Async data store over the Supabase singleton client."""
    return SupabaseDataStore()


@lru_cache
def get_llm_client() -> LLMClient:
    """Shared OpenAI client for completions and chat."""
    return LLMClient()


@lru_cache
def get_schema_cache() -> SchemaCache:
    """
    The shared schema description.

    Warmed at startup and refreshed by get-schema and by mutating queries.
    """
    return SchemaCache(
        SchemaIntrospector(get_data_store()),
        settings.schema_tables_list,
    )


def get_query_dispatcher(
    store: Annotated[SupabaseDataStore, Depends(get_data_store)],
) -> QueryDispatcher:
    return QueryDispatcher(store)


# Type aliases for dependency injection
DataStoreDep = Annotated[SupabaseDataStore, Depends(get_data_store)]
LLMDep = Annotated[LLMClient, Depends(get_llm_client)]
SchemaCacheDep = Annotated[SchemaCache, Depends(get_schema_cache)]
DispatcherDep = Annotated[QueryDispatcher, Depends(get_query_dispatcher)]
