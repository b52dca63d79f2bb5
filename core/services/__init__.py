# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .schema_service import SchemaCache, SchemaIntrospector
from .query_service import QueryDispatcher, classify_statement

__all__ = [
    "SchemaCache",
    "SchemaIntrospector",
    "QueryDispatcher",
    "classify_statement",
]
