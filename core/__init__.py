# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Schema introspection and query execution
# - workspace.py: One user's editor, results view, completion and chat
#
# Code in this package does not use FastAPI directly.
# This keeps the logic testable and reusable.
# =============================================================================
