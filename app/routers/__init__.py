# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - autocomplete.py: Inline SQL completion
# - query.py: SQL execution
# - chat.py: Schema-aware assistant
# - schema.py: Schema description
# - data.py: Results-view snapshot and record CRUD
# - health.py: Health check endpoints
#
# Each router is mounted in main.py under the /api prefix.
# =============================================================================

from . import autocomplete
from . import chat
from . import data
from . import health
from . import query
from . import schema

__all__ = [
    "autocomplete",
    "chat",
    "data",
    "health",
    "query",
    "schema",
]
