# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the SQLPilot API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.dependencies import get_schema_cache
from app.exceptions import (
    SQLPilotException,
    http_exception_handler,
    sqlpilot_exception_handler,
    validation_exception_handler,
)
from app.routers import autocomplete, chat, data, health, query, schema
from app.websocket import routes as websocket_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: warm the schema cache so the first completion is grounded
    - Shutdown: log only; editor connections close their own engines
    """
    logger.info(f"Starting SQLPilot API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Workspace tables: {settings.schema_tables_list}")

    schema_cache = app.dependency_overrides.get(get_schema_cache, get_schema_cache)()
    await schema_cache.refresh()

    yield

    logger.info("Shutting down SQLPilot API")


# Create FastAPI application
app = FastAPI(
    title="SQLPilot API",
    description="""
## AI-Assisted SQL Workspace API

Run SQL against your Supabase database and get help from a schema-aware assistant.

### How It Works

1. **Schema** - The configured tables are introspected into a prompt-ready description
2. **Autocomplete** - Inline suggestions for the text after the cursor (HTTP or `/ws/editor`)
3. **Run Query** - Any SQL statement, with normalized results
4. **Chat** - Ask the assistant; SQL in its replies comes back as runnable blocks

### Quick Start

```bash
# Run a query
curl -X POST http://localhost:8000/api/run-query \\
  -H "Content-Type: application/json" \\
  -d '{"query": "SELECT * FROM dummytable;"}'

# Ask the assistant
curl -X POST http://localhost:8000/api/chat \\
  -H "Content-Type: application/json" \\
  -d '{"messages": [{"role": "user", "content": "show me all rows"}]}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Autocomplete",
            "description": "Inline SQL completion",
        },
        {
            "name": "Query",
            "description": "Execute SQL statements",
        },
        {
            "name": "Chat",
            "description": "Schema-aware SQL assistant",
        },
        {
            "name": "Schema",
            "description": "Schema description used to ground the assistant",
        },
        {
            "name": "Data",
            "description": "Results-view snapshot and record CRUD",
        },
        {
            "name": "WebSocket",
            "description": "Debounced inline completion for connected editors",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(SQLPilotException, sqlpilot_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) or "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(autocomplete.router, prefix="/api", tags=["Autocomplete"])
app.include_router(query.router, prefix="/api", tags=["Query"])
app.include_router(chat.router, prefix="/api", tags=["Chat"])
app.include_router(schema.router, prefix="/api", tags=["Schema"])
app.include_router(data.router, prefix="/api", tags=["Data"])
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(websocket_routes.router, tags=["WebSocket"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "SQLPilot API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }
