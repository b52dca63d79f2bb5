# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Structured error types and their JSON rendering
# - dependencies.py: Shared singletons injected with Depends()
# - routers/: HTTP endpoints organized by feature
# - websocket/: Editor channel for debounced inline completion
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to core/ and agents/.
# =============================================================================
