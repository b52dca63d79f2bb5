# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the SQLPilot API:
# - test_schema_service.py / test_query_service.py: core services
# - test_completion_engine.py / test_conversation.py: LLM-facing logic
# - test_workspace.py: editor, results view and assistant wiring
# - test_api.py: HTTP and WebSocket endpoints via TestClient
#
# Run tests with: pytest
# =============================================================================
