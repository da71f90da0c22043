"""Infrastructure layer - External dependencies and implementations.

This layer contains all external dependencies including:
- MongoDB connection and store adapter (pymongo)
- stdio MCP transport (mcp SDK)
- HTTP JSON-RPC transport (FastAPI)
"""
