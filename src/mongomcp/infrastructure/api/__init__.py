"""HTTP API for the MCP tools."""
