"""MCP transport bindings."""
