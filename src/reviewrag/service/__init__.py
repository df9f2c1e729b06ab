"""Shared service wiring and the MCP server for reviewrag."""
