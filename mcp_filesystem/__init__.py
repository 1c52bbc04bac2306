"""Filesystem tool server for agents, exposed over MCP and an HTTP API."""
