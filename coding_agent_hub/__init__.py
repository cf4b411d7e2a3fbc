"""Coding Agent Hub: MCP server exposing coding agent CLIs as tools."""

__version__ = "0.1.0"
