"""Command-line entry points for coding-agent-hub."""
