"""Services that back the hub's MCP tools."""

from .agent_service import AgentInvocationService
from .responses import ToolResponse, format_result
from .session_service import SessionToolService

__all__ = [
    "AgentInvocationService",
    "SessionToolService",
    "ToolResponse",
    "format_result",
]
