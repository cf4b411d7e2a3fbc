"""Text rendering of invocation results for MCP tool responses."""

import logging
from dataclasses import dataclass
from typing import Optional

from coding_agent_hub.errors import SessionNotFoundError
from coding_agent_hub.session_manager import HubSessionManager
from coding_agent_hub.types import InvocationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResponse:
    """Text returned to the MCP client, flagged when it reports an error."""

    text: str
    is_error: bool = False


def format_result(
    result: InvocationResult, session_id: Optional[str] = None
) -> ToolResponse:
    """Render an InvocationResult as the tool's text response."""
    if result.success:
        metadata = [
            f"Backend: {result.backend}",
            f"Model: {result.model}",
            f"Duration: {result.duration_ms}ms",
        ]
        if session_id:
            metadata.append(f"Session: {session_id}")
        return ToolResponse(text=f"{result.content}\n\n---\n_{' | '.join(metadata)}_")

    return ToolResponse(
        text=(
            f"Hub invocation failed: {result.error or 'Unknown error'}\n\n"
            f"Backend: {result.backend}\n"
            f"Exit code: {result.exit_code}"
        ),
        is_error=True,
    )


def record_response(
    session_manager: HubSessionManager, session_id: str, content: str
) -> None:
    """Store an assistant turn, tolerating a session that ended mid-call."""
    try:
        session_manager.record_response(session_id, content)
    except SessionNotFoundError:
        # Stopped or evicted while the CLI was running
        logger.warning(f"[SESSION] {session_id} ended before response was recorded")
