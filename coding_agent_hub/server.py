"""MCP server exposing coding agent CLIs as tools."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator, Iterable, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import AliasChoices, Field

from .cli_agents.backends import BackendDescriptor
from .cli_agents.invoker import CLIInvoker
from .config import SessionConfig
from .local_services import (
    AgentInvocationService,
    SessionToolService,
    ToolResponse,
)
from .session_manager import HubSessionManager

logger = logging.getLogger(__name__)

SERVER_NAME = "coding-agent-hub"

# Argument names as existing MCP clients send them; snake_case is accepted too
WORKING_DIR_ARG = AliasChoices("workingDir", "working_dir")
TIMEOUT_MS_ARG = AliasChoices("timeoutMs", "timeout_ms")
SESSION_ID_ARG = AliasChoices("sessionId", "session_id")

# Extra description text for the built-in backends
BACKEND_BLURBS = {
    "claude": (
        "Use this to get a response from Anthropic's Claude Code agent. "
        "Claude excels at code analysis, architecture, and reasoning."
    ),
    "gemini": (
        "Use this to get a response from Google's Gemini model. "
        "Gemini has access to web search and code analysis tools."
    ),
    "codex": (
        "Use this to get a response from OpenAI's Codex. "
        "Codex specializes in code implementation and review."
    ),
}


def build_tool_description(backend: BackendDescriptor) -> str:
    """Build the MCP tool description for a backend."""
    parts = [
        f"Invoke {backend.display_name} ({backend.command} CLI) to get an AI response.",
        f"Default model: {backend.default_model}.",
    ]
    blurb = BACKEND_BLURBS.get(backend.name)
    if blurb:
        parts.append(blurb)
    return " ".join(parts)


def _unwrap(response: ToolResponse) -> str:
    if response.is_error:
        raise ToolError(response.text)
    return response.text


def _make_agent_tool(service: AgentInvocationService, backend: BackendDescriptor):
    async def agent_tool(
        prompt: Annotated[
            str, Field(description=f"The prompt/question to send to {backend.display_name}")
        ],
        model: Annotated[
            Optional[str],
            Field(description=f"Model override (default: {backend.default_model})"),
        ] = None,
        working_dir: Annotated[
            Optional[str],
            Field(
                description="Working directory for the CLI process",
                validation_alias=WORKING_DIR_ARG,
            ),
        ] = None,
        timeout_ms: Annotated[
            Optional[int],
            Field(
                description=f"Timeout in milliseconds (default: {backend.timeout_ms})",
                validation_alias=TIMEOUT_MS_ARG,
                gt=0,
            ),
        ] = None,
        session_id: Annotated[
            Optional[str],
            Field(
                description="Session ID for multi-turn conversation continuity",
                validation_alias=SESSION_ID_ARG,
            ),
        ] = None,
    ) -> str:
        response = await service.invoke(
            backend.name,
            prompt,
            model=model,
            working_dir=working_dir,
            timeout_ms=timeout_ms,
            session_id=session_id,
        )
        return _unwrap(response)

    agent_tool.__name__ = f"{backend.name}_agent"
    return agent_tool


def create_hub_server(
    backends: Iterable[BackendDescriptor],
    session_config: Optional[SessionConfig] = None,
    invoker: Optional[CLIInvoker] = None,
) -> FastMCP:
    """
    Create a FastMCP server with one tool per enabled backend plus the
    session lifecycle tools.

    Args:
        backends: Resolved backend descriptors; disabled ones are skipped
        session_config: Session limits (defaults apply when omitted)
        invoker: Invoker shared by every tool

    Returns:
        The configured FastMCP instance
    """
    enabled = [b for b in backends if b.enabled]
    session_manager = HubSessionManager(session_config)
    invoker = invoker or CLIInvoker()

    agents = AgentInvocationService(enabled, session_manager, invoker=invoker)
    sessions = SessionToolService(enabled, session_manager, invoker=invoker)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            session_manager.destroy()

    mcp = FastMCP(SERVER_NAME, lifespan=lifespan)

    for backend in enabled:
        tool_name = f"{backend.name}-agent"
        mcp.tool(name=tool_name, description=build_tool_description(backend))(
            _make_agent_tool(agents, backend)
        )
        logger.debug(f"Registered tool {tool_name}")

    @mcp.tool(
        name="hub-session-start",
        description=(
            "Start a new persistent conversation session with a coding agent "
            "backend. Returns a session ID for use with subsequent messages."
        ),
    )
    async def session_start(
        backend: Annotated[
            str,
            Field(description='Backend to use for this session (e.g., "claude", "gemini", "codex")'),
        ],
        model: Annotated[
            Optional[str], Field(description="Model override for this session")
        ] = None,
        working_dir: Annotated[
            Optional[str],
            Field(
                description="Working directory for CLI invocations in this session",
                validation_alias=WORKING_DIR_ARG,
            ),
        ] = None,
    ) -> str:
        return _unwrap(sessions.start(backend, model=model, working_dir=working_dir))

    @mcp.tool(
        name="hub-session-message",
        description=(
            "Send a message within an existing session. Conversation history "
            "is automatically included in the prompt."
        ),
    )
    async def session_message(
        session_id: Annotated[
            str,
            Field(
                description="Session ID from hub-session-start",
                validation_alias=SESSION_ID_ARG,
            ),
        ],
        message: Annotated[str, Field(description="The message to send")],
        timeout_ms: Annotated[
            Optional[int],
            Field(
                description="Timeout in milliseconds",
                validation_alias=TIMEOUT_MS_ARG,
                gt=0,
            ),
        ] = None,
    ) -> str:
        return _unwrap(await sessions.message(session_id, message, timeout_ms=timeout_ms))

    @mcp.tool(
        name="hub-session-stop",
        description="End a persistent conversation session and free its resources.",
    )
    async def session_stop(
        session_id: Annotated[
            str,
            Field(description="Session ID to stop", validation_alias=SESSION_ID_ARG),
        ],
    ) -> str:
        return _unwrap(sessions.stop(session_id))

    @mcp.tool(
        name="hub-session-list",
        description="List all active conversation sessions.",
    )
    async def session_list() -> str:
        return _unwrap(sessions.list())

    logger.info(
        f"Hub server ready with {len(enabled)} backend(s): "
        f"{', '.join(b.name for b in enabled) or 'none'}"
    )
    return mcp
