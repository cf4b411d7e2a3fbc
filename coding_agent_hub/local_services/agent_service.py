"""
AgentInvocationService: LocalService for the per-backend agent tools.

Runs one backend CLI for a prompt, optionally threading the prompt through
a conversation session first.
"""

import logging
from typing import Dict, Iterable, Optional

from coding_agent_hub.cli_agents.backends import BackendDescriptor
from coding_agent_hub.cli_agents.invoker import CLIInvoker
from coding_agent_hub.errors import BackendNotFoundError, SessionNotFoundError
from coding_agent_hub.local_services.responses import (
    ToolResponse,
    format_result,
    record_response,
)
from coding_agent_hub.session_manager import HubSessionManager
from coding_agent_hub.types import InvocationRequest

logger = logging.getLogger(__name__)


class AgentInvocationService:
    """Service behind the `<backend>-agent` tools."""

    def __init__(
        self,
        backends: Iterable[BackendDescriptor],
        session_manager: HubSessionManager,
        invoker: Optional[CLIInvoker] = None,
    ):
        self._backends: Dict[str, BackendDescriptor] = {
            b.name: b for b in backends if b.enabled
        }
        self._session_manager = session_manager
        self._invoker = invoker or CLIInvoker()

    def get_backend(self, name: str) -> BackendDescriptor:
        """
        Look up an enabled backend.

        Raises:
            BackendNotFoundError: If the backend is unknown or disabled
        """
        backend = self._backends.get(name)
        if backend is None:
            raise BackendNotFoundError(name, list(self._backends))
        return backend

    @property
    def backend_names(self) -> list[str]:
        return list(self._backends)

    async def invoke(
        self,
        backend: str,
        prompt: str,
        model: Optional[str] = None,
        working_dir: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> ToolResponse:
        """
        Invoke a backend, with optional session continuity.

        Args:
            backend: Enabled backend name
            prompt: The prompt to send
            model: Model override
            working_dir: Working directory for the CLI
            timeout_ms: Timeout override in milliseconds
            session_id: Existing session to record this exchange in

        Returns:
            ToolResponse with the agent's answer or the failure description
        """
        try:
            descriptor = self.get_backend(backend)
        except BackendNotFoundError as e:
            return ToolResponse(text=str(e), is_error=True)

        effective_prompt = prompt
        if session_id:
            try:
                effective_prompt = self._session_manager.compose_prompt(
                    session_id, prompt
                )
            except SessionNotFoundError as e:
                logger.debug(f"[SESSION] {e}")
                return ToolResponse(text=f"Session error: {e}", is_error=True)

        result = await self._invoker.invoke(
            descriptor,
            InvocationRequest(
                prompt=effective_prompt,
                model=model,
                working_dir=working_dir,
                timeout_ms=timeout_ms,
            ),
        )

        if result.success and session_id:
            record_response(self._session_manager, session_id, result.content)

        return format_result(result)
