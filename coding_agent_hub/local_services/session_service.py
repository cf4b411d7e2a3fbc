"""
SessionToolService: LocalService for the hub-session-* tools.

Starts, messages, stops and lists conversation sessions. Message turns run
the session's backend with the stored model and working directory.
"""

import json
import logging
import re
from dataclasses import asdict
from typing import Any, Dict, Iterable, Optional

from coding_agent_hub.cli_agents.backends import BackendDescriptor
from coding_agent_hub.cli_agents.invoker import CLIInvoker
from coding_agent_hub.errors import BackendNotFoundError, SessionNotFoundError
from coding_agent_hub.local_services.responses import (
    ToolResponse,
    format_result,
    record_response,
)
from coding_agent_hub.session_manager import HubSessionManager, SessionInfo
from coding_agent_hub.types import InvocationRequest

logger = logging.getLogger(__name__)


def _camel_case(name: str) -> str:
    return re.sub(r"_([a-z])", lambda m: m.group(1).upper(), name)


def _to_wire(info: SessionInfo) -> Dict[str, Any]:
    """Session metadata with the camelCase keys MCP clients expect."""
    return {_camel_case(key): value for key, value in asdict(info).items()}


class SessionToolService:
    """Service behind the session lifecycle tools."""

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

    def start(
        self,
        backend: str,
        model: Optional[str] = None,
        working_dir: Optional[str] = None,
    ) -> ToolResponse:
        descriptor = self._backends.get(backend)
        if descriptor is None:
            error = BackendNotFoundError(backend, list(self._backends))
            return ToolResponse(text=str(error), is_error=True)

        session_id = self._session_manager.start_session(
            backend, model=model, working_dir=working_dir
        )
        payload = {
            "sessionId": session_id,
            "backend": backend,
            "model": model or descriptor.default_model,
        }
        return ToolResponse(text=json.dumps(payload))

    async def message(
        self,
        session_id: str,
        message: str,
        timeout_ms: Optional[int] = None,
    ) -> ToolResponse:
        """Send a message within a session; history is prepended automatically."""
        session = self._session_manager.get_session(session_id)
        if session is None:
            logger.debug(f"[SESSION] Message for unknown session {session_id}")
            return ToolResponse(text=f"Session not found: {session_id}", is_error=True)

        descriptor = self._backends.get(session.backend)
        if descriptor is None:
            return ToolResponse(
                text=f'Backend "{session.backend}" is no longer available',
                is_error=True,
            )

        try:
            prompt = self._session_manager.compose_prompt(session_id, message)
        except SessionNotFoundError as e:
            return ToolResponse(text=f"Session error: {e}", is_error=True)

        result = await self._invoker.invoke(
            descriptor,
            InvocationRequest(
                prompt=prompt,
                model=session.model or None,
                working_dir=session.working_dir,
                timeout_ms=timeout_ms,
            ),
        )

        if result.success:
            record_response(self._session_manager, session_id, result.content)

        return format_result(result, session_id=session_id)

    def stop(self, session_id: str) -> ToolResponse:
        if not self._session_manager.stop_session(session_id):
            return ToolResponse(text=f"Session not found: {session_id}", is_error=True)
        return ToolResponse(text=f"Session {session_id} stopped")

    def list(self) -> ToolResponse:
        sessions = [_to_wire(s) for s in self._session_manager.list_sessions()]
        return ToolResponse(text=json.dumps(sessions, indent=2))
