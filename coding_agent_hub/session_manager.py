"""
HubSessionManager: multi-turn conversation sessions for stateless CLIs.

Sessions accumulate conversation history and prepend it to each new CLI
invocation as a context block in the prompt. State lives in memory only;
each session carries its own idle-eviction timer on the running event loop.

Mutations are not locked: two overlapping calls against the same session
race, last write wins. Callers are expected to keep one turn in flight per
session.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from coding_agent_hub.config import SessionConfig
from coding_agent_hub.errors import SessionNotFoundError

logger = logging.getLogger(__name__)

HISTORY_OPEN_TAG = "<conversation_history>"
HISTORY_CLOSE_TAG = "</conversation_history>"
HISTORY_INSTRUCTION = "Based on the conversation above, respond to the latest message."
NEW_MESSAGE_PREFIX = "The new message is: "

Role = Literal["user", "assistant"]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SessionTurn:
    """A single turn in a conversation."""

    role: Role
    content: str
    timestamp: int


@dataclass(frozen=True)
class SessionInfo:
    """Public session metadata (turn content is never exposed here)."""

    session_id: str
    backend: str
    model: str
    working_dir: Optional[str]
    created_at: int
    last_active_at: int
    turn_count: int


@dataclass
class _Session:
    id: str
    backend: str
    model: str
    working_dir: Optional[str]
    created_at: int
    last_active_at: int
    turns: List[SessionTurn] = field(default_factory=list)
    idle_handle: Optional[asyncio.TimerHandle] = None


def build_context_block(turns: List[SessionTurn]) -> str:
    """Serialize turns into the history envelope."""
    lines = [f"[{turn.role}]: {turn.content}" for turn in turns]
    return "\n".join([HISTORY_OPEN_TAG, *lines, HISTORY_CLOSE_TAG])


class HubSessionManager:
    """
    Manages conversation sessions for the hub.

    Must be used from within a running asyncio event loop: idle timers are
    scheduled with ``loop.call_later``.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.config = config or SessionConfig()
        self._loop = loop
        self._sessions: Dict[str, _Session] = {}

    def start_session(
        self,
        backend: str,
        model: Optional[str] = None,
        working_dir: Optional[str] = None,
    ) -> str:
        """Create a new session and return its ID."""
        session_id = str(uuid.uuid4())
        while session_id in self._sessions:
            session_id = str(uuid.uuid4())

        now = _now_ms()
        session = _Session(
            id=session_id,
            backend=backend,
            model=model or "",
            working_dir=working_dir,
            created_at=now,
            last_active_at=now,
        )
        self._sessions[session_id] = session
        self._reset_idle_timer(session)

        logger.info(f"[SESSION] Started {session_id} on {backend}")
        return session_id

    def compose_prompt(self, session_id: str, user_message: str) -> str:
        """
        Add a user turn and build the prompt to pass to the CLI.

        The first turn of a session is returned unchanged. Later turns are
        wrapped with every prior turn in a history block.

        Raises:
            SessionNotFoundError: If the session is unknown or has expired
        """
        session = self._require(session_id)

        self._append_turn(session, "user", user_message)
        self._trim_history(session)

        if len(session.turns) <= 1:
            return user_message

        context_block = build_context_block(session.turns[:-1])
        return (
            f"{context_block}\n\n{HISTORY_INSTRUCTION}\n"
            f"{NEW_MESSAGE_PREFIX}{user_message}"
        )

    def record_response(self, session_id: str, assistant_content: str) -> None:
        """
        Record the assistant's response after a CLI invocation.

        Raises:
            SessionNotFoundError: If the session is unknown or has expired
        """
        session = self._require(session_id)
        self._append_turn(session, "assistant", assistant_content)

    def stop_session(self, session_id: str) -> bool:
        """End a session and cancel its idle timer. Returns whether it existed."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        self._cancel_idle_timer(session)
        logger.info(f"[SESSION] Stopped {session_id}")
        return True

    def get_session(self, session_id: str) -> Optional[SessionInfo]:
        session = self._sessions.get(session_id)
        return self._to_session_info(session) if session else None

    def list_sessions(self) -> List[SessionInfo]:
        return [self._to_session_info(s) for s in self._sessions.values()]

    def destroy(self) -> None:
        """Shut down: cancel every timer and clear all sessions."""
        for session in self._sessions.values():
            self._cancel_idle_timer(session)
        count = len(self._sessions)
        self._sessions.clear()
        if count:
            logger.info(f"[SESSION] Destroyed {count} session(s)")

    def __len__(self) -> int:
        return len(self._sessions)

    def _require(self, session_id: str) -> _Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _append_turn(self, session: _Session, role: Role, content: str) -> None:
        now = _now_ms()
        session.turns.append(SessionTurn(role=role, content=content, timestamp=now))
        session.last_active_at = max(session.last_active_at, now)
        self._reset_idle_timer(session)

    def _trim_history(self, session: _Session) -> None:
        # Trim by turn count
        excess = len(session.turns) - self.config.max_context_turns
        if excess > 0:
            del session.turns[:excess]

        # Trim by total character count, never below one turn
        total_chars = sum(len(t.content) for t in session.turns)
        while total_chars > self.config.max_context_chars and len(session.turns) > 1:
            removed = session.turns.pop(0)
            total_chars -= len(removed.content)

    def _reset_idle_timer(self, session: _Session) -> None:
        self._cancel_idle_timer(session)
        loop = self._loop or asyncio.get_running_loop()
        session.idle_handle = loop.call_later(
            self.config.idle_timeout_ms / 1000, self._evict, session.id
        )

    @staticmethod
    def _cancel_idle_timer(session: _Session) -> None:
        if session.idle_handle is not None:
            session.idle_handle.cancel()
            session.idle_handle = None

    def _evict(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.idle_handle = None
            logger.info(f"[SESSION] Evicted idle session {session_id}")

    @staticmethod
    def _to_session_info(session: _Session) -> SessionInfo:
        return SessionInfo(
            session_id=session.id,
            backend=session.backend,
            model=session.model,
            working_dir=session.working_dir,
            created_at=session.created_at,
            last_active_at=session.last_active_at,
            turn_count=len(session.turns),
        )
