"""Common errors for Coding Agent Hub."""


class HubError(Exception):
    """Base class for hub errors surfaced to callers."""


class SessionNotFoundError(HubError, KeyError):
    """Raised when a session id is unknown, stopped, or idle-evicted."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class BackendNotFoundError(HubError):
    """Raised when a backend name is unknown or disabled."""

    def __init__(self, backend: str, available: list[str] | None = None):
        message = f'Unknown or disabled backend: "{backend}"'
        if available is not None:
            message += f". Available: {', '.join(available)}"
        super().__init__(message)
        self.backend = backend
        self.available = available or []
