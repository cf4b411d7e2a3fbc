"""
CLI Availability Checker: report which backend commands are on PATH.

Used for startup diagnostics and the `backends` CLI listing. Invocation
never depends on it; a missing command surfaces as a spawn failure.
"""

import logging
import shutil
from typing import Dict, Iterable, Optional

from coding_agent_hub.cli_agents.backends import BackendDescriptor

logger = logging.getLogger(__name__)

# Install hints for the built-in CLIs
INSTALL_COMMANDS: Dict[str, str] = {
    "claude": "npm install -g @anthropic-ai/claude-code",
    "gemini": "npm install -g @google/gemini-cli",
    "codex": "npm install -g @openai/codex",
}


class CLIAvailabilityChecker:
    """Checks whether backend commands resolve on PATH."""

    def __init__(self) -> None:
        self._cache: Dict[str, bool] = {}

    def is_available(self, command: str) -> bool:
        if command not in self._cache:
            self._cache[command] = shutil.which(command) is not None
        return self._cache[command]

    def get_install_hint(self, backend: BackendDescriptor) -> Optional[str]:
        return INSTALL_COMMANDS.get(backend.command)

    def check_all(self, backends: Iterable[BackendDescriptor]) -> Dict[str, bool]:
        """Map backend name to whether its command is installed."""
        return {b.name: self.is_available(b.command) for b in backends}

    def log_startup_status(self, backends: Iterable[BackendDescriptor]) -> None:
        """Log the availability status of the enabled backends at startup."""
        enabled = [b for b in backends if b.enabled]
        status = self.check_all(enabled)
        available = [name for name, ok in status.items() if ok]
        missing = [b for b in enabled if not status[b.name]]

        if available:
            logger.info(f"Available CLIs: {', '.join(available)}")
        for backend in missing:
            hint = self.get_install_hint(backend)
            logger.warning(
                f"CLI not found on PATH for backend '{backend.name}': {backend.command}"
                + (f" (install with: {hint})" if hint else "")
            )
