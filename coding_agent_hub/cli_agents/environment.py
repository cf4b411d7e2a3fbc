"""
Environment: Environment isolation for CLI agents.

Child processes get a fixed allow-list of ambient variables plus, at most,
the single auth variable named by their own backend. Nothing else is
forwarded, so one backend's credentials never reach another backend's CLI.
"""

import logging
import os
from typing import Dict, Mapping, Optional

from coding_agent_hub.cli_agents.backends import BackendDescriptor

logger = logging.getLogger(__name__)

# Environment variables safe to pass to CLI processes
ENV_ALLOWLIST = (
    "PATH",
    "HOME",
    "USER",
    "SHELL",
    "TERM",
    "NODE_ENV",
    "LANG",
    "LC_ALL",
    "LC_CTYPE",
)


class EnvironmentBuilder:
    """Builds the restricted environment for a backend subprocess."""

    def __init__(self, allowlist: tuple[str, ...] = ENV_ALLOWLIST):
        self._allowlist = allowlist

    def build_env(
        self,
        backend: BackendDescriptor,
        source_env: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        """
        Build environment variables for a backend CLI.

        Args:
            backend: The backend being invoked
            source_env: Environment to copy from (defaults to os.environ)

        Returns:
            Allow-listed variables plus the backend's auth variable if set
        """
        source = os.environ if source_env is None else source_env
        env = {key: source[key] for key in self._allowlist if key in source}

        auth_var = backend.auth_env_var
        if auth_var:
            value = source.get(auth_var)
            if value:
                env[auth_var] = value
                # Don't log actual key values
                logger.debug(f"[ENV] Passing {auth_var} to {backend.name}")
            else:
                logger.debug(f"[ENV] {auth_var} not set for {backend.name}")

        return env


def build_env(
    backend: BackendDescriptor, source_env: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """Build the child environment with the default allow-list."""
    return EnvironmentBuilder().build_env(backend, source_env)
