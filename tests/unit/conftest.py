"""Unit test specific configuration."""

import pytest

from coding_agent_hub.cli_agents.backends import BackendDescriptor
from coding_agent_hub.cli_plugins import ArgStrategy


@pytest.fixture
def generic_backend():
    """A generic backend whose command tests replace with a script path."""

    def _make(command: str = "fake-cli", **overrides) -> BackendDescriptor:
        values = dict(
            name="fake",
            display_name="Fake CLI",
            command=command,
            default_model="fake-model-1",
            timeout_ms=10_000,
            arg_builder=ArgStrategy.GENERIC,
            auth_env_var=None,
        )
        values.update(overrides)
        return BackendDescriptor(**values)

    return _make
