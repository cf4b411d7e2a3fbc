"""
Backend Definitions: descriptors for the supported coding agent CLIs.

Built-in defaults are merged with operator overrides from Settings to
produce the immutable descriptors the invoker works from.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from coding_agent_hub.cli_plugins import ArgStrategy
from coding_agent_hub.config import DEFAULT_TIMEOUT_MS, BackendOverride, Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendDescriptor:
    """Configuration for one backend (coding agent CLI)."""

    name: str
    display_name: str
    command: str
    default_model: str
    timeout_ms: int
    arg_builder: ArgStrategy = ArgStrategy.GENERIC
    auth_env_var: Optional[str] = None
    enabled: bool = True


# Default backend configurations for all supported coding agent CLIs
DEFAULT_BACKENDS: List[BackendDescriptor] = [
    BackendDescriptor(
        name="claude",
        display_name="Claude Code",
        command="claude",
        default_model="claude-sonnet-4-5",
        timeout_ms=DEFAULT_TIMEOUT_MS,
        arg_builder=ArgStrategy.CLAUDE,
        auth_env_var="ANTHROPIC_API_KEY",
    ),
    BackendDescriptor(
        name="gemini",
        display_name="Gemini CLI",
        command="gemini",
        default_model="gemini-2.5-pro",
        timeout_ms=DEFAULT_TIMEOUT_MS,
        arg_builder=ArgStrategy.GEMINI,
        auth_env_var="GEMINI_API_KEY",
    ),
    BackendDescriptor(
        name="codex",
        display_name="Codex CLI",
        command="codex",
        default_model="codex-1",
        timeout_ms=DEFAULT_TIMEOUT_MS,
        arg_builder=ArgStrategy.CODEX,
        auth_env_var="OPENAI_API_KEY",
    ),
]


def get_default_backend(name: str) -> Optional[BackendDescriptor]:
    """Get a default backend descriptor by name."""
    for backend in DEFAULT_BACKENDS:
        if backend.name == name:
            return backend
    return None


def _apply_override(
    backend: BackendDescriptor, override: BackendOverride
) -> BackendDescriptor:
    changes = override.model_dump(exclude_none=True)
    if "arg_builder" in changes:
        changes["arg_builder"] = ArgStrategy.parse(changes["arg_builder"])
    # The name always comes from the mapping key
    changes.pop("name", None)
    return replace(backend, **changes)


def _custom_backend(
    name: str, override: BackendOverride, default_timeout_ms: Optional[int]
) -> Optional[BackendDescriptor]:
    if not (override.command and override.display_name and override.default_model):
        logger.warning(
            f"Ignoring custom backend '{name}': command, display_name and "
            "default_model are required"
        )
        return None

    return BackendDescriptor(
        name=name,
        display_name=override.display_name,
        command=override.command,
        default_model=override.default_model,
        timeout_ms=override.timeout_ms or default_timeout_ms or DEFAULT_TIMEOUT_MS,
        arg_builder=ArgStrategy.parse(override.arg_builder),
        auth_env_var=override.auth_env_var,
        enabled=True if override.enabled is None else override.enabled,
    )


def resolve_backends(
    settings: Optional[Settings] = None,
    enabled_filter: Optional[Iterable[str]] = None,
) -> List[BackendDescriptor]:
    """
    Resolve the final list of backend descriptors.

    Args:
        settings: Loaded settings; None means defaults only
        enabled_filter: If given, exactly these backend names are enabled

    Returns:
        Descriptors in definition order: built-ins first, then custom backends
    """
    configs: Dict[str, BackendDescriptor] = {b.name: b for b in DEFAULT_BACKENDS}
    default_timeout_ms = settings.default_timeout_ms if settings else None

    if settings is not None:
        for name, override in settings.backends.items():
            existing = configs.get(name)
            if existing is not None:
                configs[name] = _apply_override(existing, override)
            else:
                custom = _custom_backend(name, override, default_timeout_ms)
                if custom is not None:
                    configs[name] = custom

    # Global timeout only replaces a built-in's untouched default
    if default_timeout_ms:
        for name, config in configs.items():
            original = get_default_backend(name)
            if original is not None and config.timeout_ms == original.timeout_ms:
                configs[name] = replace(config, timeout_ms=default_timeout_ms)

    result = list(configs.values())

    if enabled_filter is not None:
        wanted = {name.strip() for name in enabled_filter if name.strip()}
        unknown = wanted - set(configs)
        if unknown:
            logger.warning(f"Unknown backends in filter: {', '.join(sorted(unknown))}")
        result = [replace(b, enabled=b.name in wanted) for b in result]

    return result
