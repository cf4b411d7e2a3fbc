"""
CLI Plugin Registry.

Central registry mapping each ArgStrategy to its plugin instance.
Uses @cli_plugin decorator for registration.
"""

from typing import Callable, Dict, List, Type, TypeVar

from coding_agent_hub.cli_plugins.base import ArgStrategy, CLIPlugin

# Global registry of all CLI plugins
CLI_PLUGIN_REGISTRY: Dict[ArgStrategy, CLIPlugin] = {}

T = TypeVar("T")


def cli_plugin(strategy: ArgStrategy) -> Callable[[Type[T]], Type[T]]:
    """
    Decorator that registers a CLI plugin for a strategy.

    Usage:
        @cli_plugin(ArgStrategy.CODEX)
        class CodexPlugin:
            def build_args(self, prompt, model, working_dir=None):
                return ["exec", prompt, "--model", model]
    """

    def decorator(cls: Type[T]) -> Type[T]:
        if strategy in CLI_PLUGIN_REGISTRY:
            raise ValueError(f"CLI plugin already registered for: {strategy.value}")
        CLI_PLUGIN_REGISTRY[strategy] = cls()  # type: ignore[assignment]
        return cls

    return decorator


def get_cli_plugin(strategy: ArgStrategy) -> CLIPlugin:
    """
    Get the plugin for a strategy.

    Args:
        strategy: The backend's argument strategy

    Returns:
        The registered plugin; the generic plugin for anything unregistered
    """
    plugin = CLI_PLUGIN_REGISTRY.get(strategy)
    if plugin is None:
        return CLI_PLUGIN_REGISTRY[ArgStrategy.GENERIC]
    return plugin


def list_cli_plugins() -> List[str]:
    """List all registered strategy names."""
    return [strategy.value for strategy in CLI_PLUGIN_REGISTRY]


def verify_registry() -> None:
    """Raise if any ArgStrategy member has no plugin registered."""
    missing = [s.value for s in ArgStrategy if s not in CLI_PLUGIN_REGISTRY]
    if missing:
        raise RuntimeError(f"No CLI plugin registered for: {', '.join(missing)}")
