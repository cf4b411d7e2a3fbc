"""Unit tests for backend resolution from defaults plus overrides."""

import logging

import pytest

from coding_agent_hub.cli_agents.backends import (
    DEFAULT_BACKENDS,
    get_default_backend,
    resolve_backends,
)
from coding_agent_hub.cli_plugins import ArgStrategy
from coding_agent_hub.config import BackendOverride, Settings


def _settings(**kwargs) -> Settings:
    return Settings(**kwargs)


def _by_name(backends):
    return {b.name: b for b in backends}


class TestDefaults:
    def test_builtins_in_order(self):
        backends = resolve_backends()

        assert [b.name for b in backends] == ["claude", "gemini", "codex"]
        assert all(b.enabled for b in backends)
        assert all(b.timeout_ms == 120_000 for b in backends)

    def test_builtin_descriptors(self):
        claude = get_default_backend("claude")

        assert claude.command == "claude"
        assert claude.default_model == "claude-sonnet-4-5"
        assert claude.auth_env_var == "ANTHROPIC_API_KEY"
        assert claude.arg_builder is ArgStrategy.CLAUDE
        assert get_default_backend("gemini").auth_env_var == "GEMINI_API_KEY"
        assert get_default_backend("codex").auth_env_var == "OPENAI_API_KEY"
        assert get_default_backend("unknown") is None

    def test_defaults_are_not_mutated(self):
        resolve_backends(
            _settings(backends={"claude": BackendOverride(default_model="other")})
        )

        assert get_default_backend("claude").default_model == "claude-sonnet-4-5"
        assert len(DEFAULT_BACKENDS) == 3


class TestOverrides:
    def test_partial_override_keeps_other_fields(self):
        settings = _settings(
            backends={"gemini": BackendOverride(default_model="gemini-2.5-flash")}
        )

        gemini = _by_name(resolve_backends(settings))["gemini"]

        assert gemini.default_model == "gemini-2.5-flash"
        assert gemini.command == "gemini"
        assert gemini.arg_builder is ArgStrategy.GEMINI

    def test_disable_builtin(self):
        settings = _settings(backends={"codex": BackendOverride(enabled=False)})

        backends = _by_name(resolve_backends(settings))

        assert not backends["codex"].enabled
        assert backends["claude"].enabled

    def test_custom_backend_added(self):
        settings = _settings(
            backends={
                "aider": BackendOverride(
                    command="aider",
                    display_name="Aider",
                    default_model="gpt-4o",
                    arg_builder="generic",
                )
            }
        )

        backends = resolve_backends(settings)

        assert backends[-1].name == "aider"
        assert backends[-1].arg_builder is ArgStrategy.GENERIC
        assert backends[-1].timeout_ms == 120_000

    def test_incomplete_custom_backend_dropped(self, caplog):
        settings = _settings(backends={"half": BackendOverride(command="half")})

        with caplog.at_level(logging.WARNING, logger="coding_agent_hub"):
            backends = resolve_backends(settings)

        assert "half" not in _by_name(backends)
        assert "Ignoring custom backend 'half'" in caplog.text

    def test_unknown_arg_builder_falls_back_to_generic(self):
        settings = _settings(
            backends={"claude": BackendOverride(arg_builder="no-such-builder")}
        )

        claude = _by_name(resolve_backends(settings))["claude"]

        assert claude.arg_builder is ArgStrategy.GENERIC


class TestGlobalTimeout:
    def test_applies_to_untouched_builtins(self):
        settings = _settings(
            default_timeout_ms=60_000,
            backends={"claude": BackendOverride(timeout_ms=300_000)},
        )

        backends = _by_name(resolve_backends(settings))

        assert backends["claude"].timeout_ms == 300_000
        assert backends["gemini"].timeout_ms == 60_000
        assert backends["codex"].timeout_ms == 60_000

    def test_custom_backend_inherits_global_timeout(self):
        settings = _settings(
            default_timeout_ms=45_000,
            backends={
                "local": BackendOverride(
                    command="local-agent", display_name="Local", default_model="m"
                )
            },
        )

        assert _by_name(resolve_backends(settings))["local"].timeout_ms == 45_000


class TestEnabledFilter:
    def test_filter_enables_exactly_listed(self):
        backends = _by_name(resolve_backends(enabled_filter=["gemini"]))

        assert backends["gemini"].enabled
        assert not backends["claude"].enabled
        assert not backends["codex"].enabled

    def test_filter_can_reenable_disabled_backend(self):
        settings = _settings(backends={"codex": BackendOverride(enabled=False)})

        backends = _by_name(resolve_backends(settings, enabled_filter=["codex"]))

        assert backends["codex"].enabled

    @pytest.mark.parametrize("names", [["nope"], []])
    def test_filter_with_no_known_names_disables_all(self, names):
        backends = resolve_backends(enabled_filter=names)

        assert not any(b.enabled for b in backends)
