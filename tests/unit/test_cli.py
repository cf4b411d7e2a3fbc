"""Unit tests for the coding-agent-hub command line."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from coding_agent_hub import __version__
from coding_agent_hub.cli.main import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_config_env(monkeypatch):
    """--config writes HUB_CONFIG_FILE into os.environ; undo it after each test."""
    monkeypatch.setenv("HUB_CONFIG_FILE", "unused")
    monkeypatch.delenv("HUB_CONFIG_FILE")


class TestVersion:
    def test_version_flag(self, runner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"coding-agent-hub {__version__}" in result.output


class TestServe:
    def test_no_enabled_backends_exits_with_error(self, runner):
        result = runner.invoke(app, ["--backends", "nope"])

        assert result.exit_code == 1

    def test_missing_config_file(self, runner, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 1

    def test_runs_server_with_filtered_backends(self, runner):
        server = MagicMock()

        with patch("coding_agent_hub.server.create_hub_server", return_value=server) as create, \
                patch("coding_agent_hub.logging.setup_logging"):
            result = runner.invoke(app, ["--backends", "gemini,codex"])

        assert result.exit_code == 0, result.output
        backends = create.call_args.args[0]
        assert [b.name for b in backends] == ["gemini", "codex"]
        server.run.assert_called_once_with()

    def test_config_file_applied(self, runner, tmp_path):
        config = tmp_path / "hub.yaml"
        config.write_text("backends:\n  claude:\n    enabled: false\n  codex:\n    enabled: false\n")
        server = MagicMock()

        with patch("coding_agent_hub.server.create_hub_server", return_value=server) as create, \
                patch("coding_agent_hub.logging.setup_logging"):
            result = runner.invoke(app, ["--config", str(config)])

        assert result.exit_code == 0, result.output
        assert [b.name for b in create.call_args.args[0]] == ["gemini"]


class TestBackendsCommand:
    def test_lists_builtin_backends(self, runner):
        with patch("shutil.which", return_value=None):
            result = runner.invoke(app, ["backends"])

        assert result.exit_code == 0
        for name in ("claude", "gemini", "codex"):
            assert name in result.output

    def test_filter_marks_disabled(self, runner):
        with patch("shutil.which", return_value="/usr/bin/x"):
            result = runner.invoke(app, ["backends", "--backends", "claude"])

        assert result.exit_code == 0
        assert "no" in result.output
