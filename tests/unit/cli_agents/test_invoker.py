"""
Unit Tests: CLIInvoker outcome mapping.

Executor outcomes are mocked to pin down the mapping to InvocationResult;
a couple of tests run a real script through the whole path.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from coding_agent_hub.cli_agents.backends import get_default_backend
from coding_agent_hub.cli_agents.executor import CLIExecutor, CLIResult
from coding_agent_hub.cli_agents.invoker import CLIInvoker, invoke_cli
from coding_agent_hub.cli_plugins import ArgStrategy
from coding_agent_hub.types import FailureKind, InvocationRequest


def _executor(result=None, side_effect=None):
    executor = MagicMock(spec=CLIExecutor)
    executor.execute = AsyncMock(return_value=result, side_effect=side_effect)
    return executor


class TestOutcomeMapping:
    """Each executor outcome maps to one result shape."""

    @pytest.mark.asyncio
    async def test_success(self):
        executor = _executor(
            CLIResult(
                stdout=json.dumps({"response": "Here is the fix for it."}),
                stderr="",
                return_code=0,
            )
        )
        backend = get_default_backend("gemini")

        result = await CLIInvoker(executor=executor).invoke(
            backend, InvocationRequest(prompt="Fix it")
        )

        assert result.success
        assert result.content == "Here is the fix for it."
        assert result.exit_code == 0
        assert result.backend == "gemini"
        assert result.model == "gemini-2.5-pro"
        assert result.output_format == "gemini"
        assert result.error is None
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_request_overrides_reach_executor(self):
        executor = _executor(CLIResult(stdout="plain text answer", stderr="", return_code=0))
        backend = get_default_backend("codex")

        result = await CLIInvoker(executor=executor).invoke(
            backend,
            InvocationRequest(
                prompt="Go", model="o4-mini", working_dir="/repo", timeout_ms=500
            ),
        )

        kwargs = executor.execute.await_args.kwargs
        assert kwargs["command"] == [
            "codex", "exec", "Go", "--json", "--model", "o4-mini", "--full-auto", "--cd", "/repo"
        ]
        assert kwargs["timeout_ms"] == 500
        assert kwargs["cwd"] == "/repo"
        assert result.model == "o4-mini"

    @pytest.mark.asyncio
    async def test_backend_timeout_used_by_default(self):
        executor = _executor(CLIResult(stdout="plain text answer", stderr="", return_code=0))

        await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert executor.execute.await_args.kwargs["timeout_ms"] == 120_000

    @pytest.mark.asyncio
    async def test_spawn_failure(self):
        executor = _executor(
            CLIResult(stdout="", stderr="", return_code=None, spawn_error="No such file")
        )

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert not result.success
        assert result.failure is FailureKind.SPAWN_FAILURE
        assert result.error == "Failed to spawn claude: No such file"
        assert result.exit_code is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        executor = _executor(
            CLIResult(stdout="", stderr="", return_code=-9, timed_out=True)
        )

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go", timeout_ms=250)
        )

        assert not result.success
        assert result.failure is FailureKind.TIMEOUT
        assert result.error == "Timeout after 250ms"
        assert result.content == ""
        assert result.exit_code is None

    @pytest.mark.asyncio
    async def test_non_zero_exit_keeps_output(self):
        executor = _executor(
            CLIResult(stdout="", stderr="auth failed: missing key", return_code=2)
        )

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert not result.success
        assert result.failure is FailureKind.NON_ZERO_EXIT
        assert result.error == "Process exited with code 2"
        assert result.exit_code == 2
        assert result.content == "auth failed: missing key"

    @pytest.mark.asyncio
    async def test_non_zero_exit_with_extractable_content(self):
        executor = _executor(
            CLIResult(stdout='{"result": "partial answer text"}', stderr="", return_code=1)
        )

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert not result.success
        assert result.content == "partial answer text"
        assert result.output_format == "claude"

    @pytest.mark.asyncio
    async def test_extraction_failure(self):
        executor = _executor(CLIResult(stdout="ok", stderr="", return_code=0))

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert not result.success
        assert result.failure is FailureKind.EXTRACTION_FAILURE
        assert result.error == "Failed to extract response content"
        assert result.exit_code == 0
        assert result.content == "ok"

    @pytest.mark.asyncio
    async def test_runtime_error(self):
        executor = _executor(
            CLIResult(stdout="", stderr="", return_code=-9, error="pipe broke")
        )

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert not result.success
        assert result.failure is FailureKind.RUNTIME_ERROR
        assert result.error == "pipe broke"

    @pytest.mark.asyncio
    async def test_unexpected_executor_exception_is_not_raised(self):
        executor = _executor(side_effect=RuntimeError("boom"))

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert not result.success
        assert result.failure is FailureKind.RUNTIME_ERROR
        assert result.error == "boom"

    @pytest.mark.asyncio
    async def test_truncation_flag_carried(self):
        executor = _executor(
            CLIResult(stdout="x" * 64, stderr="", return_code=0, truncated=True)
        )

        result = await CLIInvoker(executor=executor).invoke(
            get_default_backend("claude"), InvocationRequest(prompt="Go")
        )

        assert result.success
        assert result.truncated


class TestRealProcess:
    """Whole path through a real subprocess."""

    @pytest.mark.asyncio
    async def test_generic_backend_echoes_prompt(self, python_script, generic_backend):
        script = python_script(
            "import sys, json\nprint(json.dumps({'content': 'echo: ' + sys.argv[1]}))\n"
        )
        backend = generic_backend(command=script, arg_builder=ArgStrategy.GENERIC)

        result = await invoke_cli(backend, InvocationRequest(prompt="ping the agent"))

        assert result.success, result.error
        assert result.content == "echo: ping the agent"
        assert result.output_format == "generic"
        assert result.model == "fake-model-1"

    @pytest.mark.asyncio
    async def test_missing_command(self, generic_backend, tmp_path):
        backend = generic_backend(command=str(tmp_path / "nope"))

        result = await invoke_cli(backend, InvocationRequest(prompt="hello"))

        assert result.failure is FailureKind.SPAWN_FAILURE
        assert result.error.startswith(f"Failed to spawn {tmp_path / 'nope'}:")

    @pytest.mark.asyncio
    async def test_nul_byte_in_prompt_is_spawn_failure(self, python_script, generic_backend):
        script = python_script("print('never runs')\n")
        backend = generic_backend(command=script, arg_builder=ArgStrategy.GENERIC)

        result = await invoke_cli(backend, InvocationRequest(prompt="a\x00b"))

        assert result.failure is FailureKind.SPAWN_FAILURE
        assert result.error.startswith(f"Failed to spawn {script}:")

    @pytest.mark.asyncio
    async def test_empty_working_dir_uses_current_directory(
        self, python_script, generic_backend
    ):
        script = python_script("import json\nprint(json.dumps({'content': 'ran in cwd fine'}))\n")
        backend = generic_backend(command=script, arg_builder=ArgStrategy.GENERIC)

        result = await invoke_cli(backend, InvocationRequest(prompt="hi", working_dir=""))

        assert result.success, result.error
        assert result.content == "ran in cwd fine"

    @pytest.mark.asyncio
    async def test_timeout(self, make_script, generic_backend):
        script = make_script("#!/bin/sh\nexec sleep 30\n")
        backend = generic_backend(command=script)

        result = await invoke_cli(backend, InvocationRequest(prompt="hi", timeout_ms=200))

        assert result.failure is FailureKind.TIMEOUT
        assert result.error == "Timeout after 200ms"
        assert result.duration_ms < 10_000
