"""
CLI Invoker: runs one backend CLI per call and returns a uniform result.

Every outcome, including spawn failures and timeouts, comes back as an
InvocationResult. Nothing is raised to the caller.
"""

import logging
import time
from typing import List, Optional

from coding_agent_hub.cli_agents.backends import BackendDescriptor
from coding_agent_hub.cli_agents.environment import EnvironmentBuilder
from coding_agent_hub.cli_agents.executor import CLIExecutor, CLIResult
from coding_agent_hub.cli_agents.output_extractor import extract_message_content
from coding_agent_hub.cli_plugins import get_cli_plugin
from coding_agent_hub.types import FailureKind, InvocationRequest, InvocationResult

logger = logging.getLogger(__name__)


def build_args(backend: BackendDescriptor, request: InvocationRequest) -> List[str]:
    """Build CLI arguments based on the backend's strategy and the request."""
    model = request.model or backend.default_model
    plugin = get_cli_plugin(backend.arg_builder)
    return plugin.build_args(request.prompt, model, request.working_dir)


class CLIInvoker:
    """Composes argument building, environment, execution, and extraction."""

    def __init__(
        self,
        executor: Optional[CLIExecutor] = None,
        environment_builder: Optional[EnvironmentBuilder] = None,
    ):
        self._executor = executor or CLIExecutor()
        self._environment_builder = environment_builder or EnvironmentBuilder()

    async def invoke(
        self, backend: BackendDescriptor, request: InvocationRequest
    ) -> InvocationResult:
        """
        Invoke a CLI backend and return the result.

        Args:
            backend: Descriptor of the backend to run
            request: Prompt plus optional model/working_dir/timeout overrides

        Returns:
            InvocationResult; success requires extracted content and exit code 0
        """
        start = time.monotonic()
        model = request.model or backend.default_model
        timeout_ms = request.timeout_ms or backend.timeout_ms

        def elapsed_ms() -> int:
            return int((time.monotonic() - start) * 1000)

        def failure(
            kind: FailureKind,
            error: str,
            exit_code: Optional[int] = None,
            content: str = "",
            truncated: bool = False,
        ) -> InvocationResult:
            return InvocationResult(
                content=content,
                success=False,
                exit_code=exit_code,
                duration_ms=elapsed_ms(),
                backend=backend.name,
                model=model,
                error=error,
                failure=kind,
                truncated=truncated,
            )

        args = build_args(backend, request)
        env = self._environment_builder.build_env(backend)

        logger.info(
            f"[INVOKE] {backend.name}: model={model}, timeout={timeout_ms}ms, "
            f"cwd={request.working_dir or '.'}"
        )

        try:
            result: CLIResult = await self._executor.execute(
                command=[backend.command, *args],
                env=env,
                timeout_ms=timeout_ms,
                cwd=request.working_dir or None,
            )
        except Exception as e:
            # The executor already maps process errors; this is the last guard
            logger.error(f"[INVOKE] {backend.name}: unexpected error: {e}")
            return failure(FailureKind.RUNTIME_ERROR, str(e))

        if result.spawn_error is not None:
            return failure(
                FailureKind.SPAWN_FAILURE,
                f"Failed to spawn {backend.command}: {result.spawn_error}",
            )

        if result.timed_out:
            return failure(
                FailureKind.TIMEOUT,
                f"Timeout after {timeout_ms}ms",
                truncated=result.truncated,
            )

        if result.error is not None:
            return failure(
                FailureKind.RUNTIME_ERROR,
                result.error,
                exit_code=result.return_code,
                truncated=result.truncated,
            )

        exit_code = result.return_code
        extracted = extract_message_content(result.stdout, exit_code)

        if extracted is not None and exit_code == 0:
            logger.info(
                f"[INVOKE] {backend.name}: ok in {elapsed_ms()}ms "
                f"({extracted.output_format})"
            )
            return InvocationResult(
                content=extracted.content,
                success=True,
                exit_code=exit_code,
                duration_ms=elapsed_ms(),
                backend=backend.name,
                model=model,
                output_format=extracted.output_format,
                truncated=result.truncated,
            )

        content = (
            (extracted.content if extracted else "") or result.stdout or result.stderr
        )
        if exit_code != 0:
            kind = FailureKind.NON_ZERO_EXIT
            error = f"Process exited with code {exit_code}"
        else:
            kind = FailureKind.EXTRACTION_FAILURE
            error = "Failed to extract response content"

        logger.warning(f"[INVOKE] {backend.name}: {error}")
        invocation = failure(
            kind,
            error,
            exit_code=exit_code,
            content=content,
            truncated=result.truncated,
        )
        if extracted is not None:
            invocation.output_format = extracted.output_format
        return invocation


async def invoke_cli(
    backend: BackendDescriptor,
    request: InvocationRequest,
    executor: Optional[CLIExecutor] = None,
) -> InvocationResult:
    """Invoke a backend with a default-configured invoker."""
    return await CLIInvoker(executor=executor).invoke(backend, request)
