"""Shared data types for backend invocations."""

from coding_agent_hub.types.invocation import (
    FailureKind,
    InvocationRequest,
    InvocationResult,
)

__all__ = ["FailureKind", "InvocationRequest", "InvocationResult"]
