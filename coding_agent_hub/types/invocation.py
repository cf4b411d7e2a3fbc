"""Request and result types for a single backend CLI invocation."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Why an invocation did not succeed."""

    SPAWN_FAILURE = "spawn_failure"
    TIMEOUT = "timeout"
    NON_ZERO_EXIT = "non_zero_exit"
    EXTRACTION_FAILURE = "extraction_failure"
    RUNTIME_ERROR = "runtime_error"


@dataclass(frozen=True)
class InvocationRequest:
    """Input to a backend invocation."""

    prompt: str
    model: Optional[str] = None
    working_dir: Optional[str] = None
    timeout_ms: Optional[int] = None


@dataclass
class InvocationResult:
    """
    Uniform outcome of a backend invocation.

    Every failure mode is reported through ``success``/``failure``/``error``;
    nothing is raised to the caller.
    """

    content: str
    success: bool
    exit_code: Optional[int]
    duration_ms: int
    backend: str
    model: str
    error: Optional[str] = None
    failure: Optional[FailureKind] = None
    output_format: Optional[str] = None
    truncated: bool = False
