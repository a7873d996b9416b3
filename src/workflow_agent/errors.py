"""Exception hierarchy for the generation pipeline."""

from __future__ import annotations


class WorkflowAgentError(Exception):
    """Base class for errors raised by this package."""


class ModelNotConfiguredError(WorkflowAgentError):
    """Raised before any work when no generative model is available."""


class ModelInvocationError(WorkflowAgentError):
    """Terminal failure of one model after its retry budget was spent or skipped.

    `retryable` records whether the last error carried an overload signal, so a
    caller can tell an exhausted model from one that rejected the request.
    """

    def __init__(self, model: str, attempts: int, cause: BaseException, *, retryable: bool) -> None:
        self.model = model
        self.attempts = attempts
        self.cause = cause
        self.retryable = retryable
        reason = "retries exhausted" if retryable else "non-retryable error"
        super().__init__(f"Model {model} failed after {attempts} attempt(s) ({reason}): {cause}")
