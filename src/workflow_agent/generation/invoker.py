"""Model invocation with per-model retry and a cross-model fallback chain."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from workflow_agent.config import ModelConfig
from workflow_agent.errors import ModelInvocationError
from workflow_agent.generation.models import GeneratorFactory, ModelGenerator
from workflow_agent.generation.prompts import SYSTEM_INSTRUCTION
from workflow_agent.types import ModelAttempt

logger = logging.getLogger(__name__)

OVERLOAD_STATUS_CODES = frozenset({429, 503})
OVERLOAD_MESSAGE_MARKERS = (
    "overloaded",
    "service unavailable",
    "resource exhausted",
    "rate limit",
)

AttemptObserver = Callable[[ModelAttempt], None]
Sleep = Callable[[float], Awaitable[None]]


def is_overload_error(exc: BaseException) -> bool:
    """Whether `exc` signals a transient overload worth retrying."""

    for status in (
        getattr(exc, "status_code", None),
        getattr(exc, "status", None),
        getattr(exc, "code", None),
        getattr(getattr(exc, "response", None), "status_code", None),
    ):
        if isinstance(status, int) and status in OVERLOAD_STATUS_CODES:
            return True

    message = str(exc).lower()
    return any(marker in message for marker in OVERLOAD_MESSAGE_MARKERS)


class ModelInvoker:
    """Calls generative models with bounded backoff and ordered fallbacks.

    Each model in the chain gets the full retry budget of `config.max_retries`
    attempts; only overload errors are retried, with a delay of
    `retry_base_delay_seconds * 2 ** (attempt - 1)` between attempts. Any other
    error ends that model's stage at once. The chain itself is never retried.
    """

    def __init__(
        self,
        generator_factory: GeneratorFactory,
        config: ModelConfig | None = None,
        *,
        system_instruction: str = SYSTEM_INSTRUCTION,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.generator_factory = generator_factory
        self.config = config or ModelConfig()
        self.system_instruction = system_instruction
        self._sleep = sleep
        self._generators: dict[str, ModelGenerator] = {}

    async def invoke(
        self,
        prompt: str,
        *,
        model: str | None = None,
        observer: AttemptObserver | None = None,
    ) -> str:
        """Run one model with retries and return its raw text."""

        model_id = model or self.config.primary_model
        try:
            generator = self._generator(model_id)
        except Exception as exc:
            if observer is not None:
                observer(ModelAttempt(model=model_id, attempt=0, error=str(exc)))
            raise ModelInvocationError(model_id, 0, exc, retryable=False) from exc
        max_attempts = self.config.max_retries

        for attempt in range(1, max_attempts + 1):
            try:
                response = await generator.generate(self.system_instruction, prompt)
            except Exception as exc:
                if observer is not None:
                    observer(ModelAttempt(model=model_id, attempt=attempt, error=str(exc)))
                retryable = is_overload_error(exc)
                if not retryable or attempt == max_attempts:
                    raise ModelInvocationError(
                        model_id, attempt, exc, retryable=retryable
                    ) from exc

                delay = self.config.retry_base_delay_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Model %s overloaded (attempt %d/%d), retrying in %.2fs",
                    model_id,
                    attempt,
                    max_attempts,
                    delay,
                )
                await self._sleep(delay)
                continue

            if observer is not None:
                observer(ModelAttempt(model=model_id, attempt=attempt))
            return response.text

        raise AssertionError("unreachable: max_retries is at least 1")

    async def invoke_with_fallback(
        self, prompt: str, *, observer: AttemptObserver | None = None
    ) -> str:
        """Try primary, fallback and secondary fallback models in order."""

        last_error: ModelInvocationError | None = None
        for model_id in self.config.model_chain():
            try:
                text = await self.invoke(prompt, model=model_id, observer=observer)
            except ModelInvocationError as exc:
                logger.warning("Model %s failed, trying next fallback: %s", model_id, exc)
                last_error = exc
                continue
            logger.info("Workflow generated with model %s", model_id)
            return text

        if last_error is None:
            raise ModelInvocationError(
                self.config.primary_model,
                0,
                RuntimeError("no models configured"),
                retryable=False,
            )
        raise last_error

    def _generator(self, model_id: str) -> ModelGenerator:
        generator = self._generators.get(model_id)
        if generator is None:
            generator = self.generator_factory(model_id)
            self._generators[model_id] = generator
        return generator
