"""End-to-end generation: retrieve -> assemble -> invoke -> parse -> sanitize."""

from __future__ import annotations

from typing import Any

from workflow_agent.config import Settings
from workflow_agent.errors import ModelNotConfiguredError
from workflow_agent.generation.invoker import ModelInvoker
from workflow_agent.generation.models import openai_generator_factory
from workflow_agent.generation.normalizer import parse
from workflow_agent.generation.prompts import build_user_prompt
from workflow_agent.obs.tracing import Timer, TraceStore, estimate_token_count
from workflow_agent.retrieval.retriever import ExampleRetriever
from workflow_agent.retrieval.vector_store import ExampleSearch, get_example_store
from workflow_agent.types import ArtifactSnapshot, GenerationRequest, GenerationResult, ModelAttempt


class WorkflowGenerator:
    """High-level orchestrator for one generation request.

    Stages run strictly in sequence. Retrieval and output parsing recover
    locally; only a missing model or a fully exhausted model chain reaches the
    caller.
    """

    def __init__(
        self,
        *,
        invoker: ModelInvoker | None,
        retriever: ExampleRetriever | None = None,
        trace_store: TraceStore | None = None,
    ) -> None:
        self.invoker = invoker
        self.retriever = retriever
        self.trace_store = trace_store or TraceStore()

    @property
    def configured(self) -> bool:
        return self.invoker is not None

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        if self.invoker is None:
            raise ModelNotConfiguredError(
                "The generative model is not configured. Set OPENAI_API_KEY to enable this feature."
            )
        prompt = request.prompt.strip()
        if not prompt:
            raise ValueError("Prompt is required.")

        attempts: list[ModelAttempt] = []
        with Timer() as timer:
            examples = await self.retriever.retrieve(prompt) if self.retriever else []
            user_prompt = build_user_prompt(
                prompt,
                examples=examples,
                existing_workflow=request.existing_workflow,
            )
            raw_text = await self.invoker.invoke_with_fallback(user_prompt, observer=attempts.append)
            result = parse(raw_text)

        record = self.trace_store.create_record(
            prompt=prompt,
            summary=result.summary,
            example_titles=[example.title for example in examples],
            model_attempts=attempts,
            input_tokens=estimate_token_count(user_prompt),
            output_tokens=estimate_token_count(raw_text),
            latency_ms=timer.elapsed_ms,
            degraded=result.degraded,
        )
        result.trace_id = record.trace_id
        return result


def build_workflow_generator(
    settings: Settings, *, trace_store: TraceStore | None = None
) -> WorkflowGenerator:
    """Wire the default OpenAI models and Qdrant examples from `settings`."""

    factory = openai_generator_factory(settings.models)
    invoker = ModelInvoker(factory, settings.models) if factory is not None else None

    async def _store_factory() -> ExampleSearch:
        return await get_example_store(settings)

    return WorkflowGenerator(
        invoker=invoker,
        retriever=ExampleRetriever(_store_factory, settings.retrieval),
        trace_store=trace_store,
    )


_default_generator: WorkflowGenerator | None = None


async def generate_workflow_suggestion(
    prompt: str,
    existing_workflow: Any = None,
    *,
    generator: WorkflowGenerator | None = None,
) -> GenerationResult:
    """Library entry point: generate a workflow for `prompt`.

    `existing_workflow` is the opaque JSON of a workflow being edited.
    """

    global _default_generator
    if generator is None:
        if _default_generator is None:
            _default_generator = build_workflow_generator(Settings.from_env())
        generator = _default_generator

    snapshot = ArtifactSnapshot.from_payload(existing_workflow) if existing_workflow else None
    return await generator.generate(GenerationRequest(prompt=prompt, existing_workflow=snapshot))
