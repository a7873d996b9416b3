"""FastAPI entrypoint for workflow generation, prompt catalog and traces."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from workflow_agent.config import Settings
from workflow_agent.errors import ModelInvocationError, ModelNotConfiguredError
from workflow_agent.generation.pipeline import WorkflowGenerator, build_workflow_generator
from workflow_agent.ingest.samples import get_prompt_examples
from workflow_agent.obs.logging_config import configure_logging
from workflow_agent.obs.tracing import TraceStore
from workflow_agent.types import ArtifactSnapshot, GenerationRequest

load_dotenv()
configure_logging()
logger = logging.getLogger(__name__)


class WorkflowRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = ""
    existing_workflow: dict[str, Any] | None = Field(default=None, alias="existingWorkflow")


_settings = Settings.from_env()
_trace_store = TraceStore()
_generator = build_workflow_generator(_settings, trace_store=_trace_store)

app = FastAPI(title="Workflow Agent", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_generator() -> WorkflowGenerator:
    return _generator


@app.get("/health")
def health(generator: WorkflowGenerator = Depends(get_generator)) -> dict[str, Any]:
    return {
        "status": "ok",
        "llm_configured": generator.configured,
        "models": _settings.models.model_chain(),
        "trace_count": len(generator.trace_store.list_recent(limit=1000)),
    }


@app.post("/ai/workflow")
async def generate_workflow(
    request: WorkflowRequest,
    generator: WorkflowGenerator = Depends(get_generator),
) -> dict[str, Any]:
    prompt = request.prompt.strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required.")

    snapshot = (
        ArtifactSnapshot.from_payload(request.existing_workflow)
        if request.existing_workflow
        else None
    )
    try:
        result = await generator.generate(GenerationRequest(prompt=prompt, existing_workflow=snapshot))
    except ModelNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ModelInvocationError as exc:
        logger.error("Workflow generation failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"ok": True, "suggestion": result.to_payload()}


@app.get("/ai/prompts")
def prompts(limit: int = 10) -> dict[str, Any]:
    items = [asdict(example) for example in get_prompt_examples(limit)]
    return {"prompts": items, "count": len(items)}


@app.get("/traces")
def traces(limit: int = 20, generator: WorkflowGenerator = Depends(get_generator)) -> dict[str, Any]:
    records = [asdict(record) for record in generator.trace_store.list_recent(limit=limit)]
    return {"items": records}


@app.get("/traces/{trace_id}")
def trace_detail(trace_id: str, generator: WorkflowGenerator = Depends(get_generator)) -> dict[str, Any]:
    try:
        record = generator.trace_store.get(trace_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(record)


@app.get("/metrics")
def metrics(generator: WorkflowGenerator = Depends(get_generator)) -> dict[str, Any]:
    return generator.trace_store.summary()
