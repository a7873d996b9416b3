"""Curated sample workflows: loading, indexing documents and prompt catalog."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from langchain_core.documents import Document

from workflow_agent.retrieval.classifier import classify


@dataclass(slots=True)
class SampleWorkflow:
    id: str
    title: str
    description: str
    problem: str
    tags: list[str]
    workflow: dict[str, Any]
    complexity: str | None = None
    integrations: list[str] = field(default_factory=list)

    def classification_text(self) -> str:
        return " ".join([self.title, self.description, self.problem, " ".join(self.tags)])


@dataclass(slots=True)
class PromptExample:
    """A ready-made request shown to users as a starting point."""

    id: str
    title: str
    prompt: str
    description: str
    industries: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    trigger: str | None = None
    complexity: str | None = None
    integrations: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


def load_sample_workflows(path: str | Path | None = None) -> list[SampleWorkflow]:
    """Read sample workflows from `path`, or the bundled file when omitted."""

    if path is None:
        raw = resources.files("workflow_agent").joinpath("data/sample_workflows.json").read_text(
            encoding="utf-8"
        )
        source = "bundled sample_workflows.json"
    else:
        raw = Path(path).read_text(encoding="utf-8")
        source = str(path)

    payload = json.loads(raw)
    if not isinstance(payload, list) or not payload:
        raise ValueError(f"No workflows found in {source}")

    samples: list[SampleWorkflow] = []
    for item in payload:
        workflow = item.get("workflow")
        metadata = item.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        complexity = metadata.get("complexity")
        integrations = metadata.get("integrations")
        samples.append(
            SampleWorkflow(
                id=str(item.get("id") or item.get("title") or f"sample-{len(samples)}"),
                title=str(item.get("title") or "Untitled workflow"),
                description=str(item.get("description") or ""),
                problem=str(item.get("problem") or ""),
                tags=[str(tag) for tag in item.get("tags") or []],
                workflow=workflow if isinstance(workflow, dict) else {},
                complexity=str(complexity) if complexity else None,
                integrations=[str(name) for name in integrations] if isinstance(integrations, list) else [],
            )
        )
    return samples


def build_example_document(sample: SampleWorkflow) -> Document:
    """Index document for one sample, tagged with the query-time classifier."""

    nodes = sample.workflow.get("nodes")
    node_count = len(nodes) if isinstance(nodes, list) else 0
    content = "\n".join(
        [
            sample.title,
            "",
            sample.description,
            "",
            f"Problem solved: {sample.problem}",
            "",
            f"Tags: {', '.join(sample.tags)}",
            f"Node count: {node_count}",
        ]
    )
    return Document(
        page_content=content,
        metadata={
            "id": sample.id,
            "title": sample.title,
            "tags": sample.tags,
            "metadata": classify(sample.classification_text()).to_payload(),
            "workflow": sample.workflow,
        },
    )


@lru_cache(maxsize=1)
def _curated_examples() -> tuple[PromptExample, ...]:
    examples: list[PromptExample] = []
    for sample in load_sample_workflows():
        inferred = classify(sample.classification_text())
        prompt = (
            sample.problem
            or sample.description
            or f'Design an n8n workflow similar to "{sample.title}".'
        )
        examples.append(
            PromptExample(
                id=sample.id,
                title=sample.title,
                prompt=prompt.strip(),
                description=sample.description
                or "No description available. Focus on the prompt for guidance.",
                industries=sorted(inferred.industries),
                domains=sorted(inferred.domains),
                channels=sorted(inferred.channels),
                trigger=inferred.trigger,
                complexity=sample.complexity,
                integrations=list(sample.integrations),
                tags=list(sample.tags),
            )
        )
    return tuple(examples)


def get_prompt_examples(limit: int = 10) -> list[PromptExample]:
    return list(_curated_examples()[: max(0, limit)])
