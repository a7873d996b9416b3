"""Bounded textual context blocks for the generation prompt."""

from __future__ import annotations

import json
from typing import Any

from workflow_agent.types import ArtifactSnapshot, InferredMetadata, NodeSnapshot, RetrievedExample

SNAPSHOT_NODE_LIMIT = 20
PARAMETER_PREVIEW_CHARS = 400
MISSING = "n/a"


def build_few_shot_block(examples: list[RetrievedExample]) -> str:
    """Render ranked reference workflows; an empty list renders as ""."""

    return "\n\n".join(
        _format_example(index, example) for index, example in enumerate(examples, start=1)
    )


def format_workflow_snapshot(snapshot: ArtifactSnapshot) -> str:
    """Summarize the workflow being edited, listing at most 20 nodes."""

    total = len(snapshot.nodes)
    lines = [
        f"Workflow name: {snapshot.name or 'Untitled workflow'}",
        f"Node count: {total}",
    ]
    if total:
        lines.append("Nodes:")
    for index, node in enumerate(snapshot.nodes[:SNAPSHOT_NODE_LIMIT], start=1):
        lines.append(_format_node(index, node))

    omitted = total - SNAPSHOT_NODE_LIMIT
    if omitted > 0:
        lines.append(f"... {omitted} more node(s) omitted from this preview.")
    return "\n".join(lines)


def _format_example(index: int, example: RetrievedExample) -> str:
    return "\n".join(
        [
            f"Example {index}: {example.title}",
            f"Tags: {', '.join(example.tags) if example.tags else MISSING}",
            f"Metadata: {_format_metadata(example.metadata)}",
            "Summary:",
            example.summary.strip(),
            "Workflow JSON:",
            _workflow_excerpt(example.graph),
        ]
    )


def _format_metadata(metadata: InferredMetadata | None) -> str:
    if metadata is None:
        metadata = InferredMetadata()
    return "; ".join(
        [
            f"industries={_join(metadata.industries)}",
            f"domains={_join(metadata.domains)}",
            f"channels={_join(metadata.channels)}",
            f"trigger={metadata.trigger or MISSING}",
        ]
    )


def _workflow_excerpt(graph: dict[str, Any] | None) -> str:
    if not graph:
        return "Workflow JSON unavailable."
    excerpt = {
        "name": graph.get("name"),
        "nodes": graph.get("nodes"),
        "connections": graph.get("connections"),
    }
    return json.dumps(excerpt, indent=2, ensure_ascii=False, default=str)


def _format_node(index: int, node: NodeSnapshot) -> str:
    label = node.name or node.id or "unnamed node"
    position = json.dumps(node.position) if node.position is not None else MISSING
    line = f"{index}. {label} | type={node.type or 'unknown'} | position={position}"
    if node.parameters:
        line += f" | parameters={_preview(node.parameters)}"
    if node.notes:
        line += f" | notes={node.notes}"
    return line


def _preview(parameters: dict[str, Any]) -> str:
    serialized = json.dumps(parameters, ensure_ascii=False, default=str)
    if len(serialized) <= PARAMETER_PREVIEW_CHARS:
        return serialized
    return serialized[:PARAMETER_PREVIEW_CHARS] + "..."


def _join(values: set[str]) -> str:
    return ", ".join(sorted(values)) if values else MISSING
