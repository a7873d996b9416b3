"""Shared domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

ActionType = Literal[
    "replace_artifact",
    "add_node",
    "remove_node",
    "update_node",
    "reconnect_nodes",
    "custom",
]

ACTION_TYPES: tuple[str, ...] = (
    "replace_artifact",
    "add_node",
    "remove_node",
    "update_node",
    "reconnect_nodes",
    "custom",
)


@dataclass(slots=True)
class InferredMetadata:
    """Categorical tags derived from free text by keyword matching."""

    industries: set[str] = field(default_factory=set)
    domains: set[str] = field(default_factory=set)
    channels: set[str] = field(default_factory=set)
    trigger: str | None = None

    def is_empty(self) -> bool:
        return not (self.industries or self.domains or self.channels or self.trigger)

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe form stored alongside indexed examples."""
        payload: dict[str, Any] = {
            "industries": sorted(self.industries),
            "domains": sorted(self.domains),
            "channels": sorted(self.channels),
        }
        if self.trigger:
            payload["trigger"] = self.trigger
        return payload

    @classmethod
    def from_payload(cls, payload: Any) -> "InferredMetadata | None":
        if not isinstance(payload, Mapping):
            return None
        trigger = payload.get("trigger")
        return cls(
            industries=_string_set(payload.get("industries")),
            domains=_string_set(payload.get("domains")),
            channels=_string_set(payload.get("channels")),
            trigger=trigger if isinstance(trigger, str) and trigger else None,
        )


@dataclass(slots=True)
class RetrievedExample:
    """A reference workflow returned by similarity search."""

    title: str
    summary: str
    tags: list[str] = field(default_factory=list)
    metadata: InferredMetadata | None = None
    graph: dict[str, Any] | None = None


@dataclass(slots=True)
class NodeSnapshot:
    id: str | None = None
    name: str | None = None
    type: str | None = None
    position: Any = None
    parameters: dict[str, Any] | None = None
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "NodeSnapshot":
        if not isinstance(payload, Mapping):
            return cls()
        parameters = payload.get("parameters")
        return cls(
            id=_optional_str(payload.get("id")),
            name=_optional_str(payload.get("name")),
            type=_optional_str(payload.get("type")),
            position=payload.get("position"),
            parameters=dict(parameters) if isinstance(parameters, Mapping) else None,
            notes=_optional_str(payload.get("notes")),
        )


@dataclass(slots=True)
class ArtifactSnapshot:
    """Read-only view of a workflow that is being edited."""

    nodes: list[NodeSnapshot] = field(default_factory=list)
    connections: Any = None
    id: str | None = None
    name: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ArtifactSnapshot":
        if not isinstance(payload, Mapping):
            return cls()
        nodes = payload.get("nodes")
        return cls(
            nodes=[NodeSnapshot.from_payload(node) for node in nodes] if isinstance(nodes, list) else [],
            connections=payload.get("connections"),
            id=_optional_str(payload.get("id")),
            name=_optional_str(payload.get("name")),
        )


@dataclass(slots=True)
class GenerationRequest:
    prompt: str
    existing_workflow: ArtifactSnapshot | None = None


@dataclass(slots=True)
class Action:
    """A discrete change the model proposes for the workflow."""

    type: ActionType
    summary: str
    target_node: str | None = None
    details: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, "summary": self.summary}
        if self.target_node is not None:
            payload["targetNode"] = self.target_node
        if self.details is not None:
            payload["details"] = self.details
        if self.metadata is not None:
            payload["metadata"] = self.metadata
        return payload


@dataclass(slots=True)
class GenerationResult:
    """Terminal output of one generation request."""

    summary: str
    workflow: Any
    raw_text: str
    notes: list[str] | None = None
    actions: list[Action] = field(default_factory=list)
    degraded: bool = False
    trace_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the editor expects."""
        payload: dict[str, Any] = {
            "summary": self.summary,
            "workflow": self.workflow,
            "actions": [action.to_payload() for action in self.actions],
            "rawText": self.raw_text,
        }
        if self.notes is not None:
            payload["notes"] = self.notes
        if self.trace_id is not None:
            payload["traceId"] = self.trace_id
        return payload


@dataclass(slots=True)
class ModelAttempt:
    """Trace record for a single model call."""

    model: str
    attempt: int
    error: str | None = None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _string_set(value: Any) -> set[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return set()
    return {item for item in value if isinstance(item, str) and item}
