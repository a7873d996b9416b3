"""Turns raw model text into a validated `GenerationResult`."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, cast

from workflow_agent.generation.sanitizer import sanitize
from workflow_agent.types import ACTION_TYPES, Action, ActionType, GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Suggested workflow"
UNPARSED_SUMMARY = "AI response (unparsed)"
UNPARSED_NOTE = "Unable to parse the model response. Please review the rawText payload."

_FENCE_PATTERN = re.compile(r"```(?:[a-zA-Z0-9_-]+)?\s*\n?(.*?)```", flags=re.DOTALL)


def extract_json_payload(raw_text: str) -> str:
    """Pick the most likely JSON document out of free-form model text.

    Preference order: the first fenced code block, then the span from the first
    `{` to the last `}`, then the trimmed text itself.
    """

    fenced = _FENCE_PATTERN.search(raw_text)
    if fenced:
        return fenced.group(1).strip()

    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start != -1 and end > start:
        return raw_text[start : end + 1]
    return raw_text.strip()


def parse(raw_text: str) -> GenerationResult:
    """Parse model output; malformed output degrades instead of raising."""

    try:
        payload = json.loads(extract_json_payload(raw_text))
    except (ValueError, RecursionError):
        payload = None

    if not isinstance(payload, Mapping):
        logger.warning("Model output was not a JSON object; returning degraded result")
        return GenerationResult(
            summary=UNPARSED_SUMMARY,
            workflow={},
            raw_text=raw_text,
            notes=[UNPARSED_NOTE],
            actions=[],
            degraded=True,
        )

    summary = payload.get("summary")
    workflow = payload.get("workflow")
    return GenerationResult(
        summary=summary if isinstance(summary, str) and summary.strip() else DEFAULT_SUMMARY,
        workflow=sanitize(workflow) if workflow is not None else {},
        raw_text=raw_text,
        notes=_normalize_notes(payload.get("notes")),
        actions=normalize_actions(payload.get("actions")),
    )


def normalize_actions(raw: Any) -> list[Action]:
    """Keep well-formed actions; entries with a blank summary are dropped silently.

    Surviving summaries are copied through as written.
    """

    if not isinstance(raw, list):
        return []

    actions: list[Action] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        summary = item.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            continue

        action_type = item.get("type")
        target_node = item.get("targetNode")
        details = item.get("details")
        metadata = item.get("metadata")
        actions.append(
            Action(
                type=cast(ActionType, action_type if action_type in ACTION_TYPES else "custom"),
                summary=summary,
                target_node=target_node if isinstance(target_node, str) else None,
                details=dict(details) if isinstance(details, Mapping) else None,
                metadata=dict(metadata) if isinstance(metadata, Mapping) else None,
            )
        )
    return actions


def _normalize_notes(raw: Any) -> list[str] | None:
    if not isinstance(raw, list):
        return None
    return [note for note in raw if isinstance(note, str) and note.strip()]
