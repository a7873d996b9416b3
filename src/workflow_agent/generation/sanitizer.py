"""Upgrades legacy node parameter shapes in generated workflows."""

from __future__ import annotations

import random
import string
import uuid
from collections.abc import Mapping
from typing import Any

IF_NODE_TYPE = "n8n-nodes-base.if"

IF_CONDITION_OPTIONS = {
    "caseSensitive": True,
    "leftValue": "",
    "typeValidation": "strict",
    "version": 2,
}

BOOLEAN_TRUE_OPERATOR = {
    "type": "boolean",
    "operation": "true",
    "singleValue": True,
}


def sanitize(workflow: Any) -> Any:
    """Return a shallow copy of `workflow` with legacy IF conditions rewritten.

    The input is never mutated: the workflow, its node list, and every node are
    copied. Values that are not mappings are returned as given.
    """

    if not isinstance(workflow, Mapping):
        return workflow

    copy = dict(workflow)
    nodes = copy.get("nodes")
    if isinstance(nodes, list):
        copy["nodes"] = [_sanitize_node(node) for node in nodes]
    return copy


def make_condition_id() -> str:
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # os.urandom has no entropy source on this platform.
        alphabet = string.ascii_lowercase + string.digits
        return "cond-" + "".join(random.choices(alphabet, k=8))


def _sanitize_node(node: Any) -> Any:
    if not isinstance(node, Mapping):
        return node

    copy = dict(node)
    parameters = copy.get("parameters")
    if copy.get("type") != IF_NODE_TYPE or not isinstance(parameters, Mapping):
        return copy

    conditions = parameters.get("conditions")
    if not isinstance(conditions, Mapping) or not isinstance(conditions.get("value"), list):
        return copy

    upgraded = _upgrade_conditions(conditions["value"])
    new_parameters = dict(parameters)
    if upgraded is None:
        new_parameters.pop("conditions", None)
    else:
        new_parameters["conditions"] = upgraded
    copy["parameters"] = new_parameters
    return copy


def _upgrade_conditions(entries: list[Any]) -> dict[str, Any] | None:
    conditions: list[dict[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        expression = entry.get("value")
        if not isinstance(expression, str) or not expression:
            continue
        entry_id = entry.get("id")
        conditions.append(
            {
                "id": entry_id if isinstance(entry_id, str) and entry_id else make_condition_id(),
                "leftValue": expression,
                "rightValue": "",
                "operator": dict(BOOLEAN_TRUE_OPERATOR),
            }
        )

    if not conditions:
        return None
    return {
        "options": dict(IF_CONDITION_OPTIONS),
        "combinator": "and",
        "conditions": conditions,
    }
