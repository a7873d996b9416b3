"""Prompt text for workflow generation."""

from __future__ import annotations

from workflow_agent.generation.context import build_few_shot_block, format_workflow_snapshot
from workflow_agent.types import ArtifactSnapshot, RetrievedExample

SYSTEM_INSTRUCTION = """
You are an assistant that converts natural language automation requests into n8n workflow JSON.

Rules:
1) Always respond with a single JSON object matching this TypeScript type:
   type WorkflowSuggestion = {
     summary: string;
     workflow: object; // valid n8n workflow JSON with "name", "nodes" and "connections"
     notes?: string[];
     actions?: {
       type: "replace_artifact" | "add_node" | "remove_node" | "update_node" | "reconnect_nodes" | "custom";
       summary: string;
       targetNode?: string;
       details?: object;
       metadata?: object;
     }[];
   };
2) Do not wrap the JSON in markdown fences.
3) Ground node types and parameter shapes in the reference workflows when they are provided.
4) For IF nodes use the current conditions format (options, combinator, conditions list).
5) When an existing workflow is provided, describe each change as an action and return the
   complete updated workflow.

Keep the response short but accurate.
""".strip()


def build_user_prompt(
    request: str,
    *,
    examples: list[RetrievedExample] | None = None,
    existing_workflow: ArtifactSnapshot | None = None,
) -> str:
    """Assemble the request, optional workflow snapshot and reference examples."""

    sections = [f'Produce an n8n workflow for the following request:\n"""{request}"""']

    if existing_workflow is not None:
        sections.append(
            "The user is editing this existing workflow. Update it instead of starting over:\n"
            + format_workflow_snapshot(existing_workflow)
        )

    few_shot = build_few_shot_block(examples or [])
    if few_shot:
        sections.append(
            "Reference workflows similar to the request (adapt, do not copy blindly):\n\n"
            + few_shot
        )

    return "\n\n".join(sections)
