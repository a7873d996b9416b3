"""Workflow Agent package."""

from .config import ModelConfig, RetrievalConfig, Settings
from .generation.pipeline import WorkflowGenerator, generate_workflow_suggestion

__all__ = [
    "ModelConfig",
    "RetrievalConfig",
    "Settings",
    "WorkflowGenerator",
    "generate_workflow_suggestion",
]
