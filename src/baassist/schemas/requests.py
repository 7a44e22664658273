"""Schemas for incoming generation requests."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskKind(str, Enum):
    """Kinds of LLM-backed generation the assistant performs."""

    DOCUMENT_SET = "DocumentSet"
    RESEARCH = "Research"
    TASK_BREAKDOWN = "TaskBreakdown"
    TASK_ASSIGNMENT = "TaskAssignment"

    @property
    def route(self) -> str:
        """HTTP route slug serving this task kind."""
        return _ROUTES[self]

    @classmethod
    def from_route(cls, route: str) -> "TaskKind":
        """Resolve a task kind from its route slug or its enum value."""
        for kind, slug in _ROUTES.items():
            if route in (slug, kind.value):
                return kind
        raise ValueError(
            f"Unknown task kind: {route}. "
            f"Supported: {', '.join(k.value for k in cls)}"
        )


_ROUTES = {
    TaskKind.DOCUMENT_SET: "generate-documents",
    TaskKind.RESEARCH: "conduct-research",
    TaskKind.TASK_BREAKDOWN: "breakdown-tasks",
    TaskKind.TASK_ASSIGNMENT: "assign-tasks",
}


class GenerationRequest(BaseModel):
    """One external call: a task kind plus its named text inputs."""

    model_config = ConfigDict(frozen=True)

    task_kind: TaskKind
    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="Named inputs referenced by the task's prompt template",
    )

