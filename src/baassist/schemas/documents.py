"""Schemas for pipeline outputs returned to callers."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from baassist.schemas.requests import TaskKind


class ValidatedDocument(BaseModel):
    """A completion that passed both JSON parsing and shape validation."""

    model_config = ConfigDict(frozen=True)

    task_kind: TaskKind
    data: Any = Field(description="Parsed JSON payload (object or list)")


class ErrorResponse(BaseModel):
    """JSON error body returned at the route boundary."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    details: Optional[str] = None
    raw_response: Optional[str] = Field(default=None, alias="rawResponse")
    status_code: int = Field(default=500, exclude=True)

    def to_body(self) -> dict[str, Any]:
        """Render the wire body, omitting empty diagnostic fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class JiraTicket(BaseModel):
    """A simulated Jira issue derived from an assigned task."""

    id: str
    summary: str
    description: Any = None
    assignee: Any = None
    estimatedHours: Any = None
    status: str = "To Do"
    created: str
