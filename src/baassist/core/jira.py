"""Simulated Jira issue creation from assigned tasks.

No Jira API is called: ticket identifiers and status are derived from the
inputs, so repeated calls differ only in the ``created`` timestamp.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from baassist.core.errors import MissingInputError
from baassist.core.logging import get_logger
from baassist.schemas.documents import JiraTicket

INITIAL_STATUS = "To Do"

logger = get_logger("baassist.jira")


def ticket_id(project_key: str, task_id: Any) -> str:
    """Return the synthetic issue key ``{projectKey}-{taskId}``."""
    return f"{project_key}-{task_id}"


def create_jira_tickets(
    assigned_tasks: Optional[Iterable[dict]],
    project_key: Optional[str],
    now: Optional[datetime] = None,
) -> list[JiraTicket]:
    """
    Derive one ticket per assigned task.

    Args:
        assigned_tasks: Tasks carrying at least ``id`` and ``name``
        project_key: Jira project key, e.g. "PROJ"
        now: Creation time (defaults to the current UTC time)

    Returns:
        Tickets in task order

    Raises:
        MissingInputError: If the project key, the task list or a task's
            ``id`` / ``name`` is missing
    """
    if not project_key or not str(project_key).strip():
        raise MissingInputError("projectKey")
    if assigned_tasks is None:
        raise MissingInputError("assignedTasks")

    created = (now or datetime.now(timezone.utc)).isoformat()
    tickets = []
    for index, task in enumerate(assigned_tasks):
        for field in ("id", "name"):
            if task.get(field) in (None, ""):
                raise MissingInputError(f"assignedTasks[{index}].{field}")
        tickets.append(
            JiraTicket(
                id=ticket_id(project_key, task["id"]),
                summary=str(task["name"]),
                description=task.get("description"),
                assignee=task.get("assignedTo"),
                estimatedHours=task.get("estimatedHours"),
                status=INITIAL_STATUS,
                created=created,
            )
        )
    logger.info(
        f"Created {len(tickets)} simulated Jira tickets",
        context={"project_key": project_key, "ticket_count": len(tickets)},
    )
    return tickets
