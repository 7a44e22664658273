"""API views for the business-analyst assistant."""

from typing import Any

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from baassist.core.errors import BAAssistError
from baassist.core.jira import create_jira_tickets
from baassist.core.logging import get_logger
from baassist.schemas.documents import ErrorResponse
from baassist.schemas.requests import TaskKind
from baassist.web.api.serializers import (
    AssignRequestSerializer,
    BreakdownRequestSerializer,
    JiraRequestSerializer,
    JiraTicketSerializer,
    RequirementsRequestSerializer,
    first_error_message,
)
from baassist.web.api.services import AnalystService

logger = get_logger("baassist.web.views")


def _bad_request(serializer) -> Response:
    return Response(
        {"error": first_error_message(serializer.errors)},
        status=status.HTTP_400_BAD_REQUEST,
    )


def _unexpected_error(route: str, error: Exception) -> Response:
    logger.exception(f"Unhandled error in {route}", context={"route": route})
    return Response({"error": str(error)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _run_pipeline(task_kind: TaskKind, inputs: dict[str, Any]) -> Response:
    try:
        result = AnalystService.get_dispatcher().handle(task_kind, inputs)
    except Exception as e:
        return _unexpected_error(task_kind.route, e)

    if isinstance(result, ErrorResponse):
        return Response(result.to_body(), status=result.status_code)
    return Response(result.data)


@api_view(["POST"])
def generate_documents(request):
    """Generate SRS, FRD, BRD and UML descriptions from business requirements."""
    serializer = RequirementsRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(serializer)
    return _run_pipeline(TaskKind.DOCUMENT_SET, serializer.validated_data)


@api_view(["POST"])
def conduct_research(request):
    """Competitive analysis and SWOT for business requirements."""
    serializer = RequirementsRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(serializer)
    return _run_pipeline(TaskKind.RESEARCH, serializer.validated_data)


@api_view(["POST"])
def breakdown_tasks(request):
    """Break functional requirements into estimated technical tasks."""
    serializer = BreakdownRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(serializer)
    return _run_pipeline(TaskKind.TASK_BREAKDOWN, serializer.validated_data)


@api_view(["POST"])
def assign_tasks(request):
    """Assign tasks to team members by skill match."""
    serializer = AssignRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(serializer)
    data = serializer.validated_data
    inputs = {
        "tasks": [dict(task) for task in data["tasks"]],
        "teamMembers": [dict(member) for member in data["teamMembers"]],
    }
    return _run_pipeline(TaskKind.TASK_ASSIGNMENT, inputs)


@api_view(["POST"])
def create_jira_tasks(request):
    """Create simulated Jira tickets for assigned tasks."""
    serializer = JiraRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _bad_request(serializer)
    data = serializer.validated_data

    try:
        tickets = create_jira_tickets(
            [dict(task) for task in data["assignedTasks"]],
            data["projectKey"],
        )
    except BAAssistError as e:
        error = e.to_response()
        return Response(error.to_body(), status=error.status_code)
    except Exception as e:
        return _unexpected_error("create-jira-tasks", e)

    response_serializer = JiraTicketSerializer([t.model_dump() for t in tickets], many=True)
    return Response(response_serializer.data)


@api_view(["GET"])
def health(request):
    """Report whether a completion provider is configured."""
    try:
        dispatcher = AnalystService.get_dispatcher()
    except ValueError as e:
        return Response(
            {"status": "unavailable", "error": str(e)},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response(
        {
            "status": "ok",
            "provider": getattr(dispatcher.client, "provider", None),
            "model": getattr(dispatcher.client, "model", None),
        }
    )
