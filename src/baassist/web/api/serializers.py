"""Serializers for API requests and responses."""

from rest_framework import serializers

# Error codes DRF uses for absent or empty required fields.
MISSING_CODES = {"required", "blank", "null", "empty"}


class RequirementsRequestSerializer(serializers.Serializer):
    """Serializer for document generation and research requests."""

    requirements = serializers.CharField(required=True, allow_blank=False, trim_whitespace=True)


class BreakdownRequestSerializer(serializers.Serializer):
    """Serializer for task breakdown requests."""

    functionalRequirements = serializers.CharField(required=True, allow_blank=False, trim_whitespace=True)


class TeamMemberSerializer(serializers.Serializer):
    """A team member and their skills."""

    id = serializers.JSONField(required=False, allow_null=True)
    name = serializers.CharField(allow_blank=False)
    skills = serializers.ListField(child=serializers.CharField(), default=list)


class AssignRequestSerializer(serializers.Serializer):
    """Serializer for task assignment requests."""

    tasks = serializers.ListField(child=serializers.DictField(), allow_empty=False)
    teamMembers = TeamMemberSerializer(many=True, allow_empty=False)


class JiraRequestSerializer(serializers.Serializer):
    """Serializer for simulated Jira creation requests."""

    assignedTasks = serializers.ListField(child=serializers.DictField())
    projectKey = serializers.CharField(allow_blank=False, trim_whitespace=True)


class JiraTicketSerializer(serializers.Serializer):
    """Serializer for a simulated Jira ticket."""

    id = serializers.CharField()
    summary = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    assignee = serializers.CharField(allow_null=True)
    estimatedHours = serializers.JSONField(allow_null=True)
    status = serializers.CharField()
    created = serializers.CharField()


def _first_detail(detail):
    if isinstance(detail, dict):
        detail = list(detail.values())
    if isinstance(detail, list):
        for item in detail:
            found = _first_detail(item)
            if found is not None:
                return found
        return None
    return detail


def first_error_message(errors: dict) -> str:
    """
    Flatten serializer errors into one message.

    Missing or empty fields read "<field> is required", matching the
    pipeline's MissingInputError; anything else reads "<field>: <detail>".
    """
    for field, details in errors.items():
        detail = _first_detail(details)
        if detail is None:
            continue
        code = getattr(detail, "code", None)
        if code in MISSING_CODES:
            return f"{field} is required"
        return f"{field}: {detail}"
    return "Invalid request"
