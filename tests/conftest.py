"""Shared fixtures for the test suite."""

import json
import os

import django
import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "baassist.web.settings")
django.setup()

from baassist.core.errors import ProviderError  # noqa: E402


class FakeClient:
    """Completion client returning canned completions and recording instructions."""

    provider = "fake"
    model = "fake-model"

    def __init__(self, *responses):
        self.responses = list(responses)
        self.instructions = []
        self.closed = False

    def complete(self, instruction: str) -> str:
        self.instructions.append(instruction)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client_factory():
    """Build a FakeClient from canned responses."""
    return FakeClient


@pytest.fixture
def document_set():
    """A valid DocumentSet payload."""
    return {
        "srs": "System shall let users book rooms.",
        "frd": "FR-1: Users can search available rooms.",
        "brd": "Reduce booking time by 50%.",
        "umlDiagrams": [
            {"name": "Use Case", "content": "Actor User -> Book Room"},
        ],
    }


@pytest.fixture
def research():
    """A valid Research payload."""
    return {
        "competitors": [
            {"name": "RoomBooker", "strengths": ["brand"], "weaknesses": ["price"]},
        ],
        "marketTrends": "Hybrid work increases demand for desk booking.",
        "recommendations": "Focus on mobile-first UX.",
        "swotAnalysis": {
            "strengths": ["Simple UI"],
            "weaknesses": ["Small team"],
            "opportunities": ["SMB market"],
            "threats": ["Incumbents"],
        },
    }


@pytest.fixture
def tasks():
    """A valid TaskBreakdown payload."""
    return [
        {
            "id": "1",
            "name": "Design schema",
            "description": "Design the booking database schema",
            "estimatedHours": 8,
            "requiredSkills": ["SQL"],
        },
        {
            "id": 2,
            "name": "Build booking API",
            "description": "REST endpoints for bookings",
            "estimatedHours": 16,
            "requiredSkills": ["Python", "Django"],
        },
    ]


@pytest.fixture
def assigned_tasks(tasks):
    """A valid TaskAssignment payload."""
    return [
        dict(tasks[0], assignedTo="Alice", confidence=95),
        dict(tasks[1], assignedTo="Bob", confidence=70),
    ]


@pytest.fixture
def team_members():
    """Team roster for assignment requests."""
    return [
        {"id": 1, "name": "Alice", "skills": ["SQL"]},
        {"id": 2, "name": "Bob", "skills": ["Python", "Django"]},
    ]


@pytest.fixture
def fenced():
    """Render a payload the way chatty models often answer."""

    def render(payload) -> str:
        return f"Here you go:\n```json\n{json.dumps(payload)}\n```\nLet me know if you need more."

    return render


@pytest.fixture
def provider_error():
    """A non-retryable provider failure."""
    return ProviderError("groq API returned HTTP 401: invalid api key", status=401)
