"""Declarative expected shapes for each task kind.

A shape lists the required keys of a completion and the coarse kind of each
value. Checks are shallow: a field may declare ``children`` that are checked
one level down, but children never declare children of their own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from baassist.schemas.requests import TaskKind


class FieldKind(str, Enum):
    """Coarse JSON value kinds."""

    STRING = "string"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    ARRAY = "array"
    ARRAY_OF_OBJECT = "array-of-object"
    OBJECT = "object"


class RootKind(str, Enum):
    """Top-level container of a completion."""

    OBJECT = "object"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class FieldSpec:
    """A required key, its kind and optional numeric bounds."""

    name: str
    kind: FieldKind
    children: tuple["FieldSpec", ...] = ()
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass(frozen=True)
class ExpectedShape:
    """Required structure of a validated document for one task kind.

    For ``RootKind.SEQUENCE`` shapes the completion is a list of objects, each
    carrying ``fields``; models sometimes wrap that list in an object under
    ``wrapper_key``, which is accepted as well.
    """

    task_kind: TaskKind
    root: RootKind
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)
    wrapper_key: Optional[str] = None


_TASK_FIELDS = (
    FieldSpec("id", FieldKind.IDENTIFIER),
    FieldSpec("name", FieldKind.STRING),
    FieldSpec("description", FieldKind.STRING),
    FieldSpec("estimatedHours", FieldKind.NUMBER, minimum=0),
    FieldSpec("requiredSkills", FieldKind.ARRAY),
)

DOCUMENT_SET_SHAPE = ExpectedShape(
    task_kind=TaskKind.DOCUMENT_SET,
    root=RootKind.OBJECT,
    fields=(
        FieldSpec("srs", FieldKind.STRING),
        FieldSpec("frd", FieldKind.STRING),
        FieldSpec("brd", FieldKind.STRING),
        FieldSpec(
            "umlDiagrams",
            FieldKind.ARRAY_OF_OBJECT,
            children=(
                FieldSpec("name", FieldKind.STRING),
                FieldSpec("content", FieldKind.STRING),
            ),
        ),
    ),
)

RESEARCH_SHAPE = ExpectedShape(
    task_kind=TaskKind.RESEARCH,
    root=RootKind.OBJECT,
    fields=(
        FieldSpec(
            "competitors",
            FieldKind.ARRAY_OF_OBJECT,
            children=(
                FieldSpec("name", FieldKind.STRING),
                FieldSpec("strengths", FieldKind.ARRAY),
                FieldSpec("weaknesses", FieldKind.ARRAY),
            ),
        ),
        FieldSpec("marketTrends", FieldKind.STRING),
        FieldSpec("recommendations", FieldKind.STRING),
        FieldSpec(
            "swotAnalysis",
            FieldKind.OBJECT,
            children=(
                FieldSpec("strengths", FieldKind.ARRAY),
                FieldSpec("weaknesses", FieldKind.ARRAY),
                FieldSpec("opportunities", FieldKind.ARRAY),
                FieldSpec("threats", FieldKind.ARRAY),
            ),
        ),
    ),
)

TASK_BREAKDOWN_SHAPE = ExpectedShape(
    task_kind=TaskKind.TASK_BREAKDOWN,
    root=RootKind.SEQUENCE,
    fields=_TASK_FIELDS,
    wrapper_key="tasks",
)

TASK_ASSIGNMENT_SHAPE = ExpectedShape(
    task_kind=TaskKind.TASK_ASSIGNMENT,
    root=RootKind.SEQUENCE,
    fields=_TASK_FIELDS
    + (
        FieldSpec("assignedTo", FieldKind.STRING),
        FieldSpec("confidence", FieldKind.NUMBER, minimum=0, maximum=100),
    ),
    wrapper_key="assignments",
)

SHAPES: dict[TaskKind, ExpectedShape] = {
    shape.task_kind: shape
    for shape in (
        DOCUMENT_SET_SHAPE,
        RESEARCH_SHAPE,
        TASK_BREAKDOWN_SHAPE,
        TASK_ASSIGNMENT_SHAPE,
    )
}


def shape_for(task_kind: TaskKind) -> ExpectedShape:
    """Return the static expected shape for a task kind."""
    return SHAPES[task_kind]
