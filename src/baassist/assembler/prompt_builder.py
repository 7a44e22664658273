"""Instruction rendering for each task kind."""

import json
import string
from pathlib import Path
from typing import Any, Mapping

from baassist.core.errors import MissingInputError
from baassist.schemas.requests import TaskKind

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

TEMPLATE_FILES = {
    TaskKind.DOCUMENT_SET: "document_set.txt",
    TaskKind.RESEARCH: "research.txt",
    TaskKind.TASK_BREAKDOWN: "task_breakdown.txt",
    TaskKind.TASK_ASSIGNMENT: "task_assignment.txt",
}


def required_fields(template: str) -> list[str]:
    """Return the placeholder names a template references, in order."""
    names: list[str] = []
    for _, field_name, _, _ in string.Formatter().parse(template):
        if field_name and field_name not in names:
            names.append(field_name)
    return names


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class PromptBuilder:
    """Renders named inputs into a natural-language instruction."""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        """
        Initialize prompt builder.

        Args:
            prompts_dir: Directory holding the ``*.txt`` templates
        """
        self.templates = {
            kind: (prompts_dir / filename).read_text(encoding="utf-8")
            for kind, filename in TEMPLATE_FILES.items()
        }

    def required_inputs(self, task_kind: TaskKind) -> list[str]:
        """Names of the inputs a task kind's template needs."""
        return required_fields(self.templates[task_kind])

    def build(self, task_kind: TaskKind, inputs: Mapping[str, Any]) -> str:
        """
        Render the instruction for a task kind.

        Args:
            task_kind: Which template to use
            inputs: Named inputs; strings are inserted verbatim, other
                values as JSON

        Returns:
            Instruction text

        Raises:
            MissingInputError: If a referenced input is absent or blank
        """
        template = self.templates[task_kind]
        values = {}
        for name in required_fields(template):
            value = inputs.get(name)
            if _is_missing(value):
                raise MissingInputError(name)
            values[name] = _render_value(value)
        return template.format(**values)


_default_builder: PromptBuilder | None = None


def build(task_kind: TaskKind, inputs: Mapping[str, Any]) -> str:
    """Render an instruction with the packaged templates."""
    global _default_builder
    if _default_builder is None:
        _default_builder = PromptBuilder()
    return _default_builder.build(task_kind, inputs)
