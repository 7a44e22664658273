"""Strict JSON parsing and shallow shape validation of completions."""

import copy
import json
from dataclasses import dataclass
from typing import Any, Union

from baassist.core.errors import MalformedJSONError, ShapeMismatchError
from baassist.core.logging import get_logger
from baassist.schemas.documents import ValidatedDocument
from baassist.schemas.shapes import ExpectedShape, FieldKind, FieldSpec, RootKind

logger = get_logger("baassist.validator")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant {name} is not allowed")


def parse_strict(text: str) -> Any:
    """
    Parse text as standard JSON.

    Python's parser otherwise accepts ``NaN`` and ``Infinity``; those are
    refused here. Trailing commas and single quotes already fail.

    Raises:
        MalformedJSONError: If the text is not valid JSON
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        raise MalformedJSONError(str(e), text) from e


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def kind_matches(value: Any, kind: FieldKind) -> bool:
    """Return True if a parsed JSON value has the given coarse kind."""
    if kind == FieldKind.STRING:
        return isinstance(value, str)
    if kind == FieldKind.IDENTIFIER:
        return isinstance(value, str) or _is_number(value)
    if kind == FieldKind.NUMBER:
        return _is_number(value)
    if kind == FieldKind.ARRAY:
        return isinstance(value, list)
    if kind == FieldKind.ARRAY_OF_OBJECT:
        return isinstance(value, list) and all(isinstance(item, dict) for item in value)
    if kind == FieldKind.OBJECT:
        return isinstance(value, dict)
    return False


@dataclass(frozen=True)
class BareSequence:
    """Completion was a JSON array."""

    items: list


@dataclass(frozen=True)
class WrappedSequence:
    """Completion was an object holding the array under a wrapper key."""

    key: str
    items: list


SequenceCompletion = Union[BareSequence, WrappedSequence]


def classify_sequence(parsed: Any, shape: ExpectedShape, text: str) -> SequenceCompletion:
    """
    Classify a parsed sequence completion as bare or wrapped.

    Raises:
        ShapeMismatchError: If the value is neither form
    """
    if isinstance(parsed, list):
        return BareSequence(parsed)
    if isinstance(parsed, dict) and shape.wrapper_key in parsed:
        items = parsed[shape.wrapper_key]
        if isinstance(items, list):
            return WrappedSequence(shape.wrapper_key, items)
        raise ShapeMismatchError(shape.wrapper_key, "expected array", text)
    raise ShapeMismatchError(
        shape.wrapper_key or "<root>",
        f"expected an array or an object with an array under '{shape.wrapper_key}'",
        text,
    )


class ShapeValidator:
    """
    Check a parsed value against an ExpectedShape.

    Numeric bounds are handled according to ``bounds_policy``:
    ``clamp`` pulls the value into range and logs a warning, ``reject``
    raises ShapeMismatchError, ``pass`` leaves the value untouched.
    """

    def __init__(self, shape: ExpectedShape, bounds_policy: str = "clamp"):
        self.shape = shape
        self.bounds_policy = bounds_policy

    def check(self, parsed: Any, text: str) -> Any:
        """Validate ``parsed`` and return the (possibly clamped) payload."""
        if self.shape.root == RootKind.SEQUENCE:
            sequence = classify_sequence(parsed, self.shape, text)
            if isinstance(sequence, WrappedSequence):
                logger.debug(
                    f"Unwrapped sequence from '{sequence.key}'",
                    context={"task_kind": self.shape.task_kind.value},
                )
            items = copy.deepcopy(sequence.items)
            for index, item in enumerate(items):
                path = f"[{index}]"
                if not isinstance(item, dict):
                    raise ShapeMismatchError(path, "expected object", text)
                self._check_fields(item, self.shape.fields, text, prefix=f"{path}.")
            return items

        if not isinstance(parsed, dict):
            raise ShapeMismatchError("<root>", "expected JSON object", text)
        document = copy.deepcopy(parsed)
        self._check_fields(document, self.shape.fields, text)
        return document

    def _check_fields(
        self,
        container: dict,
        fields: tuple[FieldSpec, ...],
        text: str,
        prefix: str = "",
        nested: bool = False,
    ) -> None:
        for spec in fields:
            key = f"{prefix}{spec.name}"
            if spec.name not in container:
                raise ShapeMismatchError(key, "missing required key", text)
            value = container[spec.name]
            if not kind_matches(value, spec.kind):
                raise ShapeMismatchError(key, f"expected {spec.kind.value}", text)

            if spec.kind == FieldKind.NUMBER:
                container[spec.name] = self._apply_bounds(key, spec, value, text)

            # One level of nesting only.
            if spec.children and not nested:
                if spec.kind == FieldKind.OBJECT:
                    self._check_fields(value, spec.children, text, prefix=f"{key}.", nested=True)
                elif spec.kind == FieldKind.ARRAY_OF_OBJECT:
                    for index, item in enumerate(value):
                        self._check_fields(
                            item, spec.children, text, prefix=f"{key}[{index}].", nested=True
                        )

    def _apply_bounds(self, key: str, spec: FieldSpec, value: Any, text: str) -> Any:
        low, high = spec.minimum, spec.maximum
        below = low is not None and value < low
        above = high is not None and value > high
        if not (below or above) or self.bounds_policy == "pass":
            return value
        if self.bounds_policy == "reject":
            raise ShapeMismatchError(key, f"value {value} outside [{low}, {high}]", text)
        clamped = low if below else high
        logger.warning(
            f"Clamped out-of-range value for {key}",
            context={"key": key, "original": value, "clamped": clamped},
        )
        return clamped


def validate(
    normalized_text: str,
    shape: ExpectedShape,
    bounds_policy: str = "clamp",
) -> ValidatedDocument:
    """
    Parse normalized text and check it against an expected shape.

    Args:
        normalized_text: Output of the normalizer
        shape: Expected shape for the calling task kind
        bounds_policy: "clamp", "reject" or "pass" for numeric bounds

    Returns:
        ValidatedDocument tagged with the shape's task kind

    Raises:
        MalformedJSONError: If the text is not valid JSON
        ShapeMismatchError: If a required key is missing or mistyped
    """
    parsed = parse_strict(normalized_text)
    data = ShapeValidator(shape, bounds_policy).check(parsed, normalized_text)
    return ValidatedDocument(task_kind=shape.task_kind, data=data)
