"""Unit tests for the response normalizer."""

import json

import pytest

from baassist.core.normalizer import normalize, slice_braces, strip_fences, strip_tags


class TestStripping:
    """Test individual stripping steps."""

    def test_strip_fences_with_language_tag(self):
        """Fence markers are removed, content is kept."""
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}\n'

    def test_strip_fences_without_language_tag(self):
        """Bare fences are removed too."""
        assert strip_fences('```\n{"a": 1}\n```') == '{"a": 1}\n'

    def test_strip_tags(self):
        """Every <...> substring is removed."""
        assert strip_tags('<answer>{"a": 1}</answer>') == '{"a": 1}'

    def test_slice_braces(self):
        """Text is sliced to the first { and the last }."""
        assert slice_braces('Sure! {"a": {"b": 2}} Hope it helps') == '{"a": {"b": 2}}'

    def test_slice_braces_without_pair(self):
        """Text without a brace pair is returned unchanged."""
        assert slice_braces("no json here") == "no json here"

    def test_slice_braces_reversed(self):
        """A closing brace before the opening one is not a pair."""
        assert slice_braces("} oops {") == "} oops {"


class TestNormalize:
    """Test the full normalization sequence."""

    def test_fenced_document(self):
        """A fenced object normalizes to the bare object."""
        raw = '```json\n{"srs":"A","frd":"B","brd":"C","umlDiagrams":[]}\n```'
        assert normalize(raw) == '{"srs":"A","frd":"B","brd":"C","umlDiagrams":[]}'

    def test_tags_and_prose(self):
        """Tags and surrounding prose are stripped."""
        assert normalize('Sure! <answer>{"srs":"A"}</answer>') == '{"srs":"A"}'

    def test_surrounding_whitespace(self):
        """Leading and trailing whitespace is trimmed."""
        assert normalize('  \n {"a": 1} \n ') == '{"a": 1}'

    def test_never_raises_on_garbage(self):
        """Text with nothing JSON-like passes through trimmed."""
        assert normalize("  I cannot help with that.  ") == "I cannot help with that."

    def test_embedded_object_roundtrip(self):
        """Any single embedded object survives prose, fences and tags."""
        payload = {"name": "x", "nested": {"list": [1, 2, {"k": "v"}]}}
        raw = f"<think>planning</think>Result:\n```json\n{json.dumps(payload)}\n```\nDone."
        assert json.loads(normalize(raw)) == payload

    @pytest.mark.parametrize(
        "text",
        ['{"a": 1}', 'prefix {"a": {"b": [1, 2]}} suffix', "no braces at all", '[{"a": 1}]'],
    )
    def test_idempotent(self, text):
        """normalize(normalize(x)) == normalize(x) for fence- and tag-free text."""
        once = normalize(text)
        assert normalize(once) == once


class TestArrayMode:
    """Test normalization for list-valued task kinds."""

    def test_bare_array_kept(self):
        """With allow_array a bare array is sliced to its brackets."""
        raw = 'Tasks:\n```json\n[{"id": 1}, {"id": 2}]\n```'
        assert normalize(raw, allow_array=True) == '[{"id": 1}, {"id": 2}]'

    def test_bare_array_mangled_without_array_mode(self):
        """Without allow_array only the brace span survives."""
        assert normalize('[{"id": 1}, {"id": 2}]') == '{"id": 1}, {"id": 2}'

    def test_wrapped_object_preferred_when_brace_first(self):
        """An object opening before any bracket is sliced as an object."""
        raw = 'Result: {"tasks": [{"id": 1}]}'
        assert normalize(raw, allow_array=True) == '{"tasks": [{"id": 1}]}'

    @pytest.mark.parametrize(
        "prefix",
        [
            "Note [1]: wrapped as requested.\n",
            "<think>Fields needed: [id, name, estimatedHours]</think>\n",
        ],
    )
    def test_bracketed_prose_before_wrapped_object(self, prefix, tasks):
        """Brackets in leading prose do not hide a wrapped object."""
        payload = {"tasks": tasks}
        raw = prefix + json.dumps(payload)
        assert json.loads(normalize(raw, allow_array=True)) == payload

    def test_bracketed_prose_after_wrapped_object(self):
        """Brackets in trailing prose do not hide a wrapped object."""
        raw = '{"assignments": [{"id": 1}]}\nSee [2].'
        assert normalize(raw, allow_array=True) == '{"assignments": [{"id": 1}]}'
