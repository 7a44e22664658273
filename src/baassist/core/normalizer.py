"""Best-effort stripping of non-JSON artifacts from model output."""

import re

# Fence markers, with or without a language tag, anywhere in the text.
_FENCE_PATTERN = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\n?")
_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_fences(text: str) -> str:
    """Remove markdown code-fence markers, keeping the fenced content."""
    return _FENCE_PATTERN.sub("", text)


def strip_tags(text: str) -> str:
    """Remove every ``<...>`` substring."""
    return _TAG_PATTERN.sub("", text)


def slice_braces(text: str) -> str:
    """Slice to the span between the first ``{`` and the last ``}``.

    Text without a correctly ordered brace pair is returned unchanged; the
    parser downstream reports it.
    """
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last == -1 or last < first:
        return text
    return text[first : last + 1]


def _slice_brackets(text: str) -> str:
    # The bracket span wins only when it encloses the brace span.
    first_bracket = text.find("[")
    last_bracket = text.rfind("]")
    if first_bracket == -1 or last_bracket < first_bracket:
        return slice_braces(text)
    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and (first_brace < first_bracket or last_brace > last_bracket):
        return slice_braces(text)
    return text[first_bracket : last_bracket + 1]


def normalize(raw_text: str, allow_array: bool = False) -> str:
    """
    Turn a raw completion into a candidate JSON string.

    Steps, in order: trim, drop fence markers, drop tag markup, then slice to
    the outermost brace span. Never raises.

    Args:
        raw_text: Unprocessed completion text
        allow_array: Slice to the outermost ``[...]`` span instead when it
            encloses the brace span; used by list-valued task kinds

    Returns:
        Normalized text, not yet guaranteed to parse
    """
    text = raw_text.strip()
    text = strip_fences(text)
    text = strip_tags(text)
    if allow_array:
        return _slice_brackets(text).strip()
    return slice_braces(text).strip()
