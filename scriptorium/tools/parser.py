"""
Extraction of tool calls from free-text model output.

The model is asked to answer with a single call of the form
``tool_name({"param": "value"})``. Models do not always comply exactly, so
parsing is forgiving about code fences, surrounding prose and one known
escaping defect, but strict about the arguments: a call whose arguments do
not match its tool's schema is rejected.
"""

from __future__ import annotations

import json
import logging
import re

from scriptorium.tools.schemas import AgentTool, FinishWriting, validate_tool_call

logger = logging.getLogger(__name__)

# Leading ``` fence with optional language tag, and trailing ``` fence
_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\s*\n?```$")

# tool_name({ ... the first "({" after a word starts a candidate call
_CALL_START = re.compile(r"(\w+)\s*\(\s*(?=\{)")

# Fallback span match: tool_name({ ... }) with the body captured non-greedily
_CALL_SPAN = re.compile(r"(\w+)\s*\(\s*\{([\s\S]*?)\}\s*\)")

_FINISH = re.compile(r"finish_writing\s*\(\s*(?:\{\s*\})?\s*\)")

# strict=False tolerates raw newlines inside string values
_DECODER = json.JSONDecoder(strict=False)

# A backslash before "_" that is not itself escaped
_SPURIOUS_UNDERSCORE_ESCAPE = re.compile(r"(?<!\\)((?:\\\\)*)\\_")


def strip_fences(text: str) -> str:
    """Remove one leading and one trailing code fence, then trim."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _repair_json(text: str) -> str:
    # Models sometimes escape underscores in Markdown style
    return _SPURIOUS_UNDERSCORE_ESCAPE.sub(r"\1_", text)


def _raw_decode(body: str) -> dict | None:
    try:
        params, end = _DECODER.raw_decode(body)
    except json.JSONDecodeError:
        return None
    if not body[end:].lstrip().startswith(")"):
        return None
    return params if isinstance(params, dict) else None


def _decode_arguments(text: str, start: int) -> dict | None:
    """Decode the JSON object beginning at text[start] and closed by ')'."""
    body = text[start:]
    params = _raw_decode(body)
    if params is None:
        params = _raw_decode(_repair_json(body))
    return params


def _decode_span(body: str) -> dict | None:
    for candidate in (body, _repair_json(body)):
        try:
            return json.loads(candidate, strict=False)
        except json.JSONDecodeError as e:
            error = e
    logger.debug("Failed to parse arguments: %s", error)
    return None


def parse_tool_call(response_text: str) -> AgentTool | None:
    """
    Parse a model response into a validated tool call.

    Args:
        response_text: Raw text produced by the model.

    Returns:
        The first tool call found, or None if the response contains no
        tool-shaped text or the call's arguments are invalid.
    """
    cleaned = strip_fences(response_text)

    match = _CALL_START.search(cleaned)
    if match:
        name = match.group(1)
        if name == FinishWriting.name:
            return FinishWriting()

        params = _decode_arguments(cleaned, match.end())
        if params is None:
            span = _CALL_SPAN.search(cleaned, match.start())
            if span and span.start() == match.start():
                params = _decode_span("{" + span.group(2) + "}")

        tool = validate_tool_call(name, params)
        if tool is None:
            logger.debug("Rejected call to %s with arguments %r", name, params)
        return tool

    if _FINISH.search(cleaned):
        return FinishWriting()

    logger.debug("No tool call found in response")
    return None
