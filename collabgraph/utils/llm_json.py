"""Defensive JSON extraction from LLM responses.

Despite explicit instructions to return bare JSON, most models wrap output
in markdown fences or add a sentence of preamble.  Both helpers here strip
fences, then cut the outermost ``{...}`` (or ``[...]``) span before
decoding.  Anything that still fails to decode, or decodes to the wrong
top-level type, raises :class:`MalformedResponseError`.
"""

from __future__ import annotations

import json
import re
from typing import Any

from collabgraph.utils.errors import MalformedResponseError

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def _strip_fences(response: str) -> str:
    text = (response or "").strip()
    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()
    return text


def _outermost_span(text: str, opener: str, closer: str) -> str | None:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract_json_object(response: str, provider_name: str | None = None) -> dict[str, Any]:
    """Decode the outermost JSON object in *response*.

    Raises
    ------
    MalformedResponseError
        If no object span exists or it does not decode to a dict.
    """
    span = _outermost_span(_strip_fences(response), "{", "}")
    if span is None:
        raise MalformedResponseError(
            message="No JSON object found in response",
            provider_name=provider_name,
        )
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            message=f"Invalid JSON object: {exc.msg}",
            provider_name=provider_name,
        ) from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError(
            message="Expected a JSON object",
            provider_name=provider_name,
        )
    return parsed


def extract_json_array(response: str, provider_name: str | None = None) -> list[Any]:
    """Decode the outermost JSON array in *response*.

    Raises
    ------
    MalformedResponseError
        If no array span exists or it does not decode to a list.
    """
    span = _outermost_span(_strip_fences(response), "[", "]")
    if span is None:
        raise MalformedResponseError(
            message="No JSON array found in response",
            provider_name=provider_name,
        )
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            message=f"Invalid JSON array: {exc.msg}",
            provider_name=provider_name,
        ) from exc
    if not isinstance(parsed, list):
        raise MalformedResponseError(
            message="Expected a JSON array",
            provider_name=provider_name,
        )
    return parsed
