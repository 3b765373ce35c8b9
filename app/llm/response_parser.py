"""Parsing of LLM extraction payloads.

Providers do not always honour the requested envelope, so four shapes are
accepted and classified right after decoding:

- ``[...]``                 -> BareArray
- ``{"responses": [...]}``  -> ResponsesEnvelope
- ``{"surveys": [...]}``    -> SurveysEnvelope
- ``{...}`` (anything else) -> SingleObject
"""

import json
from dataclasses import dataclass
from typing import Any

from app.llm.exceptions import LlmResponseError


@dataclass(frozen=True)
class BareArray:
    items: list[Any]


@dataclass(frozen=True)
class ResponsesEnvelope:
    items: list[Any]


@dataclass(frozen=True)
class SurveysEnvelope:
    items: list[Any]


@dataclass(frozen=True)
class SingleObject:
    item: dict[str, Any]


Payload = BareArray | ResponsesEnvelope | SurveysEnvelope | SingleObject


def strip_code_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned


def classify(parsed: Any) -> Payload:
    if isinstance(parsed, list):
        return BareArray(parsed)
    if not isinstance(parsed, dict):
        raise LlmResponseError(f"Unsupported JSON payload type: {type(parsed).__name__}")
    for key, envelope in (("responses", ResponsesEnvelope), ("surveys", SurveysEnvelope)):
        if key in parsed:
            items = parsed[key]
            if not isinstance(items, list):
                raise LlmResponseError(f"'{key}' must be an array")
            return envelope(items)
    return SingleObject(parsed)


def parse_payload(raw: str | None) -> Payload:
    """Decode the provider message content into one of the accepted shapes.

    Raises:
        LlmResponseError: if the content is missing, not JSON, or a scalar.
    """
    if raw is None or not raw.strip():
        raise LlmResponseError("AI returned empty response")
    try:
        parsed = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as exc:
        raise LlmResponseError(f"Invalid JSON response: {exc}") from exc
    return classify(parsed)


def candidates(payload: Payload) -> list[dict[str, Any]]:
    """Normalize any payload shape to a list of object candidates."""
    if isinstance(payload, SingleObject):
        items: list[Any] = [payload.item]
    else:
        items = payload.items
    return [item for item in items if isinstance(item, dict)]
