"""Turns an HTTP status and body into content for the target editor."""

from __future__ import annotations

import json
from typing import Any

from .errors import ErrorCode
from .models import ConversionDirection, ConversionResponse, EditorMutation

UNKNOWN_ERROR_MESSAGE = "Conversion failed: unknown error"
EMPTY_PAYLOAD_MESSAGE = "Conversion failed: empty response"


def render_diagnostic(direction: ConversionDirection, message: str) -> str:
    """Render *message* as a comment in the target editor's language."""

    if direction is ConversionDirection.TO_CODE:
        lines = message.splitlines() or [""]
        return "\n".join(f"// {line}".rstrip() for line in lines)
    safe = message.replace("-->", "-- >")
    if "\n" in safe:
        return f"<!--\n{safe}\n-->"
    return f"<!-- {safe} -->"


def diagnostic(direction: ConversionDirection, code: ErrorCode, message: str) -> EditorMutation:
    return EditorMutation(
        target=direction.target,
        content=render_diagnostic(direction, message),
        error_code=code,
    )


def _parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None


def reconcile(direction: ConversionDirection, status_code: int, body: str) -> EditorMutation:
    direction = ConversionDirection(direction)
    parsed = _parse_json(body)
    response = ConversionResponse.from_body(parsed) if isinstance(parsed, dict) else None

    if not 200 <= status_code < 300:
        if response is None:
            message = body.strip() or f"HTTP error, status: {status_code}"
            return diagnostic(direction, ErrorCode.REMOTE_UNSTRUCTURED_ERROR, message)
        return diagnostic(direction, ErrorCode.REMOTE_VALIDATION_ERROR, response.error or UNKNOWN_ERROR_MESSAGE)

    if response is None:
        return diagnostic(direction, ErrorCode.UNEXPECTED_EMPTY_PAYLOAD, EMPTY_PAYLOAD_MESSAGE)
    if response.error:
        return diagnostic(direction, ErrorCode.REMOTE_VALIDATION_ERROR, response.error)
    payload = response.payload_for(direction)
    if payload is None:
        return diagnostic(direction, ErrorCode.UNEXPECTED_EMPTY_PAYLOAD, EMPTY_PAYLOAD_MESSAGE)
    return EditorMutation(target=direction.target, content=payload)


__all__ = ["EMPTY_PAYLOAD_MESSAGE", "UNKNOWN_ERROR_MESSAGE", "diagnostic", "reconcile", "render_diagnostic"]
