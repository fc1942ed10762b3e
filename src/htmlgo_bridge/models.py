"""Domain models for the markup/code conversion flow."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Mapping, Union

from .errors import ErrorCode
from .prefixes import PrefixConfig

EditorRole = Literal["markup", "code"]


class ConversionDirection(str, Enum):
    """Wire value of the ``direction`` field."""

    TO_CODE = "html2go"
    TO_MARKUP = "go2html"

    @property
    def source(self) -> EditorRole:
        return "markup" if self is ConversionDirection.TO_CODE else "code"

    @property
    def target(self) -> EditorRole:
        return "code" if self is ConversionDirection.TO_CODE else "markup"

    @property
    def payload_field(self) -> str:
        """Response field that carries the converted text."""

        return "code" if self is ConversionDirection.TO_CODE else "html"


@dataclass(slots=True)
class ConversionOptions:
    children_mode: bool = False


def _encode(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True, slots=True)
class ToCodeRequest:
    markup: str
    prefixes: PrefixConfig
    children_mode: bool = False

    @property
    def direction(self) -> ConversionDirection:
        return ConversionDirection.TO_CODE

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"direction": self.direction.value, "html": self.markup}
        payload.update(self.prefixes.as_payload())
        payload["childrenMode"] = self.children_mode
        return payload

    def to_json(self) -> bytes:
        return _encode(self.to_payload())


@dataclass(frozen=True, slots=True)
class ToMarkupRequest:
    code: str

    @property
    def direction(self) -> ConversionDirection:
        return ConversionDirection.TO_MARKUP

    def to_payload(self) -> dict[str, Any]:
        return {"direction": self.direction.value, "goCode": self.code}

    def to_json(self) -> bytes:
        return _encode(self.to_payload())


ConversionRequest = Union[ToCodeRequest, ToMarkupRequest]


@dataclass(frozen=True, slots=True)
class ConversionResponse:
    code: str | None = None
    markup: str | None = None
    error: str | None = None

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "ConversionResponse":
        def text(key: str) -> str | None:
            value = body.get(key)
            return value if isinstance(value, str) and value else None

        return cls(code=text("code"), markup=text("html"), error=text("error"))

    def payload_for(self, direction: ConversionDirection) -> str | None:
        fields = {"code": self.code, "html": self.markup}
        return fields[direction.payload_field]


@dataclass(frozen=True, slots=True)
class EditorMutation:
    """Content to write into the target editor."""

    target: EditorRole
    content: str
    error_code: ErrorCode | None = None

    @property
    def is_diagnostic(self) -> bool:
        return self.error_code is not None


@dataclass(slots=True)
class ConversionOutcome:
    attempt_id: str
    direction: ConversionDirection
    dispatched: bool
    mutation: EditorMutation
    http_status: int | None = None
    rewritten: bool = False

    @property
    def error_code(self) -> ErrorCode | None:
        return self.mutation.error_code

    @property
    def ok(self) -> bool:
        return self.mutation.error_code is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt_id": self.attempt_id,
            "direction": self.direction.value,
            "dispatched": self.dispatched,
            "http_status": self.http_status,
            "target": self.mutation.target,
            "content": self.mutation.content,
            "error_code": self.error_code.value if self.error_code else None,
            "rewritten": self.rewritten,
        }


__all__ = [
    "ConversionDirection",
    "ConversionOptions",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionResponse",
    "EditorMutation",
    "EditorRole",
    "ToCodeRequest",
    "ToMarkupRequest",
]
