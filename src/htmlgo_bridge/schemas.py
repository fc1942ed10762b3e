from __future__ import annotations

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    status: str
    version: str
    environment: str


class EditorText(BaseModel):
    text: str


class PrefixValue(BaseModel):
    value: str


class OptionsUpdate(BaseModel):
    children_mode: bool = Field(alias="childrenMode")

    model_config = {"populate_by_name": True}


class OutcomePayload(BaseModel):
    dropped: bool = False
    attempt_id: str | None = None
    direction: str
    dispatched: bool = False
    http_status: int | None = None
    target: str | None = None
    content: str | None = None
    error_code: str | None = None
    rewritten: bool = False


class SessionState(BaseModel):
    state: str
    environment: str
    markup: str
    code: str
    prefixes: dict[str, str]
    children_mode: bool = Field(serialization_alias="childrenMode")
