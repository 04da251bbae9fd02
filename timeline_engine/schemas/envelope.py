from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Error and result payloads are camelCase on the wire like the document itself
CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseMeta(BaseModel):
    api_version: str = "1.0"
    processing_time_ms: int
    timestamp: datetime
    warnings: list[str] = Field(default_factory=list)


class ErrorLocation(BaseModel):
    model_config = CAMEL_CONFIG

    field: str | None = None
    track_id: str | None = None
    item_id: str | None = None
    scene_id: str | None = None
    index: int | None = None


class SuggestedAction(BaseModel):
    model_config = CAMEL_CONFIG

    action: str
    endpoint: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class ErrorInfo(BaseModel):
    model_config = CAMEL_CONFIG

    code: str
    message: str
    location: ErrorLocation | None = None
    retryable: bool = False
    suggested_fix: str | None = None  # Human-readable fix suggestion
    suggested_actions: list[SuggestedAction] = Field(default_factory=list)


class CommandResult(BaseModel):
    """Outcome of one command against the composition document.

    Commands never raise for bad references or bad input; they return a
    failed result instead. ``warnings`` lists input the command clamped or
    ignored.
    """

    model_config = CAMEL_CONFIG

    success: bool
    command: str | None = None
    data: dict[str, Any] | None = None
    error: ErrorInfo | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(
        cls,
        data: dict[str, Any] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> "CommandResult":
        return cls(success=True, data=data or {}, warnings=warnings or [])

    @classmethod
    def fail(cls, error: ErrorInfo, *, warnings: list[str] | None = None) -> "CommandResult":
        return cls(success=False, error=error, warnings=warnings or [])


class EnvelopeResponse(BaseModel):
    request_id: str
    data: Any | None = None
    error: ErrorInfo | None = None
    meta: ResponseMeta
