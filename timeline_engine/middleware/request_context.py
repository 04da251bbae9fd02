"""Per-request bookkeeping and envelope construction for the HTTP API."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from uuid import uuid4

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from timeline_engine.constants.error_codes import get_error_spec
from timeline_engine.exceptions import TimelineError
from timeline_engine.schemas.envelope import EnvelopeResponse, ErrorInfo, ResponseMeta


@dataclass
class RequestContext:
    request_id: str
    start_time: float
    warnings: list[str] = field(default_factory=list)


def create_request_context() -> RequestContext:
    return RequestContext(request_id=str(uuid4()), start_time=perf_counter())


def build_meta(context: RequestContext, api_version: str = "1.0") -> ResponseMeta:
    processing_time_ms = int((perf_counter() - context.start_time) * 1000)
    return ResponseMeta(
        api_version=api_version,
        processing_time_ms=processing_time_ms,
        timestamp=datetime.now(timezone.utc),
        warnings=context.warnings,
    )


def _render(envelope: EnvelopeResponse, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope.model_dump(by_alias=True, exclude_none=True)),
    )


def envelope_success(context: RequestContext, data: object) -> JSONResponse:
    envelope = EnvelopeResponse(
        request_id=context.request_id,
        data=data,
        meta=build_meta(context),
    )
    return _render(envelope, 200)


def envelope_error(
    context: RequestContext,
    *,
    code: str,
    message: str,
    status_code: int,
) -> JSONResponse:
    spec = get_error_spec(code)
    error = ErrorInfo(
        code=code,
        message=message,
        retryable=spec.get("retryable", False),
        suggested_fix=spec.get("suggested_fix"),
    )
    envelope = EnvelopeResponse(
        request_id=context.request_id,
        error=error,
        meta=build_meta(context),
    )
    return _render(envelope, status_code)


def envelope_error_from_exception(context: RequestContext, exc: TimelineError) -> JSONResponse:
    """Convert a TimelineError to an envelope error response."""
    envelope = EnvelopeResponse(
        request_id=context.request_id,
        error=exc.to_error_info(),
        meta=build_meta(context),
    )
    return _render(envelope, exc.status_code)


def envelope_from_result(context: RequestContext, result: dict) -> JSONResponse:
    """Wrap a dumped CommandResult.

    Failed commands keep the result as ``data`` (it carries the warnings)
    and lift its error into the envelope. Unknown ids map to 404.
    """
    context.warnings.extend(result.get("warnings") or [])
    if result.get("success"):
        return envelope_success(context, result)

    error = ErrorInfo.model_validate(result["error"])
    status_code = 404 if error.code.endswith("_NOT_FOUND") else 400
    envelope = EnvelopeResponse(
        request_id=context.request_id,
        data=result,
        error=error,
        meta=build_meta(context),
    )
    return _render(envelope, status_code)
