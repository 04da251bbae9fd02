"""Composition query endpoints: the document, single frames and validation."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from timeline_engine.api.deps import Service
from timeline_engine.middleware.request_context import (
    create_request_context,
    envelope_from_result,
    envelope_success,
)
from timeline_engine.services.command_dispatcher import dump_result
from timeline_engine.services.composition_validator import CompositionValidator, summarize
from timeline_engine.services.frame_inspector import inspect_frame

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/composition")
async def get_composition(service: Service) -> JSONResponse:
    context = create_request_context()
    return envelope_success(context, service.document.to_payload())


@router.put("/composition")
async def replace_composition(
    service: Service,
    payload: dict[str, Any] = Body(...),
) -> JSONResponse:
    """Load a whole document. Undoable like any command."""
    context = create_request_context()
    result = service.load_document(payload)
    return envelope_from_result(context, dump_result(result))


@router.get("/frames/{frame}")
async def get_frame(frame: int, service: Service) -> JSONResponse:
    """Scene blend, paint order and evaluated item values at an absolute frame."""
    context = create_request_context()
    inspection = inspect_frame(service.document, frame)
    if not inspection.in_range:
        context.warnings.append(f"Frame {frame} is outside the composition (0-{service.document.duration_in_frames - 1})")
    return envelope_success(context, inspection.to_dict())


@router.get("/validation")
async def validate_composition(
    service: Service,
    rules: list[str] | None = Query(default=None),
) -> JSONResponse:
    context = create_request_context()
    validator = CompositionValidator(service.document, settings=service.settings)
    issues = validator.validate(rules=rules)
    unknown = sorted(set(rules or []) - set(validator.rules))
    if unknown:
        context.warnings.append(f"Unknown validation rules skipped: {', '.join(unknown)}")
    logger.info(f"Validation found {len(issues)} issues")
    return envelope_success(context, summarize(issues))
