"""Command endpoints.

The HTTP face of the command dispatcher: agents and tools POST a command
name with its argument object and get the command result back in an
envelope.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from timeline_engine.api.deps import Service
from timeline_engine.exceptions import ConfigurationError
from timeline_engine.middleware.request_context import (
    create_request_context,
    envelope_error_from_exception,
    envelope_from_result,
    envelope_success,
)
from timeline_engine.services.command_dispatcher import CommandDispatcher, describe_commands

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_commands() -> JSONResponse:
    """Every command name with its description and argument schema."""
    context = create_request_context()
    commands = describe_commands()
    return envelope_success(context, {"count": len(commands), "commands": commands})


@router.post("/{name}")
async def execute_command(
    name: str,
    service: Service,
    arguments: dict[str, Any] | None = Body(default=None),
) -> JSONResponse:
    """Run one command against the composition.

    Unknown command names answer 404; unknown preset, easing or transition
    names answer 400. A command that fails on bad ids or input answers
    404/400 with the failed result as data.
    """
    context = create_request_context()
    dispatcher = CommandDispatcher(service)
    try:
        result = dispatcher.execute(name, arguments or {})
    except ConfigurationError as exc:
        logger.warning(f"Command {name} rejected: {exc.message}")
        return envelope_error_from_exception(context, exc)
    return envelope_from_result(context, result)
