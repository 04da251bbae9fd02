from typing import Annotated

from fastapi import Depends, Request

from timeline_engine.services.command_service import CommandService


def get_command_service(request: Request) -> CommandService:
    """The process-wide command service, created on first use."""
    service = getattr(request.app.state, "command_service", None)
    if service is None:
        service = CommandService()
        request.app.state.command_service = service
    return service


Service = Annotated[CommandService, Depends(get_command_service)]
