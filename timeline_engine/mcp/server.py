"""Timeline engine MCP server.

Run with:
    timeline-engine-mcp

The HTTP API must be running (see ``TIMELINE_API_BASE_URL``).
"""

import logging

from mcp.server.fastmcp import FastMCP

from timeline_engine.config import get_settings
from timeline_engine.mcp.tools import (
    execute_command,
    get_composition,
    inspect_frame,
    list_commands,
    validate_composition,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "Timeline Engine",
    instructions=(
        "Tools for building video compositions: tracks of timed items, "
        "keyframe animation, scenes and transitions. Call list_commands "
        "before execute_command."
    ),
)

# Register all tools
mcp.tool()(list_commands)
mcp.tool()(execute_command)
mcp.tool()(get_composition)
mcp.tool()(inspect_frame)
mcp.tool()(validate_composition)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    logger.info(f"Starting Timeline Engine MCP server (API: {settings.api_base_url})")
    mcp.run()


if __name__ == "__main__":
    main()
