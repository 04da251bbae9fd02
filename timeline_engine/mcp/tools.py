"""Composition tools exposed to MCP clients.

Each tool returns the API envelope as a JSON string.
"""

import json
from typing import Any

from timeline_engine.mcp import api_client


def _dump(envelope: dict) -> str:
    return json.dumps(envelope, ensure_ascii=False, indent=2)


async def list_commands() -> str:
    """List every composition command with its argument schema.

    Call this first to learn the exact argument names (camelCase or
    snake_case both work).

    Returns:
        JSON with the command names, descriptions and argument schemas
    """
    return _dump(await api_client.list_commands())


async def execute_command(command: str, arguments: dict[str, Any] | None = None) -> str:
    """Run one composition command.

    Examples:
        - add_element {"item": {"type": "text", "text": "Hello", "from": 0, "durationInFrames": 90}}
        - add_keyframes_to_item {"trackId": "...", "itemId": "...", "keyframes": [{"frame": 0, "values": {"opacity": 0}}]}
        - add_scene {"name": "Intro", "durationInSeconds": 3}

    Keyframe frames are relative to the item's start, not the composition.

    Args:
        command: Command name from list_commands
        arguments: Argument object for the command

    Returns:
        JSON envelope with the command result, or an error with a suggested fix
    """
    return _dump(await api_client.execute_command(command, arguments))


async def get_composition() -> str:
    """Get the whole composition document (tracks, items, scenes, settings).

    Returns:
        JSON of the composition document
    """
    return _dump(await api_client.get_composition())


async def inspect_frame(frame: int) -> str:
    """Inspect what is on screen at an absolute frame.

    Args:
        frame: Absolute composition frame

    Returns:
        JSON with the scene blend, track paint order and each visible
        item's evaluated property values
    """
    return _dump(await api_client.get_frame(frame))


async def validate_composition(rules: list[str] | None = None) -> str:
    """Check the composition for overlaps, out-of-range keyframes, scene problems and more.

    Args:
        rules: Rule names to run (default: all). Available: overlapping_items,
            item_bounds, keyframe_bounds, scene_overlap, scene_transitions,
            scene_references, track_item_types, spring_stability,
            layer_ordering, empty_tracks

    Returns:
        JSON with isValid, counts and the issues found
    """
    return _dump(await api_client.validate(rules))
