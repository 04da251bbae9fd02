"""Error codes for the timeline command surface.

Single source of truth for every error code, whether re-issuing the same
command can succeed, and the recovery action an agent should take first.
Nothing in the engine retries internally; these flags are advisory.
"""

from typing import Any, TypedDict


class ErrorCodeSpec(TypedDict, total=False):
    """Specification for an error code."""

    retryable: bool
    suggested_action: str
    suggested_endpoint: str
    suggested_fix: str
    parameters: dict[str, Any]


ERROR_CODES: dict[str, ErrorCodeSpec] = {
    # ==========================================================================
    # Reference errors (ids are stale, refresh and retry)
    # ==========================================================================
    "TRACK_NOT_FOUND": {
        "retryable": True,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/composition",
    },
    "ITEM_NOT_FOUND": {
        "retryable": True,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/composition",
    },
    "SCENE_NOT_FOUND": {
        "retryable": True,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "POST /api/commands/list_scenes",
    },
    # ==========================================================================
    # Validation errors (fix the input)
    # ==========================================================================
    "TRACK_TYPE_MISMATCH": {
        "retryable": False,
        "suggested_fix": "Add the item to a track of the same type, or use add_element to create one",
    },
    "UNKNOWN_PROPERTY": {
        "retryable": False,
        "suggested_action": "list_properties",
        "suggested_fix": "Use one of the animatable properties for this item type",
    },
    "INVALID_ARGUMENTS": {
        "retryable": False,
        "suggested_action": "list_commands",
        "suggested_endpoint": "GET /api/commands",
    },
    "VALIDATION_ERROR": {
        "retryable": False,
    },
    "NOTHING_TO_UNDO": {
        "retryable": False,
    },
    "NOTHING_TO_REDO": {
        "retryable": False,
    },
    # ==========================================================================
    # Configuration errors (programming errors, fail fast)
    # ==========================================================================
    "UNKNOWN_COMMAND": {
        "retryable": False,
        "suggested_action": "list_commands",
        "suggested_endpoint": "GET /api/commands",
    },
    "UNKNOWN_ANIMATION_PRESET": {
        "retryable": False,
        "suggested_fix": "Use a preset name from list_animation_presets",
    },
    "UNKNOWN_SPRING_PRESET": {
        "retryable": False,
        "suggested_fix": "Use one of: smooth, snappy, heavy, bouncy, gentle, wobbly",
    },
    "UNKNOWN_TRANSITION_TYPE": {
        "retryable": False,
        "suggested_fix": "Use one of: fade, slide, curtain, wheel, flip, wipe, zoom, motion-blur",
    },
    "UNKNOWN_EASING": {
        "retryable": False,
        "suggested_fix": "Use one of: linear, ease-in, ease-out, ease-in-out, spring",
    },
    "UNKNOWN_TRACK_TYPE": {
        "retryable": False,
    },
    "UNKNOWN_MOTION_PATH": {
        "retryable": False,
    },
    "UNKNOWN_CAMERA_MOVEMENT": {
        "retryable": False,
        "suggested_fix": "Use one of: zoom-in, zoom-out, pan-left, pan-right, pan-up, pan-down, shake, drift, ken-burns",
    },
    "UNKNOWN_PRESET_CATEGORY": {
        "retryable": False,
        "suggested_fix": "Use one of: entrance, exit, emphasis, motion, filter",
    },
    # ==========================================================================
    # HTTP-level errors
    # ==========================================================================
    "BAD_REQUEST": {
        "retryable": False,
    },
    "NOT_FOUND": {
        "retryable": False,
    },
    "INTERNAL_ERROR": {
        "retryable": True,
        "suggested_action": "retry_with_backoff",
        "parameters": {"delay_ms": 2000, "max_retries": 2},
    },
}


def get_error_spec(code: str) -> ErrorCodeSpec:
    """Get the specification for an error code.

    Args:
        code: Error code string (e.g., "TRACK_NOT_FOUND")

    Returns:
        ErrorCodeSpec with retryable flag and optional suggested action.
        Returns a non-retryable spec for unknown codes.
    """
    return ERROR_CODES.get(code, {"retryable": False})


def is_retryable(code: str) -> bool:
    """Check if an error code is retryable."""
    return get_error_spec(code).get("retryable", False)
