"""Exceptions for the timeline engine.

Each exception carries a machine-readable code from
``constants.error_codes`` so the command layer and the HTTP surface can turn
it into an ``ErrorInfo`` with retry hints.

Two families behave differently at the command boundary:

- ``ResourceNotFoundError`` and ``ValidationError`` are caught by the command
  layer and returned as failed ``CommandResult`` objects.
- ``ConfigurationError`` (unknown preset, easing, transition, command ...)
  propagates to the caller. These are programming errors, not user input.
"""

from timeline_engine.constants.error_codes import get_error_spec
from timeline_engine.schemas.envelope import ErrorInfo, ErrorLocation, SuggestedAction


class TimelineError(Exception):
    """Base exception for all timeline engine errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        location: ErrorLocation | None = None,
        suggested_fix: str | None = None,
    ):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.location = location
        self.suggested_fix = suggested_fix
        super().__init__(self.message)

    def to_error_info(self) -> ErrorInfo:
        """Convert exception to ErrorInfo for a command result or API response."""
        spec = get_error_spec(self.code)
        retryable = spec.get("retryable", False)

        suggested_actions: list[SuggestedAction] = []
        if "suggested_action" in spec:
            suggested_actions.append(
                SuggestedAction(
                    action=spec["suggested_action"],
                    endpoint=spec.get("suggested_endpoint"),
                    parameters=spec.get("parameters", {}),
                )
            )

        return ErrorInfo(
            code=self.code,
            message=self.message,
            location=self.location,
            retryable=retryable,
            suggested_fix=self.suggested_fix or spec.get("suggested_fix"),
            suggested_actions=suggested_actions,
        )


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class ResourceNotFoundError(TimelineError):
    """Base class for references to ids that do not exist."""

    status_code = 404


class TrackNotFoundError(ResourceNotFoundError):
    """Track not found."""

    code = "TRACK_NOT_FOUND"
    message = "Track not found"

    def __init__(self, track_id: str | None = None):
        message = f"Track not found: {track_id}" if track_id else self.message
        location = ErrorLocation(track_id=track_id) if track_id else None
        super().__init__(message, location=location)


class ItemNotFoundError(ResourceNotFoundError):
    """Item not found on the given track."""

    code = "ITEM_NOT_FOUND"
    message = "Item not found"

    def __init__(self, item_id: str | None = None, track_id: str | None = None):
        if item_id and track_id:
            message = f"Item not found: {item_id} (track {track_id})"
        elif item_id:
            message = f"Item not found: {item_id}"
        else:
            message = self.message
        location = ErrorLocation(item_id=item_id, track_id=track_id) if item_id else None
        super().__init__(message, location=location)


class SceneNotFoundError(ResourceNotFoundError):
    """Scene not found."""

    code = "SCENE_NOT_FOUND"
    message = "Scene not found"

    def __init__(self, scene_id: str | None = None):
        message = f"Scene not found: {scene_id}" if scene_id else self.message
        location = ErrorLocation(scene_id=scene_id) if scene_id else None
        super().__init__(message, location=location)


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(TimelineError):
    """Base class for input that cannot be clamped into a valid shape."""

    code = "VALIDATION_ERROR"
    status_code = 400


class TrackTypeMismatchError(ValidationError):
    """Item variant does not match the track type."""

    code = "TRACK_TYPE_MISMATCH"
    message = "Item type does not match track type"

    def __init__(self, item_type: str, track_type: str, track_id: str | None = None):
        message = f"Cannot place a '{item_type}' item on a '{track_type}' track"
        super().__init__(message, location=ErrorLocation(field="type", track_id=track_id))


class UnknownPropertyError(ValidationError):
    """Keyframe values name a property the item type cannot animate."""

    code = "UNKNOWN_PROPERTY"
    message = "Unknown animatable property"

    def __init__(self, item_type: str, properties: list[str], item_id: str | None = None):
        names = ", ".join(sorted(properties))
        message = f"Unknown animatable properties for '{item_type}' items: {names}"
        super().__init__(message, location=ErrorLocation(field="keyframes", item_id=item_id))


class InvalidArgumentsError(ValidationError):
    """Command payload could not be parsed."""

    code = "INVALID_ARGUMENTS"
    message = "Invalid command arguments"

    def __init__(self, command: str, detail: str | None = None, field: str | None = None):
        message = f"Invalid arguments for '{command}'"
        if detail:
            message = f"{message}: {detail}"
        location = ErrorLocation(field=field) if field else None
        super().__init__(message, location=location)


class NothingToUndoError(ValidationError):
    code = "NOTHING_TO_UNDO"
    message = "Nothing to undo"


class NothingToRedoError(ValidationError):
    code = "NOTHING_TO_REDO"
    message = "Nothing to redo"


# =============================================================================
# Configuration Errors (raised, never turned into results)
# =============================================================================


class ConfigurationError(TimelineError):
    """Base class for lookups on fixed tables that failed."""

    status_code = 400

    def __init__(self, kind: str, name: str, available: list[str] | None = None):
        message = f"Unknown {kind}: {name}"
        if available:
            message = f"{message}. Available: {', '.join(available)}"
        self.name = name
        super().__init__(message)


class UnknownCommandError(ConfigurationError):
    code = "UNKNOWN_COMMAND"
    status_code = 404

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("command", name, available)


class UnknownAnimationPresetError(ConfigurationError):
    code = "UNKNOWN_ANIMATION_PRESET"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("animation preset", name, available)


class UnknownSpringPresetError(ConfigurationError):
    code = "UNKNOWN_SPRING_PRESET"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("spring preset", name, available)


class UnknownTransitionTypeError(ConfigurationError):
    code = "UNKNOWN_TRANSITION_TYPE"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("transition type", name, available)


class UnknownEasingError(ConfigurationError):
    code = "UNKNOWN_EASING"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("easing", name, available)


class UnknownTrackTypeError(ConfigurationError):
    code = "UNKNOWN_TRACK_TYPE"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("track type", name, available)


class UnknownMotionPathError(ConfigurationError):
    code = "UNKNOWN_MOTION_PATH"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("motion path preset", name, available)


class UnknownCameraMovementError(ConfigurationError):
    code = "UNKNOWN_CAMERA_MOVEMENT"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("camera movement", name, available)


class UnknownPresetCategoryError(ConfigurationError):
    code = "UNKNOWN_PRESET_CATEGORY"

    def __init__(self, name: str, available: list[str] | None = None):
        super().__init__("animation preset category", name, available)
