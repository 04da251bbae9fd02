"""Name-based command dispatch for agent tool calls.

An agent sends ``(command_name, arguments)``. The dispatcher looks the name up
in ``COMMAND_REGISTRY``, parses the arguments into the command's payload model
and calls the typed ``CommandService`` method. Unknown names raise
``UnknownCommandError``; arguments that do not parse produce an
``INVALID_ARGUMENTS`` failure result.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from timeline_engine.exceptions import InvalidArgumentsError, UnknownCommandError
from timeline_engine.schemas.commands import (
    AddCameraMovementArgs,
    AddElementArgs,
    AddItemArgs,
    AddKeyframesArgs,
    AddMotionPathArgs,
    AddSceneArgs,
    AddStaggerAnimationArgs,
    AddTrackArgs,
    ApplyAnimationPresetArgs,
    AssignItemToSceneArgs,
    CommandArgs,
    GetHistoryArgs,
    ListAnimationPresetsArgs,
    ListPropertiesArgs,
    MoveItemArgs,
    NoArgs,
    RemoveItemArgs,
    RemoveSceneArgs,
    RemoveTrackArgs,
    ReorderTrackArgs,
    SetSceneTransitionArgs,
    UpdateCompositionArgs,
    UpdateItemArgs,
    UpdateSceneArgs,
    UpdateTrackArgs,
)
from timeline_engine.schemas.envelope import CommandResult
from timeline_engine.services.command_service import CommandService, describe_validation_error

logger = logging.getLogger(__name__)

Handler = Callable[[CommandService, Any], CommandResult]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    args_model: type[CommandArgs]
    handler: Handler
    description: str

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": self.args_model.model_json_schema(by_alias=True),
        }


COMMAND_REGISTRY: dict[str, CommandSpec] = {}


def command(name: str, args_model: type[CommandArgs], description: str):
    """Register a handler under an agent-facing command name."""

    def decorator(handler: Handler) -> Handler:
        COMMAND_REGISTRY[name] = CommandSpec(name, args_model, handler, description)
        return handler

    return decorator


# =============================================================================
# Tracks
# =============================================================================


@command("add_track", AddTrackArgs, "Create a track placed by its layer priority")
def _add_track(service: CommandService, args: AddTrackArgs) -> CommandResult:
    return service.add_track(args.name, args.track_type, locked=args.locked, visible=args.visible)


@command("update_track", UpdateTrackArgs, "Rename, lock or hide a track")
def _update_track(service: CommandService, args: UpdateTrackArgs) -> CommandResult:
    return service.update_track(args.track_id, name=args.name, locked=args.locked, visible=args.visible)


@command("remove_track", RemoveTrackArgs, "Remove a track and its items")
def _remove_track(service: CommandService, args: RemoveTrackArgs) -> CommandResult:
    return service.remove_track(args.track_id)


@command("reorder_track", ReorderTrackArgs, "Move a track to a new stacking index")
def _reorder_track(service: CommandService, args: ReorderTrackArgs) -> CommandResult:
    return service.reorder_track(args.track_id, args.new_index)


# =============================================================================
# Items
# =============================================================================


@command("add_item", AddItemArgs, "Add an item to an existing track of the same type")
def _add_item(service: CommandService, args: AddItemArgs) -> CommandResult:
    return service.add_item(args.track_id, args.item)


@command("add_element", AddElementArgs, "Add an item on a new track of its type")
def _add_element(service: CommandService, args: AddElementArgs) -> CommandResult:
    return service.add_element(args.item, track_name=args.track_name)


@command("update_item", UpdateItemArgs, "Merge fields into an item")
def _update_item(service: CommandService, args: UpdateItemArgs) -> CommandResult:
    return service.update_item(args.track_id, args.item_id, args.updates)


@command("remove_item", RemoveItemArgs, "Remove an item")
def _remove_item(service: CommandService, args: RemoveItemArgs) -> CommandResult:
    return service.remove_item(args.track_id, args.item_id)


@command("move_item", MoveItemArgs, "Move an item in time or to another track")
def _move_item(service: CommandService, args: MoveItemArgs) -> CommandResult:
    return service.move_item(args.from_track_id, args.to_track_id, args.item_id, args.new_from)


@command("assign_item_to_scene", AssignItemToSceneArgs, "Tag an item with a scene, or untag it")
def _assign_item_to_scene(service: CommandService, args: AssignItemToSceneArgs) -> CommandResult:
    return service.assign_item_to_scene(args.track_id, args.item_id, args.scene_id)


# =============================================================================
# Animation
# =============================================================================


@command("add_keyframes_to_item", AddKeyframesArgs, "Merge item-relative keyframes into an item")
@command("add_keyframes", AddKeyframesArgs, "Short name for add_keyframes_to_item")
def _add_keyframes(service: CommandService, args: AddKeyframesArgs) -> CommandResult:
    return service.add_keyframes_to_item(args.track_id, args.item_id, args.keyframes)


@command("apply_animation_preset", ApplyAnimationPresetArgs, "Replace an item's keyframes with a named preset")
def _apply_animation_preset(service: CommandService, args: ApplyAnimationPresetArgs) -> CommandResult:
    return service.apply_animation_preset(
        args.track_id,
        args.item_id,
        args.preset,
        duration_in_frames=args.duration_in_frames,
        intensity=args.intensity,
    )


@command("add_camera_movement", AddCameraMovementArgs, "Zoom, pan, shake or drift items like a camera")
def _add_camera_movement(service: CommandService, args: AddCameraMovementArgs) -> CommandResult:
    return service.add_camera_movement(
        args.movement,
        targets=args.targets,
        intensity=args.intensity,
        duration_in_frames=args.duration_in_frames,
        start_frame=args.start_frame,
        easing=args.easing,
    )


@command("add_stagger_animation", AddStaggerAnimationArgs, "Animate one property across items with offset starts")
def _add_stagger_animation(service: CommandService, args: AddStaggerAnimationArgs) -> CommandResult:
    return service.add_stagger_animation(
        args.targets,
        args.property_name,
        args.from_value,
        args.to_value,
        args.duration_per_item,
        args.stagger_delay,
        direction=args.direction,
        easing=args.easing,
        seed=args.seed,
    )


@command("add_motion_path", AddMotionPathArgs, "Move an item along a bezier path")
def _add_motion_path(service: CommandService, args: AddMotionPathArgs) -> CommandResult:
    return service.add_motion_path(
        args.track_id,
        args.item_id,
        preset=args.preset,
        points=args.points,
        duration_in_frames=args.duration_in_frames,
        auto_rotate=args.auto_rotate,
        easing=args.easing,
    )


# =============================================================================
# Scenes
# =============================================================================


@command("add_scene", AddSceneArgs, "Append a scene after the last one")
def _add_scene(service: CommandService, args: AddSceneArgs) -> CommandResult:
    return service.add_scene(
        args.name,
        duration_in_frames=args.duration_in_frames,
        duration_in_seconds=args.duration_in_seconds,
        background_color=args.background_color,
        transition=args.transition,
    )


@command("update_scene", UpdateSceneArgs, "Rename, recolour, resize or move a scene")
def _update_scene(service: CommandService, args: UpdateSceneArgs) -> CommandResult:
    return service.update_scene(
        args.scene_id,
        name=args.name,
        background_color=args.background_color,
        duration_in_frames=args.duration_in_frames,
        start_frame=args.start_frame,
    )


@command("set_scene_transition", SetSceneTransitionArgs, "Set or clear the transition into a scene")
def _set_scene_transition(service: CommandService, args: SetSceneTransitionArgs) -> CommandResult:
    return service.set_scene_transition(args.scene_id, args.transition)


@command("remove_scene", RemoveSceneArgs, "Remove a scene and unassign its items")
def _remove_scene(service: CommandService, args: RemoveSceneArgs) -> CommandResult:
    return service.remove_scene(args.scene_id)


@command("list_scenes", NoArgs, "List scenes with timing and transitions")
def _list_scenes(service: CommandService, args: NoArgs) -> CommandResult:
    return service.list_scenes()


# =============================================================================
# Composition and history
# =============================================================================


@command("update_composition", UpdateCompositionArgs, "Change the name, duration, fps or size")
def _update_composition(service: CommandService, args: UpdateCompositionArgs) -> CommandResult:
    return service.update_composition(
        name=args.name,
        duration_in_frames=args.duration_in_frames,
        fps=args.fps,
        width=args.width,
        height=args.height,
    )


@command("clear_composition", NoArgs, "Remove every track and scene")
def _clear_composition(service: CommandService, args: NoArgs) -> CommandResult:
    return service.clear_composition()


@command("undo", NoArgs, "Undo the last command")
def _undo(service: CommandService, args: NoArgs) -> CommandResult:
    return service.undo()


@command("redo", NoArgs, "Redo the last undone command")
def _redo(service: CommandService, args: NoArgs) -> CommandResult:
    return service.redo()


@command("get_history", GetHistoryArgs, "Recent commands, newest first")
def _get_history(service: CommandService, args: GetHistoryArgs) -> CommandResult:
    return service.get_history(args.limit)


# =============================================================================
# Catalogues
# =============================================================================


@command("list_animation_presets", ListAnimationPresetsArgs, "Animation presets, optionally for one category")
def _list_animation_presets(service: CommandService, args: ListAnimationPresetsArgs) -> CommandResult:
    return service.list_animation_presets(args.category)


@command("list_properties", ListPropertiesArgs, "Animatable property names for an item type")
def _list_properties(service: CommandService, args: ListPropertiesArgs) -> CommandResult:
    return service.list_properties(args.item_type)


# =============================================================================
# Dispatcher
# =============================================================================


def get_command_spec(name: str) -> CommandSpec:
    spec = COMMAND_REGISTRY.get(name)
    if spec is None:
        raise UnknownCommandError(name, sorted(COMMAND_REGISTRY))
    return spec


def describe_commands() -> list[dict[str, Any]]:
    """Command names, descriptions and JSON schemas of their arguments."""
    return [COMMAND_REGISTRY[name].describe() for name in sorted(COMMAND_REGISTRY)]


def dump_result(result: CommandResult) -> dict[str, Any]:
    return result.model_dump(mode="json", by_alias=True)


class CommandDispatcher:
    """Routes named commands with untrusted arguments to a ``CommandService``."""

    def __init__(self, service: CommandService):
        self.service = service

    def execute(self, command_name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run one command and return its result with camelCase keys.

        Raises:
            UnknownCommandError: No command has this name
            ConfigurationError: The arguments name an unknown preset, easing,
                transition or track type
        """
        spec = get_command_spec(command_name)
        try:
            args = spec.args_model.model_validate(arguments or {})
        except PydanticValidationError as exc:
            detail, field = describe_validation_error(exc)
            logger.warning(f"Rejected arguments for {command_name}: {detail}")
            error = InvalidArgumentsError(command_name, detail, field)
            result = CommandResult.fail(error.to_error_info())
            result.command = command_name
            return dump_result(result)

        logger.debug(f"Dispatching {command_name}")
        return dump_result(spec.handler(self.service, args))
