"""Typed command payloads.

Every command accepted at the dispatcher boundary parses its argument object
into one of these models first. Keys may be camelCase or snake_case; unknown
keys are rejected so a typo never silently drops an argument.
"""

from typing import Any, Literal

from pydantic import ConfigDict, Field

from timeline_engine.schemas.base import CamelModel
from timeline_engine.schemas.composition import SceneTransition
from timeline_engine.schemas.keyframe import PropertyKeyframe
from timeline_engine.utils.motion_path import PathPoint

StaggerDirection = Literal["forward", "reverse", "center-out", "random"]


class CommandArgs(CamelModel):
    model_config = ConfigDict(extra="forbid")


class TargetRef(CamelModel):
    """An item, optionally qualified by its track."""

    item_id: str
    track_id: str | None = Field(None, description="Searched across all tracks when omitted")


class NoArgs(CommandArgs):
    pass


# =============================================================================
# Tracks
# =============================================================================


class AddTrackArgs(CommandArgs):
    name: str = ""
    track_type: str = Field(alias="type", description="Track type, e.g. text, video, gradient")
    locked: bool = False
    visible: bool = True


class UpdateTrackArgs(CommandArgs):
    track_id: str
    name: str | None = None
    locked: bool | None = None
    visible: bool | None = None


class RemoveTrackArgs(CommandArgs):
    track_id: str


class ReorderTrackArgs(CommandArgs):
    track_id: str
    new_index: int = Field(description="Clamped into [0, trackCount - 1]")


# =============================================================================
# Items
# =============================================================================


class AddItemArgs(CommandArgs):
    track_id: str
    item: dict[str, Any] = Field(description="Item fields; type defaults to the track type")


class AddElementArgs(CommandArgs):
    item: dict[str, Any] = Field(description="Item fields including type")
    track_name: str | None = None


class UpdateItemArgs(CommandArgs):
    track_id: str
    item_id: str
    updates: dict[str, Any]


class RemoveItemArgs(CommandArgs):
    track_id: str
    item_id: str


class MoveItemArgs(CommandArgs):
    from_track_id: str
    to_track_id: str
    item_id: str
    new_from: int = Field(description="New start frame, clamped to >= 0")


class AssignItemToSceneArgs(CommandArgs):
    track_id: str
    item_id: str
    scene_id: str | None = Field(None, description="Omit or null to unassign")


# =============================================================================
# Animation
# =============================================================================


class AddKeyframesArgs(CommandArgs):
    track_id: str
    item_id: str
    keyframes: list[PropertyKeyframe] = Field(description="Frames are relative to the item start")


class ApplyAnimationPresetArgs(CommandArgs):
    track_id: str
    item_id: str
    preset: str
    duration_in_frames: int | None = None
    intensity: float | None = None


class AddCameraMovementArgs(CommandArgs):
    movement: str = Field(alias="type", description="zoom-in, pan-left, shake, ken-burns, ...")
    targets: list[TargetRef] | None = Field(None, description="Defaults to every visual item")
    intensity: float = 0.5
    duration_in_frames: int = 90
    start_frame: int = Field(0, description="Absolute composition frame")
    easing: str = "ease-out"


class AddStaggerAnimationArgs(CommandArgs):
    targets: list[TargetRef] = Field(min_length=1)
    property_name: str = Field(alias="property")
    from_value: float = Field(alias="from")
    to_value: float = Field(alias="to")
    duration_per_item: int = 15
    stagger_delay: int = 5
    direction: StaggerDirection = "forward"
    easing: str = "ease-out"
    seed: int | None = Field(None, description="Seed for the random order")


class AddMotionPathArgs(CommandArgs):
    track_id: str
    item_id: str
    preset: str | None = None
    points: list[PathPoint] | None = Field(None, description="At least two 0-1 points when no preset is given")
    duration_in_frames: int = 60
    auto_rotate: bool | None = None
    easing: str = "ease-out"


# =============================================================================
# Scenes and composition
# =============================================================================


class AddSceneArgs(CommandArgs):
    name: str = ""
    duration_in_frames: int | None = None
    duration_in_seconds: float | None = None
    background_color: str = "#000000"
    transition: SceneTransition | None = None


class UpdateSceneArgs(CommandArgs):
    scene_id: str
    name: str | None = None
    background_color: str | None = None
    duration_in_frames: int | None = None
    start_frame: int | None = None


class SetSceneTransitionArgs(CommandArgs):
    scene_id: str
    transition: SceneTransition | None = None


class RemoveSceneArgs(CommandArgs):
    scene_id: str


class UpdateCompositionArgs(CommandArgs):
    name: str | None = None
    duration_in_frames: int | None = None
    fps: int | None = None
    width: int | None = None
    height: int | None = None


class GetHistoryArgs(CommandArgs):
    limit: int = Field(20, ge=1, le=200)


# =============================================================================
# Catalogues
# =============================================================================


class ListAnimationPresetsArgs(CommandArgs):
    category: Literal["entrance", "exit", "emphasis", "motion", "filter"] | None = None


class ListPropertiesArgs(CommandArgs):
    item_type: str = Field(alias="type", description="Item type, e.g. text, shape, audio")
