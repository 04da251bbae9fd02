"""Composition document data model.

The document is one owned aggregate: ordered tracks (order is z-order, first
is the bottom layer), ordered scenes, and composition settings. Timeline items
are a closed union discriminated on ``type``; a track only holds items of its
own type.

Wire format is camelCase with the item start frame serialized as ``from``.
"""

import uuid
from typing import Annotated, Any, Literal, Union, get_args

from pydantic import Field, field_validator

from timeline_engine.exceptions import (
    InvalidArgumentsError,
    ItemNotFoundError,
    SceneNotFoundError,
    TrackNotFoundError,
    UnknownTransitionTypeError,
)
from timeline_engine.schemas.base import CamelModel
from timeline_engine.schemas.keyframe import (
    AnimationConfig,
    PropertyKeyframe,
    SlideDirection,
    check_easing,
    clamp_duration,
    clamp_frame,
    sort_keyframes,
)

TrackType = Literal[
    "text",
    "image",
    "video",
    "audio",
    "shape",
    "cursor",
    "particles",
    "gradient",
    "component",
    "custom-html",
    "film-grain",
    "vignette",
    "color-grade",
    "blob",
]

TRACK_TYPES: tuple[str, ...] = get_args(TrackType)

TRANSITION_TYPES = ("fade", "slide", "curtain", "wheel", "flip", "wipe", "zoom", "motion-blur")

ClipShape = Literal["none", "circle", "rounded-rect", "hexagon", "diamond"]
DisplaySize = Literal["phone", "laptop", "full"]


def new_id() -> str:
    return str(uuid.uuid4())


class Position(CamelModel):
    """Relative 0-1 coordinates within the composition."""

    x: float = 0.5
    y: float = 0.5


class Size(CamelModel):
    width: float = 1.0
    height: float = 1.0


# =============================================================================
# Timeline items
# =============================================================================


class TimelineItemBase(CamelModel):
    id: str = Field(default_factory=new_id)
    from_frame: int = Field(0, alias="from")
    duration_in_frames: int = 90
    scene_id: str | None = None
    keyframes: list[PropertyKeyframe] = Field(default_factory=list)
    enter_animation: AnimationConfig | None = None
    exit_animation: AnimationConfig | None = None

    @field_validator("from_frame", mode="before")
    @classmethod
    def _clamp_from(cls, value: Any) -> int:
        return clamp_frame(value)

    @field_validator("duration_in_frames", mode="before")
    @classmethod
    def _clamp_duration(cls, value: Any) -> int:
        return clamp_duration(value)

    @field_validator("keyframes", mode="after")
    @classmethod
    def _sort_keyframes(cls, value: list[PropertyKeyframe]) -> list[PropertyKeyframe]:
        return sort_keyframes(value)

    @property
    def end_frame(self) -> int:
        """First frame after the item (exclusive end)."""
        return self.from_frame + self.duration_in_frames

    def is_active_at(self, frame: int) -> bool:
        return self.from_frame <= frame < self.end_frame


class TextItem(TimelineItemBase):
    type: Literal["text"] = "text"
    text: str = ""
    font_family: str = "Inter"
    font_size: float = 48
    color: str = "#ffffff"
    position: Position = Field(default_factory=Position)
    font_weight: int | None = None
    text_align: Literal["left", "center", "right"] | None = None
    background_color: str | None = None
    padding: float | None = None
    border_radius: float | None = None
    text_shadow: str | None = None
    letter_spacing: float | None = None
    line_height: float | None = None


class ImageItem(TimelineItemBase):
    type: Literal["image"] = "image"
    src: str = ""
    position: Position | None = None
    width: float | None = None
    height: float | None = None
    clip_shape: ClipShape | None = None


class MediaItemBase(TimelineItemBase):
    src: str = ""
    volume: float = 1.0
    start_from: int = 0
    position: Position | None = None
    width: float | None = None
    height: float | None = None
    clip_shape: ClipShape | None = None

    @field_validator("volume", mode="before")
    @classmethod
    def _clamp_volume(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 1.0
        return min(1.0, max(0.0, float(value)))

    @field_validator("start_from", mode="before")
    @classmethod
    def _clamp_start_from(cls, value: Any) -> int:
        return clamp_frame(value)


class VideoItem(MediaItemBase):
    type: Literal["video"] = "video"


class AudioItem(MediaItemBase):
    type: Literal["audio"] = "audio"


class ShapeItem(TimelineItemBase):
    type: Literal["shape"] = "shape"
    shape_type: Literal["rectangle", "circle", "line", "gradient", "divider", "badge", "svg"] = "rectangle"
    width: float = 0.2
    height: float = 0.2
    position: Position = Field(default_factory=Position)
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float | None = None
    border_radius: float | None = None
    opacity: float | None = None
    gradient_from: str | None = None
    gradient_to: str | None = None
    gradient_direction: float | None = None
    text: str | None = None
    font_size: float | None = None
    color: str | None = None
    svg_content: str | None = None
    view_box: str | None = None


class CursorKeyframe(CamelModel):
    frame: int = 0
    x: float | None = None
    y: float | None = None
    target: str | None = None
    click: bool = False

    @field_validator("frame", mode="before")
    @classmethod
    def _clamp_frame(cls, value: Any) -> int:
        return clamp_frame(value)


class CursorItem(TimelineItemBase):
    type: Literal["cursor"] = "cursor"
    cursor_keyframes: list[CursorKeyframe] = Field(default_factory=list)
    cursor_style: Literal["pointer", "default", "hand"] | None = None
    click_effect: Literal["ripple", "highlight", "none"] | None = None
    scale: float | None = None

    @field_validator("cursor_keyframes", mode="after")
    @classmethod
    def _sort_cursor_keyframes(cls, value: list[CursorKeyframe]) -> list[CursorKeyframe]:
        return sorted(value, key=lambda kf: kf.frame)


class ParticleItem(TimelineItemBase):
    type: Literal["particles"] = "particles"
    particle_type: Literal["confetti", "sparks", "snow", "bubbles", "stars", "dust"] = "confetti"
    emitter_position: Position = Field(default_factory=Position)
    emitter_size: Size | None = None
    particle_count: int = 50
    colors: list[str] = Field(default_factory=lambda: ["#ffffff"])
    speed: float = 1.0
    gravity: float = 1.0
    spread: float = 360.0
    particle_size: float | None = None
    fade_out: bool | None = None
    rotation: bool | None = None


class GradientColorStop(CamelModel):
    color: str
    offset: float = 0.0


class GradientItem(TimelineItemBase):
    type: Literal["gradient"] = "gradient"
    gradient_type: Literal["linear", "radial", "conic", "mesh"] = "linear"
    colors: list[GradientColorStop] = Field(default_factory=list)
    angle: float = 135.0
    center_x: float | None = None
    center_y: float | None = None
    animate: bool = False
    speed: float | None = None
    position: Position | None = None
    width: float | None = None
    height: float | None = None


class ComponentItem(TimelineItemBase):
    type: Literal["component"] = "component"
    component_id: str = ""
    props: dict[str, Any] = Field(default_factory=dict)
    display_size: DisplaySize | None = None
    container_width: float | None = None
    container_height: float | None = None
    object_fit: Literal["contain", "cover", "fill"] | None = None
    object_position: str | None = None
    position: Position | None = None


class CustomHtmlItem(TimelineItemBase):
    type: Literal["custom-html"] = "custom-html"
    custom_component_id: str | None = None
    html: str = ""
    display_size: DisplaySize | None = None
    background_color: str | None = None
    position: Position | None = None


class FilmGrainItem(TimelineItemBase):
    type: Literal["film-grain"] = "film-grain"
    intensity: float = 0.3
    speed: float = 1.0
    size: float = 1.0
    colored: bool = False
    blend_mode: str = "overlay"


class VignetteItem(TimelineItemBase):
    type: Literal["vignette"] = "vignette"
    intensity: float = 0.5
    size: float = 0.5
    softness: float = 0.5
    color: str = "#000000"
    shape: Literal["circular", "elliptical"] = "circular"


class ColorGradeItem(TimelineItemBase):
    type: Literal["color-grade"] = "color-grade"
    preset: str | None = None
    intensity: float = 1.0
    brightness: float | None = None
    contrast: float | None = None
    saturation: float | None = None
    temperature: float | None = None
    tint: float | None = None


class BlobItem(TimelineItemBase):
    type: Literal["blob"] = "blob"
    colors: list[str] = Field(default_factory=lambda: ["#6366f1", "#ec4899"])
    blob_count: int = 3
    complexity: float = 0.5
    animation_style: Literal["morph", "float", "pulse"] = "morph"
    speed: float = 1.0
    opacity: float = 0.8
    blend_mode: str | None = None
    position: Position | None = None
    scale: float | None = None


TimelineItem = Annotated[
    Union[
        TextItem,
        ImageItem,
        VideoItem,
        AudioItem,
        ShapeItem,
        CursorItem,
        ParticleItem,
        GradientItem,
        ComponentItem,
        CustomHtmlItem,
        FilmGrainItem,
        VignetteItem,
        ColorGradeItem,
        BlobItem,
    ],
    Field(discriminator="type"),
]

ITEM_MODELS: dict[str, type[TimelineItemBase]] = {
    "text": TextItem,
    "image": ImageItem,
    "video": VideoItem,
    "audio": AudioItem,
    "shape": ShapeItem,
    "cursor": CursorItem,
    "particles": ParticleItem,
    "gradient": GradientItem,
    "component": ComponentItem,
    "custom-html": CustomHtmlItem,
    "film-grain": FilmGrainItem,
    "vignette": VignetteItem,
    "color-grade": ColorGradeItem,
    "blob": BlobItem,
}


# =============================================================================
# Tracks and scenes
# =============================================================================


class Track(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    type: TrackType
    locked: bool = False
    visible: bool = True
    items: list[TimelineItem] = Field(default_factory=list)

    def find_item(self, item_id: str) -> TimelineItemBase:
        for item in self.items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(item_id, self.id)


class SceneTransition(CamelModel):
    """Blend into a scene from the one before it."""

    type: str = "fade"
    duration_in_frames: int = 15
    direction: SlideDirection | None = None
    easing: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _check_type(cls, value: Any) -> str:
        if value not in TRANSITION_TYPES:
            raise UnknownTransitionTypeError(str(value), list(TRANSITION_TYPES))
        return value

    @field_validator("duration_in_frames", mode="before")
    @classmethod
    def _clamp_duration(cls, value: Any) -> int:
        return clamp_duration(value)

    @field_validator("easing", mode="before")
    @classmethod
    def _check_easing(cls, value: Any) -> str | None:
        return None if value is None else check_easing(value, allow_spring=False)


class Scene(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    start_frame: int = 0
    duration_in_frames: int = 150
    background_color: str = "#000000"
    transition: SceneTransition | None = None

    @field_validator("start_frame", mode="before")
    @classmethod
    def _clamp_start(cls, value: Any) -> int:
        return clamp_frame(value)

    @field_validator("duration_in_frames", mode="before")
    @classmethod
    def _clamp_duration(cls, value: Any) -> int:
        return clamp_duration(value)

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.duration_in_frames

    def contains(self, frame: int) -> bool:
        return self.start_frame <= frame < self.end_frame


def normalize_scenes(scenes: list[Scene]) -> list[Scene]:
    """Order scenes by start frame and drop the first scene's transition."""
    ordered = sorted(scenes, key=lambda scene: scene.start_frame)
    if ordered and ordered[0].transition is not None:
        ordered[0] = ordered[0].model_copy(update={"transition": None})
    return ordered


# =============================================================================
# Document
# =============================================================================


class CompositionDocument(CamelModel):
    id: str = Field(default_factory=new_id)
    project_id: str | None = None
    name: str = "Untitled composition"
    tracks: list[Track] = Field(default_factory=list)
    scenes: list[Scene] = Field(default_factory=list)
    duration_in_frames: int = 900
    fps: int = 30
    width: int = 1920
    height: int = 1080

    @field_validator("duration_in_frames", "fps", "width", "height", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> int:
        return clamp_duration(value)

    @field_validator("scenes", mode="after")
    @classmethod
    def _normalize_scenes(cls, value: list[Scene]) -> list[Scene]:
        return normalize_scenes(value)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CompositionDocument":
        """Load a persisted document. Missing ids are assigned.

        Raises:
            InvalidArgumentsError: Duplicate ids, or an item on a track of
                another type
        """
        document = cls.model_validate(payload)
        problems = document.integrity_problems()
        if problems:
            field, detail = problems[0]
            if len(problems) > 1:
                detail = f"{detail} (+{len(problems) - 1} more)"
            raise InvalidArgumentsError("load_composition", detail, field)
        return document

    def integrity_problems(self) -> list[tuple[str, str]]:
        """(field path, message) for every duplicate id and misplaced item."""
        problems: list[tuple[str, str]] = []
        track_ids: set[str] = set()
        item_ids: set[str] = set()
        for t, track in enumerate(self.tracks):
            if track.id in track_ids:
                problems.append((f"tracks.{t}.id", f"duplicate track id {track.id}"))
            track_ids.add(track.id)
            for i, item in enumerate(track.items):
                if item.type != track.type:
                    problems.append((
                        f"tracks.{t}.items.{i}.type",
                        f"'{item.type}' item {item.id} on '{track.type}' track {track.id}",
                    ))
                if item.id in item_ids:
                    problems.append((f"tracks.{t}.items.{i}.id", f"duplicate item id {item.id}"))
                item_ids.add(item.id)
        scene_ids: set[str] = set()
        for s, scene in enumerate(self.scenes):
            if scene.id in scene_ids:
                problems.append((f"scenes.{s}.id", f"duplicate scene id {scene.id}"))
            scene_ids.add(scene.id)
        return problems

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_track(self, track_id: str) -> Track:
        for track in self.tracks:
            if track.id == track_id:
                return track
        raise TrackNotFoundError(track_id)

    def track_index(self, track_id: str) -> int:
        for index, track in enumerate(self.tracks):
            if track.id == track_id:
                return index
        raise TrackNotFoundError(track_id)

    def find_item(self, track_id: str, item_id: str) -> tuple[Track, TimelineItemBase]:
        track = self.find_track(track_id)
        return track, track.find_item(item_id)

    def locate_item(self, item_id: str) -> tuple[Track, TimelineItemBase]:
        """Find an item on any track."""
        for track in self.tracks:
            for item in track.items:
                if item.id == item_id:
                    return track, item
        raise ItemNotFoundError(item_id)

    def find_scene(self, scene_id: str) -> Scene:
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        raise SceneNotFoundError(scene_id)

    def scene_index(self, scene_id: str) -> int:
        for index, scene in enumerate(self.scenes):
            if scene.id == scene_id:
                return index
        raise SceneNotFoundError(scene_id)

    def iter_items(self):
        for track in self.tracks:
            for item in track.items:
                yield track, item

    @property
    def item_count(self) -> int:
        return sum(len(track.items) for track in self.tracks)

