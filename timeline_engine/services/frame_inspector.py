"""Frame inspection.

Collects everything a renderer needs to paint one absolute frame: the scene
blend state, the visual tracks in paint order and, for every item on screen,
its evaluated property values.
"""

import logging
from dataclasses import dataclass, field

from timeline_engine.schemas.composition import CompositionDocument, TimelineItemBase
from timeline_engine.services.scene_transitions import SceneFrame, resolve_scene_at
from timeline_engine.services.track_layering import RenderLayer, layer_order
from timeline_engine.utils.interpolation import animated_properties, value_at
from timeline_engine.utils.item_animation import edge_animation_at, has_edge_animation

logger = logging.getLogger(__name__)

# Always reported for visual items, keyframed or not
BASE_PROPERTIES = ("positionX", "positionY", "scale", "rotation", "opacity")


@dataclass
class ItemState:
    """One on-screen item at the inspected frame."""

    track_id: str
    item_id: str
    item_type: str
    z_index: int
    relative_frame: int
    scene_id: str | None = None
    values: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "trackId": self.track_id,
            "itemId": self.item_id,
            "type": self.item_type,
            "zIndex": self.z_index,
            "relativeFrame": self.relative_frame,
            "sceneId": self.scene_id,
            "values": self.values,
        }


@dataclass
class FrameInspection:
    frame: int
    fps: int
    in_range: bool
    scenes: SceneFrame
    layers: list[RenderLayer] = field(default_factory=list)
    items: list[ItemState] = field(default_factory=list)
    audio: list[ItemState] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "frame": self.frame,
            "fps": self.fps,
            "inRange": self.in_range,
            "scenes": self.scenes.to_dict(),
            "layers": [layer.to_dict() for layer in self.layers],
            "items": [item.to_dict() for item in self.items],
            "audio": [item.to_dict() for item in self.audio],
        }


def _item_values(item: TimelineItemBase, relative_frame: int, fps: int, names: list[str]) -> dict[str, float]:
    return {name: value_at(item, name, relative_frame, fps=fps) for name in names}


def _visual_values(item: TimelineItemBase, relative_frame: int, fps: int) -> dict[str, float]:
    """Keyframed values with the enter/exit animation folded in."""
    names = sorted(set(BASE_PROPERTIES) | set(animated_properties(item)))
    values = _item_values(item, relative_frame, fps, names)
    if has_edge_animation(item):
        edge = edge_animation_at(item, relative_frame, fps=fps)
        values["opacity"] *= edge.opacity
        values["scale"] *= edge.scale
        # Percent of the item's own size
        values["translateX"] = edge.translate_x
        values["translateY"] = edge.translate_y
    return values


def inspect_frame(document: CompositionDocument, frame: int) -> FrameInspection:
    """Everything composed at ``frame``. Hidden tracks are skipped."""
    fps = document.fps
    inspection = FrameInspection(
        frame=frame,
        fps=fps,
        in_range=0 <= frame < document.duration_in_frames,
        scenes=resolve_scene_at(document.scenes, frame),
        layers=layer_order(document.tracks),
    )

    for layer in inspection.layers:
        track = document.find_track(layer.track_id)
        for item in track.items:
            if not item.is_active_at(frame):
                continue
            relative = frame - item.from_frame
            inspection.items.append(ItemState(
                track_id=track.id,
                item_id=item.id,
                item_type=item.type,
                z_index=layer.z_index,
                relative_frame=relative,
                scene_id=item.scene_id,
                values=_visual_values(item, relative, fps),
            ))

    for track in document.tracks:
        if track.type != "audio" or not track.visible:
            continue
        for item in track.items:
            if not item.is_active_at(frame):
                continue
            relative = frame - item.from_frame
            inspection.audio.append(ItemState(
                track_id=track.id,
                item_id=item.id,
                item_type=item.type,
                z_index=-1,
                relative_frame=relative,
                scene_id=item.scene_id,
                values=_item_values(item, relative, fps, ["volume"]),
            ))

    logger.debug(f"Frame {frame}: {len(inspection.items)} items, {len(inspection.audio)} audio")
    return inspection
