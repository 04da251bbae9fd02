"""Command execution layer.

``CommandService`` owns the composition document and is the only code that
mutates it. Each command runs against a deep copy of the document and the
copy replaces the live document only when the command succeeds, so readers
never see a half-applied change.

Error policy:
- Unknown ids and unusable input return a failed ``CommandResult``
- Out-of-range numbers are clamped; a warning says what changed
- Unknown preset, easing, transition and track type names raise
"""

import logging
import random
from typing import Any, Callable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from timeline_engine.config import Settings, get_settings
from timeline_engine.exceptions import (
    ConfigurationError,
    InvalidArgumentsError,
    TimelineError,
    TrackTypeMismatchError,
    UnknownCameraMovementError,
    UnknownPresetCategoryError,
    UnknownPropertyError,
)
from timeline_engine.schemas.commands import TargetRef
from timeline_engine.schemas.composition import (
    ITEM_MODELS,
    CompositionDocument,
    Scene,
    SceneTransition,
    TimelineItemBase,
    Track,
    normalize_scenes,
)
from timeline_engine.schemas.envelope import CommandResult
from timeline_engine.schemas.keyframe import (
    PropertyKeyframe,
    check_easing,
    clamp_duration,
    clamp_frame,
    merge_keyframes,
    sort_keyframes,
)
from timeline_engine.schemas.properties import allowed_properties, static_property_value, unknown_properties
from timeline_engine.services.animation_presets import PresetCategory, expand_preset, preset_library
from timeline_engine.services.command_history import CommandHistory
from timeline_engine.services.track_layering import insertion_index, layer_priority
from timeline_engine.utils.motion_path import MotionPath, PathPoint, get_motion_path_preset, path_to_keyframes

logger = logging.getLogger(__name__)

CAMERA_MOVEMENTS = (
    "zoom-in",
    "zoom-out",
    "pan-left",
    "pan-right",
    "pan-up",
    "pan-down",
    "shake",
    "drift",
    "ken-burns",
)

STAGGER_DIRECTIONS = ("forward", "reverse", "center-out", "random")

# Returns (result data, affected ids)
Mutation = Callable[[CompositionDocument], tuple[dict[str, Any], list[str]]]


# =============================================================================
# Pure helpers
# =============================================================================


def correct_absolute_keyframes(
    keyframes: list[PropertyKeyframe],
    threshold: int,
) -> tuple[list[PropertyKeyframe], int]:
    """Shift a batch that looks like absolute composition frames.

    If the earliest frame in the batch is above ``threshold`` the whole batch
    moves down so that frame becomes 0. Returns the keyframes and the shift
    applied (0 when the batch was left alone).
    """
    if not keyframes:
        return [], 0
    earliest = min(kf.frame for kf in keyframes)
    if earliest <= threshold:
        return list(keyframes), 0
    shifted = [kf.model_copy(update={"frame": kf.frame - earliest}) for kf in keyframes]
    return shifted, earliest


def stagger_order(count: int, direction: str, seed: int = 0) -> list[int]:
    """Order in which ``count`` targets start animating."""
    indexes = list(range(count))
    if direction == "forward":
        return indexes
    if direction == "reverse":
        return indexes[::-1]
    if direction == "center-out":
        middle = count // 2
        order: list[int] = []
        for offset in range(count):
            for index in (middle + offset, middle - offset):
                if 0 <= index < count and index not in order:
                    order.append(index)
        return order
    if direction == "random":
        random.Random(seed).shuffle(indexes)
        return indexes
    raise InvalidArgumentsError("add_stagger_animation", f"unknown direction '{direction}', expected one of {', '.join(STAGGER_DIRECTIONS)}", field="direction")


def camera_movement_keyframes(
    movement: str,
    item: TimelineItemBase,
    *,
    intensity: float,
    duration_in_frames: int,
    easing: str,
) -> list[PropertyKeyframe]:
    """Keyframes for one camera movement, frames relative to the movement start."""
    base = intensity * 0.1
    d = duration_in_frames
    x = static_property_value(item, "positionX")
    y = static_property_value(item, "positionY")

    def kf(frame: float, values: dict[str, float], kf_easing: str = easing) -> PropertyKeyframe:
        return PropertyKeyframe(frame=round(frame), values=values, easing=kf_easing)

    if movement == "zoom-in":
        return [kf(0, {"scale": 1}), kf(d, {"scale": 1 + base})]
    if movement == "zoom-out":
        return [kf(0, {"scale": 1}), kf(d, {"scale": 1 - base})]
    if movement == "pan-left":
        return [kf(0, {"positionX": x}), kf(d, {"positionX": x - base})]
    if movement == "pan-right":
        return [kf(0, {"positionX": x}), kf(d, {"positionX": x + base})]
    if movement == "pan-up":
        return [kf(0, {"positionY": y}), kf(d, {"positionY": y - base})]
    if movement == "pan-down":
        return [kf(0, {"positionY": y}), kf(d, {"positionY": y + base})]
    if movement == "shake":
        s = base * 0.5
        return [
            kf(0, {"positionX": x}, "linear"),
            kf(d * 0.2, {"positionX": x - s}, "linear"),
            kf(d * 0.4, {"positionX": x + s}, "linear"),
            kf(d * 0.6, {"positionX": x - s / 2}, "linear"),
            kf(d * 0.8, {"positionX": x + s / 2}, "linear"),
            kf(d, {"positionX": x}, "ease-out"),
        ]
    if movement == "drift":
        return [
            kf(0, {"positionX": x - base / 2, "positionY": y}, "linear"),
            kf(d, {"positionX": x + base / 2, "positionY": y}, "linear"),
        ]
    if movement == "ken-burns":
        return [
            kf(0, {"scale": 1, "positionX": x - base / 2}, "linear"),
            kf(d, {"scale": 1 + base, "positionX": x + base / 2}, "linear"),
        ]
    raise UnknownCameraMovementError(movement, list(CAMERA_MOVEMENTS))


def _field_aliases(model_cls: type[BaseModel]) -> dict[str, str]:
    """Input key in either spelling -> wire alias."""
    aliases: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        alias = info.alias or name
        aliases[name] = alias
        aliases[alias] = alias
    return aliases


def _normalize_keys(
    model_cls: type[BaseModel],
    data: dict[str, Any],
    warnings: list[str],
    *,
    context: str,
) -> dict[str, Any]:
    aliases = _field_aliases(model_cls)
    normalized: dict[str, Any] = {}
    unknown: list[str] = []
    for key, value in data.items():
        alias = aliases.get(key)
        if alias is None:
            unknown.append(key)
            continue
        normalized[alias] = value
    if unknown:
        warnings.append(f"Ignored unknown {context} fields: {', '.join(sorted(unknown))}")
    return normalized


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clamp_warnings(raw: dict[str, Any], item: TimelineItemBase, warnings: list[str]) -> None:
    raw_from = raw.get("from")
    if _is_number(raw_from) and raw_from != item.from_frame:
        warnings.append(f"from {raw_from} clamped to {item.from_frame}")
    raw_duration = raw.get("durationInFrames")
    if _is_number(raw_duration) and raw_duration != item.duration_in_frames:
        warnings.append(f"durationInFrames {raw_duration} clamped to {item.duration_in_frames}")


def _check_properties(item: TimelineItemBase, keyframes: list[PropertyKeyframe]) -> None:
    names = {name for kf in keyframes for name in kf.values}
    unknown = unknown_properties(item.type, names)
    if unknown:
        raise UnknownPropertyError(item.type, unknown, item.id)


def describe_validation_error(exc: PydanticValidationError) -> tuple[str, str | None]:
    errors = exc.errors()
    if not errors:
        return str(exc), None
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    detail = f"{field}: {first['msg']}" if field else first["msg"]
    if len(errors) > 1:
        detail = f"{detail} (+{len(errors) - 1} more)"
    return detail, field


# =============================================================================
# Service
# =============================================================================


class CommandService:
    """Validated mutations of one composition document."""

    def __init__(
        self,
        document: CompositionDocument | None = None,
        *,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.document = document or self._empty_document()
        self.history = CommandHistory(limit=self.settings.history_limit)

    def _empty_document(self) -> CompositionDocument:
        return CompositionDocument(
            fps=self.settings.default_fps,
            width=self.settings.default_width,
            height=self.settings.default_height,
            duration_in_frames=self.settings.default_duration_in_frames,
        )

    # =========================================================================
    # Execution
    # =========================================================================

    def _execute(
        self,
        command: str,
        mutate: Mutation,
        warnings: list[str] | None = None,
    ) -> CommandResult:
        """Run ``mutate`` on a draft and commit it if nothing went wrong."""
        warnings = warnings if warnings is not None else []
        draft = self.document.model_copy(deep=True)
        try:
            data, affected_ids = mutate(draft)
        except ConfigurationError:
            raise
        except TimelineError as exc:
            return self._failure(command, exc, warnings)
        except PydanticValidationError as exc:
            detail, field = describe_validation_error(exc)
            return self._failure(command, InvalidArgumentsError(command, detail, field), warnings)

        self.history.record(command, self.document, affected_ids)
        self.document = draft
        logger.info(f"Command {command} applied (affected={affected_ids})")
        result = CommandResult.ok(data, warnings=warnings)
        result.command = command
        return result

    def _query(self, command: str, data: dict[str, Any]) -> CommandResult:
        result = CommandResult.ok(data)
        result.command = command
        return result

    def _failure(self, command: str, exc: TimelineError, warnings: list[str]) -> CommandResult:
        logger.warning(f"Command {command} failed: {exc.code}: {exc.message}")
        result = CommandResult.fail(exc.to_error_info(), warnings=warnings)
        result.command = command
        return result

    def load_document(self, payload: dict[str, Any]) -> CommandResult:
        """Replace the whole document, e.g. when a session starts. Undoable."""
        command = "load_composition"
        try:
            loaded = CompositionDocument.from_payload(payload)
        except PydanticValidationError as exc:
            detail, field = describe_validation_error(exc)
            return self._failure(command, InvalidArgumentsError(command, detail, field), [])
        except InvalidArgumentsError as exc:
            return self._failure(command, exc, [])

        self.history.record(command, self.document, [loaded.id])
        self.document = loaded
        logger.info(f"Loaded composition {loaded.id} ({len(loaded.tracks)} tracks, {len(loaded.scenes)} scenes)")
        return self._query(
            command,
            {"compositionId": loaded.id, "tracks": len(loaded.tracks), "scenes": len(loaded.scenes)},
        )

    # =========================================================================
    # Tracks
    # =========================================================================

    def add_track(
        self,
        name: str = "",
        track_type: str = "text",
        *,
        locked: bool = False,
        visible: bool = True,
    ) -> CommandResult:
        """Create a track at the index its type's layer priority gives it."""
        layer_priority(track_type)

        def mutate(doc: CompositionDocument):
            track = Track(name=name or track_type.replace("-", " ").title(), type=track_type, locked=locked, visible=visible)
            index = insertion_index(doc.tracks, track_type)
            doc.tracks.insert(index, track)
            return {"trackId": track.id, "index": index}, [track.id]

        return self._execute("add_track", mutate)

    def update_track(
        self,
        track_id: str,
        *,
        name: str | None = None,
        locked: bool | None = None,
        visible: bool | None = None,
    ) -> CommandResult:
        def mutate(doc: CompositionDocument):
            track = doc.find_track(track_id)
            if name is not None:
                track.name = name
            if locked is not None:
                track.locked = locked
            if visible is not None:
                track.visible = visible
            return {"trackId": track.id, "name": track.name, "locked": track.locked, "visible": track.visible}, [track.id]

        return self._execute("update_track", mutate)

    def remove_track(self, track_id: str) -> CommandResult:
        """Remove a track and every item on it."""

        def mutate(doc: CompositionDocument):
            index = doc.track_index(track_id)
            track = doc.tracks.pop(index)
            return {"trackId": track.id, "removedItems": len(track.items)}, [track.id] + [item.id for item in track.items]

        return self._execute("remove_track", mutate)

    def reorder_track(self, track_id: str, new_index: int) -> CommandResult:
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            current = doc.track_index(track_id)
            target = min(max(0, new_index), len(doc.tracks) - 1)
            if target != new_index:
                warnings.append(f"newIndex {new_index} clamped to {target}")
            track = doc.tracks.pop(current)
            doc.tracks.insert(target, track)
            return {"trackId": track_id, "index": target, "order": [t.id for t in doc.tracks]}, [track_id]

        return self._execute("reorder_track", mutate, warnings)

    # =========================================================================
    # Items
    # =========================================================================

    def _build_item(self, item_type: str, spec: dict[str, Any], warnings: list[str]) -> TimelineItemBase:
        model_cls = ITEM_MODELS[item_type]
        data = _normalize_keys(model_cls, spec, warnings, context=f"{item_type} item")
        data["type"] = item_type
        item = model_cls.model_validate(data)
        _check_properties(item, item.keyframes)
        _clamp_warnings(data, item, warnings)
        return item

    def add_item(self, track_id: str, item_spec: dict[str, Any]) -> CommandResult:
        """Place a new item on an existing track. The item gets a fresh id."""
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            track = doc.find_track(track_id)
            spec = {key: value for key, value in item_spec.items() if key != "id"}
            item_type = spec.pop("type", track.type)
            if item_type != track.type:
                raise TrackTypeMismatchError(str(item_type), track.type, track.id)
            item = self._build_item(item_type, spec, warnings)
            track.items.append(item)
            return {"trackId": track.id, "itemId": item.id}, [item.id]

        return self._execute("add_item", mutate, warnings)

    def add_element(self, item_spec: dict[str, Any], *, track_name: str | None = None) -> CommandResult:
        """Create a track for the item's type and add the item to it."""
        warnings: list[str] = []
        item_type = item_spec.get("type")
        if not isinstance(item_type, str):
            return self._failure(
                "add_element",
                InvalidArgumentsError("add_element", "item.type is required", field="item.type"),
                warnings,
            )
        layer_priority(item_type)

        def mutate(doc: CompositionDocument):
            spec = {key: value for key, value in item_spec.items() if key not in ("id", "type")}
            item = self._build_item(item_type, spec, warnings)
            track = Track(name=track_name or item_type.replace("-", " ").title(), type=item_type)
            track.items.append(item)
            index = insertion_index(doc.tracks, item_type)
            doc.tracks.insert(index, track)
            return {"trackId": track.id, "itemId": item.id, "index": index}, [track.id, item.id]

        return self._execute("add_element", mutate, warnings)

    def update_item(self, track_id: str, item_id: str, updates: dict[str, Any]) -> CommandResult:
        """Merge fields into an item.

        ``id`` and ``type`` cannot change. A ``keyframes`` update replaces the
        list, which is re-sorted with spring fields stripped where unused.
        """
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            track = doc.find_track(track_id)
            item = track.find_item(item_id)
            changes = dict(updates)
            for key in ("id", "type"):
                if key in changes:
                    changes.pop(key)
                    warnings.append(f"{key} is immutable; ignored")

            model_cls = type(item)
            changes = _normalize_keys(model_cls, changes, warnings, context=f"{item.type} item")
            merged = {**item.model_dump(by_alias=True), **changes}
            updated = model_cls.model_validate(merged)
            _check_properties(updated, updated.keyframes)
            _clamp_warnings(changes, updated, warnings)

            index = track.items.index(item)
            track.items[index] = updated
            return {"trackId": track.id, "itemId": updated.id, "updated": sorted(changes)}, [updated.id]

        return self._execute("update_item", mutate, warnings)

    def remove_item(self, track_id: str, item_id: str) -> CommandResult:
        def mutate(doc: CompositionDocument):
            track, item = doc.find_item(track_id, item_id)
            track.items.remove(item)
            return {"trackId": track.id, "itemId": item.id}, [item.id]

        return self._execute("remove_item", mutate)

    def move_item(self, from_track_id: str, to_track_id: str, item_id: str, new_from: int) -> CommandResult:
        """Move an item in time and optionally to another track of its type."""
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            source, item = doc.find_item(from_track_id, item_id)
            destination = doc.find_track(to_track_id)
            if item.type != destination.type:
                raise TrackTypeMismatchError(item.type, destination.type, destination.id)

            start = clamp_frame(new_from)
            if start != new_from:
                warnings.append(f"newFrom {new_from} clamped to {start}")
            item.from_frame = start
            if source is not destination:
                source.items.remove(item)
                destination.items.append(item)
            return {"itemId": item.id, "trackId": destination.id, "from": start}, [item.id]

        return self._execute("move_item", mutate, warnings)

    def assign_item_to_scene(self, track_id: str, item_id: str, scene_id: str | None = None) -> CommandResult:
        """Tag an item with a scene. ``None`` unassigns it."""

        def mutate(doc: CompositionDocument):
            _, item = doc.find_item(track_id, item_id)
            if scene_id is not None:
                doc.find_scene(scene_id)
            item.scene_id = scene_id
            return {"trackId": track_id, "itemId": item.id, "sceneId": scene_id}, [item.id]

        return self._execute("assign_item_to_scene", mutate)

    # =========================================================================
    # Keyframes and animation
    # =========================================================================

    def add_keyframes_to_item(
        self,
        track_id: str,
        item_id: str,
        keyframes: list[PropertyKeyframe | dict[str, Any]],
    ) -> CommandResult:
        """Merge keyframes into an item.

        Frames are item-relative. A batch that starts past the absolute-frame
        threshold is shifted to start at 0 first. Keyframes on an existing
        frame merge into it, incoming values winning.
        """
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            _, item = doc.find_item(track_id, item_id)
            incoming = [
                kf if isinstance(kf, PropertyKeyframe) else PropertyKeyframe.model_validate(kf)
                for kf in keyframes
            ]
            if not incoming:
                raise InvalidArgumentsError("add_keyframes_to_item", "no keyframes given", "keyframes")
            _check_properties(item, incoming)

            corrected, shift = correct_absolute_keyframes(incoming, self.settings.absolute_frame_threshold)
            if shift:
                warnings.append(f"Keyframes looked like absolute frames; shifted back by {shift}")
            item.keyframes = merge_keyframes(item.keyframes, corrected)
            return {"itemId": item.id, "keyframeCount": len(item.keyframes), "shiftedBy": shift}, [item.id]

        return self._execute("add_keyframes_to_item", mutate, warnings)

    def apply_animation_preset(
        self,
        track_id: str,
        item_id: str,
        preset: str,
        *,
        duration_in_frames: int | None = None,
        intensity: float | None = None,
    ) -> CommandResult:
        """Replace an item's keyframes with an expanded preset.

        Preset positions are authored around the frame centre and are moved
        onto the item's own position.
        """
        keyframes = expand_preset(preset, duration_in_frames=duration_in_frames, intensity=intensity)

        def mutate(doc: CompositionDocument):
            _, item = doc.find_item(track_id, item_id)
            _check_properties(item, keyframes)
            offsets = {
                "positionX": static_property_value(item, "positionX") - 0.5,
                "positionY": static_property_value(item, "positionY") - 0.5,
            }
            recentred = []
            for kf in keyframes:
                values = {
                    name: value + offsets.get(name, 0.0)
                    for name, value in kf.values.items()
                }
                recentred.append(kf.model_copy(update={"values": values}))
            item.keyframes = sort_keyframes(recentred)
            return {"itemId": item.id, "preset": preset, "keyframeCount": len(recentred)}, [item.id]

        return self._execute("apply_animation_preset", mutate)

    def _resolve_targets(self, doc: CompositionDocument, targets: list[TargetRef | dict[str, Any]]) -> list[TimelineItemBase]:
        items = []
        for target in targets:
            ref = target if isinstance(target, TargetRef) else TargetRef.model_validate(target)
            if ref.track_id is not None:
                _, item = doc.find_item(ref.track_id, ref.item_id)
            else:
                _, item = doc.locate_item(ref.item_id)
            items.append(item)
        return items

    def add_camera_movement(
        self,
        movement: str,
        *,
        targets: list[TargetRef | dict[str, Any]] | None = None,
        intensity: float = 0.5,
        duration_in_frames: int = 90,
        start_frame: int = 0,
        easing: str = "ease-out",
    ) -> CommandResult:
        """Animate items as if the camera moved.

        ``start_frame`` is an absolute composition frame; keyframes land on
        each item at its relative offset. Without targets every visual item
        moves.
        """
        if movement not in CAMERA_MOVEMENTS:
            raise UnknownCameraMovementError(movement, list(CAMERA_MOVEMENTS))
        check_easing(easing)
        warnings: list[str] = []
        if intensity < 0:
            warnings.append(f"intensity {intensity} clamped to 0")
            intensity = 0.0
        duration = clamp_duration(duration_in_frames)
        start = clamp_frame(start_frame)

        def mutate(doc: CompositionDocument):
            if targets is None:
                items = [item for track, item in doc.iter_items() if track.type != "audio"]
            else:
                items = self._resolve_targets(doc, targets)
            if not items:
                warnings.append("No items to apply the camera movement to")

            for item in items:
                keyframes = camera_movement_keyframes(
                    movement,
                    item,
                    intensity=intensity,
                    duration_in_frames=duration,
                    easing=easing,
                )
                _check_properties(item, keyframes)
                offset = start - item.from_frame
                shifted = [kf.model_copy(update={"frame": max(0, kf.frame + offset)}) for kf in keyframes]
                item.keyframes = merge_keyframes(item.keyframes, shifted)

            applied = [item.id for item in items]
            return {"type": movement, "appliedTo": applied}, applied

        return self._execute("add_camera_movement", mutate, warnings)

    def add_stagger_animation(
        self,
        targets: list[TargetRef | dict[str, Any]],
        property_name: str,
        from_value: float,
        to_value: float,
        duration_per_item: int = 15,
        stagger_delay: int = 5,
        *,
        direction: str = "forward",
        easing: str = "ease-out",
        seed: int | None = None,
    ) -> CommandResult:
        """Animate one property on several items with offset start frames.

        The ``random`` order is seeded, so the same call always produces the
        same document.
        """
        check_easing(easing)
        duration = clamp_duration(duration_per_item)
        delay = clamp_frame(stagger_delay)

        def mutate(doc: CompositionDocument):
            items = self._resolve_targets(doc, targets)
            order = stagger_order(len(items), direction, seed if seed is not None else 0)
            started = []
            for position, index in enumerate(order):
                item = items[index]
                start = position * delay
                keyframes = [
                    PropertyKeyframe(frame=start, values={property_name: from_value}, easing="linear"),
                    PropertyKeyframe(frame=start + duration, values={property_name: to_value}, easing=easing),
                ]
                _check_properties(item, keyframes)
                item.keyframes = merge_keyframes(item.keyframes, keyframes)
                started.append(item.id)
            return {"property": property_name, "direction": direction, "order": started}, started

        return self._execute("add_stagger_animation", mutate)

    def add_motion_path(
        self,
        track_id: str,
        item_id: str,
        *,
        preset: str | None = None,
        points: list[PathPoint | dict[str, Any]] | None = None,
        duration_in_frames: int = 60,
        auto_rotate: bool | None = None,
        easing: str = "ease-out",
    ) -> CommandResult:
        """Move an item along a preset or custom bezier path."""
        check_easing(easing)
        path = get_motion_path_preset(preset) if preset else None

        def mutate(doc: CompositionDocument):
            _, item = doc.find_item(track_id, item_id)
            motion_path = path
            if motion_path is None:
                if not points or len(points) < 2:
                    raise InvalidArgumentsError("add_motion_path", "give a preset or at least two points", "points")
                motion_path = MotionPath(points=[
                    point if isinstance(point, PathPoint) else PathPoint.model_validate(point)
                    for point in points
                ])
            if auto_rotate is not None:
                motion_path.auto_rotate = auto_rotate

            keyframes = path_to_keyframes(motion_path, clamp_duration(duration_in_frames), easing=easing)
            _check_properties(item, keyframes)
            item.keyframes = merge_keyframes(item.keyframes, keyframes)
            return {
                "itemId": item.id,
                "pathPoints": len(motion_path.points),
                "keyframeCount": len(keyframes),
                "autoRotate": motion_path.auto_rotate,
            }, [item.id]

        return self._execute("add_motion_path", mutate)

    # =========================================================================
    # Scenes
    # =========================================================================

    def add_scene(
        self,
        name: str = "",
        *,
        duration_in_frames: int | None = None,
        duration_in_seconds: float | None = None,
        background_color: str = "#000000",
        transition: SceneTransition | dict[str, Any] | None = None,
    ) -> CommandResult:
        """Append a scene directly after the last one."""
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            duration = duration_in_frames
            if duration is None:
                seconds = duration_in_seconds
                if seconds is None:
                    seconds = self.settings.default_scene_duration_seconds
                duration = round(seconds * doc.fps)

            incoming = transition
            if isinstance(incoming, dict):
                incoming = SceneTransition.model_validate(incoming)
            if not doc.scenes and incoming is not None:
                warnings.append("The first scene cannot have a transition; dropped")
                incoming = None

            start = doc.scenes[-1].end_frame if doc.scenes else 0
            scene = Scene(
                name=name or f"Scene {len(doc.scenes) + 1}",
                start_frame=start,
                duration_in_frames=duration,
                background_color=background_color,
                transition=incoming,
            )
            doc.scenes.append(scene)
            return {
                "sceneId": scene.id,
                "name": scene.name,
                "startFrame": scene.start_frame,
                "durationInFrames": scene.duration_in_frames,
            }, [scene.id]

        return self._execute("add_scene", mutate, warnings)

    def update_scene(
        self,
        scene_id: str,
        *,
        name: str | None = None,
        background_color: str | None = None,
        duration_in_frames: int | None = None,
        start_frame: int | None = None,
    ) -> CommandResult:
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            index = doc.scene_index(scene_id)
            changes = {
                "name": name,
                "backgroundColor": background_color,
                "durationInFrames": duration_in_frames,
                "startFrame": start_frame,
            }
            changes = {key: value for key, value in changes.items() if value is not None}
            updated = Scene.model_validate({**doc.scenes[index].model_dump(by_alias=True), **changes})
            had_transition = {scene.id for scene in doc.scenes if scene.transition is not None}
            doc.scenes[index] = updated

            doc.scenes = normalize_scenes(doc.scenes)
            for scene in doc.scenes:
                if scene.id in had_transition and scene.transition is None:
                    warnings.append(f"Scene '{scene.name}' is now first; its transition was dropped")
            return {"sceneId": scene_id, "index": doc.scene_index(scene_id)}, [scene_id]

        return self._execute("update_scene", mutate, warnings)

    def set_scene_transition(
        self,
        scene_id: str,
        transition: SceneTransition | dict[str, Any] | None = None,
    ) -> CommandResult:
        """Set or clear the transition into a scene."""
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            index = doc.scene_index(scene_id)
            incoming = transition
            if isinstance(incoming, dict):
                incoming = SceneTransition.model_validate(incoming)
            if index == 0 and incoming is not None:
                warnings.append("The first scene cannot have a transition; dropped")
                incoming = None
            doc.scenes[index].transition = incoming
            return {
                "sceneId": scene_id,
                "transition": incoming.to_payload() if incoming else None,
            }, [scene_id]

        return self._execute("set_scene_transition", mutate, warnings)

    def remove_scene(self, scene_id: str) -> CommandResult:
        """Remove a scene. Items assigned to it are unassigned, not deleted."""

        def mutate(doc: CompositionDocument):
            index = doc.scene_index(scene_id)
            doc.scenes.pop(index)
            unassigned = []
            for _, item in doc.iter_items():
                if item.scene_id == scene_id:
                    item.scene_id = None
                    unassigned.append(item.id)
            doc.scenes = normalize_scenes(doc.scenes)
            return {"sceneId": scene_id, "unassignedItems": len(unassigned)}, [scene_id] + unassigned

        return self._execute("remove_scene", mutate)

    def list_scenes(self) -> CommandResult:
        fps = self.document.fps
        scenes = [
            {
                "id": scene.id,
                "name": scene.name,
                "startFrame": scene.start_frame,
                "durationInFrames": scene.duration_in_frames,
                "durationInSeconds": round(scene.duration_in_frames / fps, 2),
                "backgroundColor": scene.background_color,
                "hasTransition": scene.transition is not None,
                "transitionType": scene.transition.type if scene.transition else None,
            }
            for scene in self.document.scenes
        ]
        return self._query("list_scenes", {"count": len(scenes), "scenes": scenes})

    # =========================================================================
    # Composition
    # =========================================================================

    def update_composition(
        self,
        *,
        name: str | None = None,
        duration_in_frames: int | None = None,
        fps: int | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> CommandResult:
        warnings: list[str] = []

        def mutate(doc: CompositionDocument):
            if name is not None:
                doc.name = name
            for field, value in (
                ("duration_in_frames", duration_in_frames),
                ("fps", fps),
                ("width", width),
                ("height", height),
            ):
                if value is None:
                    continue
                clamped = clamp_duration(value)
                if clamped != value:
                    warnings.append(f"{field} {value} clamped to {clamped}")
                setattr(doc, field, clamped)
            return {
                "name": doc.name,
                "durationInFrames": doc.duration_in_frames,
                "fps": doc.fps,
                "width": doc.width,
                "height": doc.height,
            }, [doc.id]

        return self._execute("update_composition", mutate, warnings)

    def clear_composition(self) -> CommandResult:
        """Remove every track and scene. Settings are kept."""

        def mutate(doc: CompositionDocument):
            counts = {
                "removedTracks": len(doc.tracks),
                "removedItems": doc.item_count,
                "removedScenes": len(doc.scenes),
            }
            doc.tracks = []
            doc.scenes = []
            return counts, [doc.id]

        return self._execute("clear_composition", mutate)

    # =========================================================================
    # Catalogues
    # =========================================================================

    def list_animation_presets(self, category: str | None = None) -> CommandResult:
        """Preset catalogue, optionally for one category."""
        selected = None
        if category:
            try:
                selected = PresetCategory(category)
            except ValueError:
                raise UnknownPresetCategoryError(category, [c.value for c in PresetCategory]) from None
        presets = [preset.to_dict() for preset in preset_library.list_presets(selected)]
        return self._query("list_animation_presets", {"count": len(presets), "presets": presets})

    def list_properties(self, item_type: str) -> CommandResult:
        """Animatable property names for an item type."""
        layer_priority(item_type)
        return self._query(
            "list_properties",
            {"type": item_type, "properties": sorted(allowed_properties(item_type))},
        )

    # =========================================================================
    # History
    # =========================================================================

    def undo(self) -> CommandResult:
        try:
            record, snapshot = self.history.undo(self.document)
        except TimelineError as exc:
            return self._failure("undo", exc, [])
        self.document = snapshot
        return self._query("undo", {"undone": record.to_dict()})

    def redo(self) -> CommandResult:
        try:
            record, snapshot = self.history.redo(self.document)
        except TimelineError as exc:
            return self._failure("redo", exc, [])
        self.document = snapshot
        return self._query("redo", {"redone": record.to_dict()})

    def get_history(self, limit: int = 20) -> CommandResult:
        return self._query(
            "get_history",
            {
                "operations": [record.to_dict() for record in self.history.get_history(limit)],
                "canUndo": self.history.can_undo,
                "canRedo": self.history.can_redo,
            },
        )
