"""Keyframe interpolation.

Resolves the value of an animatable property at a frame relative to the
item's start. Frames before the first keyframe hold the first value, frames
after the last hold the last value. Between two keyframes the *arrival*
keyframe's easing shapes the segment. Two keyframes on the same frame are a
jump: the later one applies from that frame on.

Usage:
    from timeline_engine.utils.interpolation import value_at

    opacity = value_at(item, "opacity", 10)
"""

from typing import Iterable

from timeline_engine.schemas.keyframe import PropertyKeyframe
from timeline_engine.schemas.properties import static_property_value
from timeline_engine.utils.easing import ease, lerp, resolve_spring_config, spring_value


def keyframes_for(keyframes: Iterable[PropertyKeyframe], property_name: str) -> list[PropertyKeyframe]:
    """Keyframes that define ``property_name``, in their stored (ascending) order."""
    return [kf for kf in keyframes if property_name in kf.values]


def _segment_value(
    prev: PropertyKeyframe,
    next_: PropertyKeyframe,
    property_name: str,
    frame: float,
    fps: float,
) -> float:
    start = prev.values[property_name]
    end = next_.values[property_name]
    elapsed = frame - prev.frame

    if next_.easing == "spring":
        config = resolve_spring_config(next_.spring_config, next_.spring_preset)
        return start + (end - start) * (1 - spring_value(config, elapsed, fps))

    t = elapsed / (next_.frame - prev.frame)
    return lerp(start, end, ease(next_.easing, t))


def interpolate_keyframes(
    keyframes: list[PropertyKeyframe],
    property_name: str,
    relative_frame: float,
    default_value: float,
    *,
    fps: float = 30,
) -> float:
    """Value of ``property_name`` at ``relative_frame`` from a sorted keyframe list."""
    frames = keyframes_for(keyframes, property_name)
    if not frames:
        return default_value
    if len(frames) == 1 or relative_frame <= frames[0].frame:
        return frames[0].values[property_name]
    if relative_frame >= frames[-1].frame:
        return frames[-1].values[property_name]

    # Half-open brackets: prev.frame <= f < next.frame. A zero-width pair is
    # skipped, so the later keyframe of a duplicate frame wins.
    for prev, next_ in zip(frames, frames[1:]):
        if prev.frame <= relative_frame < next_.frame:
            return _segment_value(prev, next_, property_name, relative_frame, fps)

    return frames[-1].values[property_name]


def value_at(
    item,
    property_name: str,
    relative_frame: float,
    fallback_value: float | None = None,
    *,
    fps: float = 30,
) -> float:
    """Effective value of a property on an item at a relative frame.

    Args:
        item: Any timeline item
        property_name: Animatable property (e.g. "opacity", "positionX")
        relative_frame: Frame offset from the item's start
        fallback_value: Value when no keyframe defines the property.
            Defaults to the item's static value for it.
        fps: Composition frame rate, used by spring segments

    Returns:
        Interpolated value
    """
    if fallback_value is None:
        fallback_value = static_property_value(item, property_name)
    return interpolate_keyframes(
        item.keyframes,
        property_name,
        relative_frame,
        fallback_value,
        fps=fps,
    )


def item_value_at(item, property_name: str, absolute_frame: int, *, fps: float = 30) -> float:
    """value_at() for an absolute composition frame."""
    return value_at(item, property_name, absolute_frame - item.from_frame, fps=fps)


def animated_properties(item) -> list[str]:
    names: set[str] = set()
    for kf in item.keyframes:
        names.update(kf.values.keys())
    return sorted(names)


def values_at(item, relative_frame: float, *, fps: float = 30) -> dict[str, float]:
    """Evaluate every keyframed property of an item at one frame."""
    return {
        name: value_at(item, name, relative_frame, fps=fps)
        for name in animated_properties(item)
    }
