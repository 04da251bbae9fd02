"""Enter and exit animations at an item's edges.

An item's ``enterAnimation`` plays over its first ``durationInFrames`` frames
(after an optional stagger delay) and its ``exitAnimation`` over its last.
Both are spring-driven unless the config names a curve easing; the spring is
time-stretched so it settles exactly at the end of the window.

The result multiplies into the item's keyframed opacity and scale. Slide
offsets are percentages of the item's own size.

Usage:
    from timeline_engine.utils.item_animation import edge_animation_at

    state = edge_animation_at(item, relative_frame=3, fps=30)
    state.opacity  # 0..1
"""

from dataclasses import dataclass

from timeline_engine.schemas.keyframe import AnimationConfig
from timeline_engine.utils.easing import ease, interpolate, resolve_spring_config, settle_frames, spring_progress

SLIDE_DISTANCE = 100.0


@dataclass
class EdgeState:
    opacity: float = 1.0
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def combine(self, other: "EdgeState") -> "EdgeState":
        return EdgeState(
            opacity=self.opacity * other.opacity,
            scale=self.scale * other.scale,
            translate_x=self.translate_x + other.translate_x,
            translate_y=self.translate_y + other.translate_y,
        )


def window_progress(config: AnimationConfig, elapsed: float, fps: float) -> float:
    """Progress 0 -> 1 over the config's window, ``elapsed`` frames in."""
    duration = config.duration_in_frames
    if config.easing is not None and config.easing != "spring":
        return ease(config.easing, elapsed / duration)
    if elapsed <= 0:
        return 0.0
    spring = resolve_spring_config(preset=config.spring_preset)
    stretch = max(1, settle_frames(spring, fps)) / duration
    return spring_progress(spring, elapsed * stretch, fps)


def _slide(config: AnimationConfig, amount: float, default_direction: str) -> EdgeState:
    direction = config.direction or default_direction
    sign = 1.0 if direction in ("right", "bottom") else -1.0
    offset = sign * SLIDE_DISTANCE * amount
    if direction in ("left", "right"):
        return EdgeState(translate_x=offset)
    return EdgeState(translate_y=offset)


def enter_state(config: AnimationConfig, frame: float, fps: float) -> EdgeState:
    if config.type == "none":
        return EdgeState()
    delay = config.stagger_delay or 0
    if frame >= delay + config.duration_in_frames:
        return EdgeState()

    if frame < delay:
        # Hidden until the stagger delay has passed
        if config.type == "slide":
            hidden = _slide(config, 1.0, "left")
            hidden.opacity = 0.0
            return hidden
        return EdgeState(opacity=0.0, scale=0.5 if config.type == "scale" else 1.0)

    progress = window_progress(config, frame - delay, fps)
    if config.type == "fade":
        return EdgeState(opacity=progress)
    if config.type == "slide":
        return _slide(config, 1 - progress, "left")
    return EdgeState(opacity=progress, scale=0.5 + 0.5 * progress)


def exit_state(config: AnimationConfig, frame: float, item_duration: int, fps: float) -> EdgeState:
    if config.type == "none":
        return EdgeState()
    frames_from_end = item_duration - frame
    if frames_from_end > config.duration_in_frames:
        return EdgeState()

    progress = window_progress(config, config.duration_in_frames - frames_from_end, fps)
    if config.type == "fade":
        return EdgeState(opacity=1 - progress)
    if config.type == "slide":
        return _slide(config, progress, "right")
    return EdgeState(opacity=interpolate(progress, [0.7, 1], [1, 0]), scale=1 - progress)


def edge_animation_at(item, relative_frame: float, *, fps: float = 30) -> EdgeState:
    """Combined enter and exit state of an item at a relative frame."""
    state = EdgeState()
    if item.enter_animation is not None:
        state = state.combine(enter_state(item.enter_animation, relative_frame, fps))
    if item.exit_animation is not None:
        state = state.combine(exit_state(item.exit_animation, relative_frame, item.duration_in_frames, fps))
    return state


def has_edge_animation(item) -> bool:
    return any(
        config is not None and config.type != "none"
        for config in (item.enter_animation, item.exit_animation)
    )
