"""Scene transition resolution.

Given an absolute frame, decides which scenes are on screen and how each one
looks. A scene with a transition blends in from the scene before it over the
window ``[start_frame, start_frame + transition.duration_in_frames)``. Inside
the window the previous scene is *exiting* and the new one *entering*;
outside it, exactly one scene is *active* or none is.

Every blend function takes the eased progress ``p`` and guarantees:
- p = 0: the exiting scene is untouched, the entering scene is in its
  pre-transition state
- p = 1: the entering scene is untouched, the exiting scene is hidden
"""

from dataclasses import dataclass, field
from typing import Callable

from timeline_engine.exceptions import UnknownTransitionTypeError
from timeline_engine.schemas.composition import Scene, SceneTransition
from timeline_engine.utils.easing import cubic_in, cubic_in_out, cubic_out, ease, interpolate


DEFAULT_TRANSITION_EASING = "ease-in-out"

# Motion blur peaks at this many pixels and shifts the frame by this fraction
MOTION_BLUR_PEAK_PX = 24.0
MOTION_BLUR_OFFSET = 0.05


@dataclass(frozen=True)
class Appearance:
    """How a scene is composited for one frame.

    Translations are fractions of the frame size. ``reveal`` is the visible
    fraction of the frame, growing from ``reveal_from`` (an edge or "center").
    """

    opacity: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0
    rotation: float = 0.0
    rotate_x: float = 0.0
    rotate_y: float = 0.0
    blur: float = 0.0
    reveal: float = 1.0
    reveal_from: str | None = None
    visible: bool = True

    @property
    def is_hidden(self) -> bool:
        return (
            not self.visible
            or self.opacity <= 0.0
            or self.reveal <= 0.0
            or abs(self.translate_x) >= 1.0
            or abs(self.translate_y) >= 1.0
        )

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY

    def to_dict(self) -> dict:
        return {
            "opacity": self.opacity,
            "translateX": self.translate_x,
            "translateY": self.translate_y,
            "scale": self.scale,
            "rotation": self.rotation,
            "rotateX": self.rotate_x,
            "rotateY": self.rotate_y,
            "blur": self.blur,
            "reveal": self.reveal,
            "revealFrom": self.reveal_from,
            "visible": self.visible,
        }


IDENTITY = Appearance()

BlendFunction = Callable[[float, str | None], tuple[Appearance, Appearance]]


# =============================================================================
# Blend functions: (progress, direction) -> (exiting, entering)
# =============================================================================


def _direction_vector(direction: str | None) -> tuple[int, int]:
    # Direction of travel; content moves toward it
    return {
        "left": (-1, 0),
        "right": (1, 0),
        "top": (0, -1),
        "bottom": (0, 1),
    }.get(direction or "left", (-1, 0))


def blend_fade(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    return Appearance(opacity=1 - p), Appearance(opacity=p)


def blend_slide(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    dx, dy = _direction_vector(direction)
    exiting = Appearance(translate_x=dx * p, translate_y=dy * p)
    entering = Appearance(translate_x=-dx * (1 - p), translate_y=-dy * (1 - p))
    return exiting, entering


def blend_wipe(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    edge = {"left": "right", "right": "left", "top": "bottom", "bottom": "top"}[direction or "left"]
    opposite = {"left": "right", "right": "left", "top": "bottom", "bottom": "top"}[edge]
    exiting = Appearance(reveal=1 - p, reveal_from=edge)
    entering = Appearance(reveal=p, reveal_from=opposite)
    return exiting, entering


def blend_curtain(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    """Panels close over the old scene, then open on the new one."""
    if p < 0.5:
        exiting = Appearance(reveal=1 - 2 * p, reveal_from="center")
        entering = Appearance(opacity=0.0, reveal=0.0, reveal_from="center")
    else:
        exiting = Appearance(opacity=0.0, reveal=0.0, reveal_from="center")
        entering = Appearance(reveal=2 * p - 1, reveal_from="center")
    return exiting, entering


def _wheel_look(rotation: float) -> Appearance:
    angle = abs(rotation)
    return Appearance(
        rotation=rotation,
        scale=interpolate(angle, [0, 45, 90], [1, 0.9, 0.8]),
        opacity=interpolate(angle, [0, 60, 90], [1, 0.8, 0]),
    )


def blend_wheel(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    sign = -1 if direction in ("left", "top") else 1
    exiting = _wheel_look(90 * sign * cubic_in(p))
    entering = _wheel_look(-90 * sign * (1 - cubic_out(p)))
    return exiting, entering


def _flip_look(rotation: float, vertical: bool) -> Appearance:
    angle = abs(rotation)
    scale = interpolate(angle, [0, 90, 180], [1, 0.85, 1])
    if vertical:
        return Appearance(rotate_x=rotation, scale=scale, visible=angle < 90)
    return Appearance(rotate_y=rotation, scale=scale, visible=angle < 90)


def blend_flip(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    vertical = direction in ("top", "bottom")
    eased = cubic_in_out(p)
    return _flip_look(180 * eased, vertical), _flip_look(-180 * (1 - eased), vertical)


def blend_zoom(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    exiting = Appearance(
        scale=1 + 0.5 * cubic_in(p),
        opacity=interpolate(p, [0, 0.7, 1], [1, 1, 0]),
    )
    entering = Appearance(
        scale=0.5 + 0.5 * cubic_out(p),
        opacity=interpolate(p, [0, 0.3, 1], [0, 1, 1]),
    )
    return exiting, entering


def blend_motion_blur(p: float, direction: str | None) -> tuple[Appearance, Appearance]:
    dx, dy = _direction_vector(direction)
    peak = MOTION_BLUR_PEAK_PX
    stops = [0, 0.3, 0.5, 0.7, 1]

    exit_offset = MOTION_BLUR_OFFSET * cubic_in(p)
    exiting = Appearance(
        translate_x=dx * exit_offset,
        translate_y=dy * exit_offset,
        blur=interpolate(p, stops, [0, peak * 0.3, peak * 0.6, peak * 0.9, peak]),
        opacity=interpolate(p, [0, 0.7, 1], [1, 0.8, 0]),
    )

    enter_offset = MOTION_BLUR_OFFSET * (1 - cubic_out(p))
    entering = Appearance(
        translate_x=-dx * enter_offset,
        translate_y=-dy * enter_offset,
        blur=interpolate(p, stops, [peak, peak * 0.8, peak * 0.4, peak * 0.1, 0]),
        opacity=interpolate(p, [0, 0.3, 1], [0, 0.8, 1]),
    )
    return exiting, entering


BLEND_FUNCTIONS: dict[str, BlendFunction] = {
    "fade": blend_fade,
    "slide": blend_slide,
    "curtain": blend_curtain,
    "wheel": blend_wheel,
    "flip": blend_flip,
    "wipe": blend_wipe,
    "zoom": blend_zoom,
    "motion-blur": blend_motion_blur,
}


def get_blend_function(transition_type: str) -> BlendFunction:
    fn = BLEND_FUNCTIONS.get(transition_type)
    if fn is None:
        raise UnknownTransitionTypeError(transition_type, list(BLEND_FUNCTIONS.keys()))
    return fn


def blend(transition_type: str, progress: float, direction: str | None = None) -> tuple[Appearance, Appearance]:
    """(exiting, entering) appearances at eased ``progress``.

    The endpoints are pinned exactly so the boundary states hold regardless
    of floating point in the curves.
    """
    fn = get_blend_function(transition_type)
    p = min(1.0, max(0.0, progress))
    exiting, entering = fn(p, direction)
    if p <= 0.0:
        exiting = IDENTITY
    elif p >= 1.0:
        entering = IDENTITY
    return exiting, entering


# =============================================================================
# Resolution
# =============================================================================


@dataclass
class SceneLayer:
    scene_id: str
    role: str  # "active", "exiting" or "entering"
    appearance: Appearance = IDENTITY

    def to_dict(self) -> dict:
        return {
            "sceneId": self.scene_id,
            "role": self.role,
            "appearance": self.appearance.to_dict(),
        }


@dataclass
class SceneFrame:
    """Scenes composed at one absolute frame, bottom to top."""

    frame: int
    layers: list[SceneLayer] = field(default_factory=list)
    transition_type: str | None = None
    direction: str | None = None
    weight: float | None = None  # raw window progress
    progress: float | None = None  # eased

    @property
    def in_transition(self) -> bool:
        return self.transition_type is not None

    def layer(self, role: str) -> SceneLayer | None:
        for layer in self.layers:
            if layer.role == role:
                return layer
        return None

    def to_dict(self) -> dict:
        return {
            "frame": self.frame,
            "layers": [layer.to_dict() for layer in self.layers],
            "transitionType": self.transition_type,
            "direction": self.direction,
            "weight": self.weight,
            "progress": self.progress,
        }


def transition_window(scene: Scene, transition: SceneTransition) -> tuple[int, int]:
    """Half-open frame window of a scene's incoming transition.

    Never longer than the scene itself.
    """
    duration = min(max(1, transition.duration_in_frames), scene.duration_in_frames)
    return scene.start_frame, scene.start_frame + duration


def _active_index(scenes: list[Scene], frame: int) -> int | None:
    found = None
    for index, scene in enumerate(scenes):
        if scene.contains(frame):
            found = index
    return found


def resolve_scene_at(scenes: list[Scene], frame: int) -> SceneFrame:
    """Scenes visible at ``frame`` with their blend state.

    ``scenes`` must be ordered by start frame; the first scene's transition
    is ignored since nothing precedes it.
    """
    index = _active_index(scenes, frame)
    if index is None:
        return SceneFrame(frame=frame)

    scene = scenes[index]
    transition = scene.transition
    if index == 0 or transition is None:
        return SceneFrame(frame=frame, layers=[SceneLayer(scene.id, "active")])

    start, end = transition_window(scene, transition)
    if not start <= frame < end:
        return SceneFrame(frame=frame, layers=[SceneLayer(scene.id, "active")])

    weight = (frame - start) / (end - start)
    progress = ease(transition.easing or DEFAULT_TRANSITION_EASING, weight)
    exiting, entering = blend(transition.type, progress, transition.direction)
    previous = scenes[index - 1]

    return SceneFrame(
        frame=frame,
        layers=[
            SceneLayer(previous.id, "exiting", exiting),
            SceneLayer(scene.id, "entering", entering),
        ],
        transition_type=transition.type,
        direction=transition.direction,
        weight=weight,
        progress=progress,
    )
