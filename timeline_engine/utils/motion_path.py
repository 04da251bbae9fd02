"""Motion paths: cubic bezier curves through 0-1 points.

A path is sampled into positionX/positionY (and optionally rotation)
keyframes so the regular keyframe engine can play it back.
"""

import math

from pydantic import Field

from timeline_engine.exceptions import UnknownMotionPathError
from timeline_engine.schemas.base import CamelModel
from timeline_engine.schemas.keyframe import PropertyKeyframe


class ControlPoint(CamelModel):
    x: float
    y: float


class PathPoint(CamelModel):
    x: float
    y: float
    control_point1: ControlPoint | None = None  # outgoing
    control_point2: ControlPoint | None = None  # incoming


class MotionPath(CamelModel):
    points: list[PathPoint] = Field(default_factory=list)
    auto_rotate: bool = False


def cubic_bezier(t: float, p0: float, p1: float, p2: float, p3: float) -> float:
    u = 1 - t
    return u * u * u * p0 + 3 * u * u * t * p1 + 3 * u * t * t * p2 + t * t * t * p3


def cubic_bezier_derivative(t: float, p0: float, p1: float, p2: float, p3: float) -> float:
    u = 1 - t
    return 3 * u * u * (p1 - p0) + 6 * u * t * (p2 - p1) + 3 * t * t * (p3 - p2)


def _segment_controls(start: PathPoint, end: PathPoint) -> tuple[ControlPoint, ControlPoint]:
    # Missing control points fall on the straight line at thirds
    cp1 = start.control_point1 or ControlPoint(
        x=start.x + (end.x - start.x) / 3,
        y=start.y + (end.y - start.y) / 3,
    )
    cp2 = end.control_point2 or ControlPoint(
        x=end.x - (end.x - start.x) / 3,
        y=end.y - (end.y - start.y) / 3,
    )
    return cp1, cp2


def position_on_path(path: MotionPath, progress: float) -> tuple[float, float, float]:
    """(x, y, rotation) at ``progress`` in [0, 1].

    Each segment gets an equal share of progress. Rotation is the tangent
    angle in degrees when ``auto_rotate`` is set, else 0.
    """
    points = path.points
    if not points:
        return 0.5, 0.5, 0.0
    if len(points) == 1:
        return points[0].x, points[0].y, 0.0

    t = min(1.0, max(0.0, progress))
    segments = len(points) - 1
    scaled = t * segments
    index = min(int(math.floor(scaled)), segments - 1)
    local_t = scaled - index

    start, end = points[index], points[index + 1]
    cp1, cp2 = _segment_controls(start, end)

    x = cubic_bezier(local_t, start.x, cp1.x, cp2.x, end.x)
    y = cubic_bezier(local_t, start.y, cp1.y, cp2.y, end.y)

    rotation = 0.0
    if path.auto_rotate:
        dx = cubic_bezier_derivative(local_t, start.x, cp1.x, cp2.x, end.x)
        dy = cubic_bezier_derivative(local_t, start.y, cp1.y, cp2.y, end.y)
        rotation = math.degrees(math.atan2(dy, dx))

    return x, y, rotation


def path_to_keyframes(
    path: MotionPath,
    duration_in_frames: int,
    *,
    easing: str = "ease-out",
    include_rotation: bool | None = None,
    samples_per_segment: int = 1,
) -> list[PropertyKeyframe]:
    """Sample a path into keyframes spanning ``duration_in_frames``.

    With ``samples_per_segment=1`` only the path points become keyframes;
    higher values follow the curve more closely between them.
    """
    if len(path.points) < 2:
        return []
    if include_rotation is None:
        include_rotation = path.auto_rotate

    steps = (len(path.points) - 1) * max(1, samples_per_segment)
    keyframes: list[PropertyKeyframe] = []
    for step in range(steps + 1):
        progress = step / steps
        x, y, rotation = position_on_path(path, progress)
        values = {"positionX": x, "positionY": y}
        if include_rotation and path.auto_rotate:
            values["rotation"] = rotation
        keyframes.append(
            PropertyKeyframe(
                frame=round(progress * duration_in_frames),
                values=values,
                easing="linear" if step == 0 else easing,
            )
        )
    return keyframes


def _path(points: list[tuple], auto_rotate: bool = False) -> MotionPath:
    built = []
    for x, y, cp1, cp2 in points:
        built.append(
            PathPoint(
                x=x,
                y=y,
                control_point1=ControlPoint(x=cp1[0], y=cp1[1]) if cp1 else None,
                control_point2=ControlPoint(x=cp2[0], y=cp2[1]) if cp2 else None,
            )
        )
    return MotionPath(points=built, auto_rotate=auto_rotate)


# (x, y, outgoing control, incoming control)
MOTION_PATH_PRESETS: dict[str, MotionPath] = {
    "arc-left-to-right": _path([
        (0, 0.5, None, None),
        (0.5, 0.2, (0.25, 0.2), (0.35, 0.2)),
        (1, 0.5, None, (0.75, 0.2)),
    ]),
    "arc-right-to-left": _path([
        (1, 0.5, None, None),
        (0.5, 0.2, (0.75, 0.2), (0.65, 0.2)),
        (0, 0.5, None, (0.25, 0.2)),
    ]),
    "wave": _path([
        (0, 0.5, None, None),
        (0.25, 0.3, (0.1, 0.3), None),
        (0.5, 0.5, (0.35, 0.7), (0.4, 0.7)),
        (0.75, 0.7, (0.6, 0.3), (0.65, 0.3)),
        (1, 0.5, None, (0.9, 0.7)),
    ]),
    "figure-8": _path([
        (0.5, 0.3, None, None),
        (0.7, 0.4, (0.65, 0.25), None),
        (0.5, 0.5, (0.7, 0.55), (0.65, 0.55)),
        (0.3, 0.6, (0.35, 0.55), None),
        (0.5, 0.7, (0.3, 0.75), (0.35, 0.75)),
        (0.5, 0.3, (0.65, 0.75), (0.7, 0.45)),
    ], auto_rotate=True),
    "bounce-path": _path([
        (0.2, 0.8, None, None),
        (0.35, 0.3, (0.25, 0.3), None),
        (0.5, 0.7, (0.4, 0.7), (0.45, 0.7)),
        (0.65, 0.45, (0.55, 0.45), None),
        (0.8, 0.6, (0.7, 0.6), (0.75, 0.6)),
        (0.9, 0.55, None, None),
    ]),
    "spiral-in": _path([
        (0.1, 0.5, None, None),
        (0.3, 0.2, (0.1, 0.2), None),
        (0.7, 0.3, (0.5, 0.15), (0.6, 0.2)),
        (0.8, 0.6, (0.85, 0.4), None),
        (0.6, 0.7, (0.75, 0.75), (0.7, 0.72)),
        (0.5, 0.5, (0.5, 0.65), (0.48, 0.55)),
    ], auto_rotate=True),
}


def get_motion_path_preset(name: str) -> MotionPath:
    preset = MOTION_PATH_PRESETS.get(name)
    if preset is None:
        raise UnknownMotionPathError(name, list(MOTION_PATH_PRESETS.keys()))
    return preset.model_copy(deep=True)
