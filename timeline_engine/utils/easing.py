"""Easing curves and spring physics.

Keyframe easings are quadratic (``ease-in`` = t^2, ``ease-out`` = 1-(1-t)^2)
with smoothstep for ``ease-in-out``. Cubic curves are used by scene
transition geometry. The spring is a closed-form damped oscillator, so the
same (config, frame, fps) always gives the same value.

Usage:
    from timeline_engine.utils.easing import ease, spring_value, SPRING_PRESETS

    ease("ease-out", 0.5)  # -> 0.75
    spring_value(SPRING_PRESETS["bouncy"], elapsed_frames=10, fps=30)
"""

import math
from enum import Enum
from typing import Callable

from timeline_engine.exceptions import UnknownEasingError, UnknownSpringPresetError
from timeline_engine.schemas.keyframe import CURVE_EASING_TYPES, SpringConfig


# =============================================================================
# Easing Functions
# =============================================================================


def _clamp01(t: float) -> float:
    return min(1.0, max(0.0, t))


def linear(t: float) -> float:
    """Linear easing (no easing)."""
    return t


def ease_in(t: float) -> float:
    """Ease in (quadratic)."""
    return t * t


def ease_out(t: float) -> float:
    """Ease out (quadratic)."""
    return 1 - (1 - t) * (1 - t)


def ease_in_out(t: float) -> float:
    """Ease in-out (smoothstep)."""
    return t * t * (3 - 2 * t)


def cubic_in(t: float) -> float:
    """Ease in (cubic)."""
    return t * t * t


def cubic_out(t: float) -> float:
    """Ease out (cubic)."""
    return 1 - (1 - t) ** 3


def cubic_in_out(t: float) -> float:
    """Ease in-out (cubic)."""
    if t < 0.5:
        return 4 * t * t * t
    else:
        return 1 - (-2 * t + 2) ** 3 / 2


# Easing name -> function lookup for keyframe and transition easings
EASING_FUNCTIONS: dict[str, Callable[[float], float]] = {
    "linear": linear,
    "ease-in": ease_in,
    "ease-out": ease_out,
    "ease-in-out": ease_in_out,
}


def get_easing_function(name: str) -> Callable[[float], float]:
    """Get an easing curve by name.

    ``spring`` is not a curve of progress alone; use spring_value() for it.

    Raises:
        UnknownEasingError: If the easing name is not recognized
    """
    fn = EASING_FUNCTIONS.get(name)
    if fn is None:
        raise UnknownEasingError(name, list(CURVE_EASING_TYPES))
    return fn


def ease(kind: str, t: float) -> float:
    """Eased progress for ``t`` clamped to [0, 1]."""
    return get_easing_function(kind)(_clamp01(t))


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


# =============================================================================
# Spring
# =============================================================================


SPRING_PRESETS: dict[str, SpringConfig] = {
    # Critically damped: fastest approach without overshoot
    "smooth": SpringConfig(mass=1, stiffness=100, damping=20),
    "snappy": SpringConfig(mass=0.5, stiffness=300, damping=22),
    "heavy": SpringConfig(mass=5, stiffness=150, damping=60),
    "bouncy": SpringConfig(mass=1, stiffness=200, damping=10),
    "gentle": SpringConfig(mass=2, stiffness=100, damping=30),
    "wobbly": SpringConfig(mass=1, stiffness=180, damping=6),
}

DEFAULT_SPRING_PRESET = "smooth"


def get_spring_preset(name: str) -> SpringConfig:
    config = SPRING_PRESETS.get(name)
    if config is None:
        raise UnknownSpringPresetError(name, list(SPRING_PRESETS.keys()))
    return config


def resolve_spring_config(
    config: SpringConfig | None = None,
    preset: str | None = None,
) -> SpringConfig:
    """Explicit config wins, then the named preset, then ``smooth``."""
    if config is not None:
        return config
    if preset is not None:
        return get_spring_preset(preset)
    return SPRING_PRESETS[DEFAULT_SPRING_PRESET]


def damping_ratio(config: SpringConfig) -> float:
    """zeta = c / (2 * sqrt(k * m)). Below 1 the spring overshoots."""
    return config.damping / (2 * math.sqrt(config.stiffness * config.mass))


def is_spring_stable(config: SpringConfig, min_ratio: float = 0.05) -> bool:
    """Springs below the minimum damping ratio ring for too long to settle."""
    return damping_ratio(config) >= min_ratio


def spring_value(config: SpringConfig, elapsed_frames: float, fps: float) -> float:
    """Displacement from the target after ``elapsed_frames``.

    The spring is released at displacement 1 with initial velocity
    ``-config.velocity`` and decays toward 0. Values go negative while the
    spring overshoots the target.
    """
    if elapsed_frames <= 0:
        return 1.0
    t = elapsed_frames / fps
    omega = math.sqrt(config.stiffness / config.mass)
    zeta = damping_ratio(config)
    v0 = -config.velocity

    if abs(zeta - 1.0) < 1e-6:
        return math.exp(-omega * t) * (1 + (v0 + omega) * t)

    if zeta < 1.0:
        decay = zeta * omega
        omega_d = omega * math.sqrt(1 - zeta * zeta)
        return math.exp(-decay * t) * (
            math.cos(omega_d * t) + (v0 + decay) / omega_d * math.sin(omega_d * t)
        )

    root = math.sqrt(zeta * zeta - 1)
    r1 = -omega * (zeta - root)
    r2 = -omega * (zeta + root)
    c1 = (v0 - r2) / (r1 - r2)
    c2 = 1 - c1
    return c1 * math.exp(r1 * t) + c2 * math.exp(r2 * t)


def spring_progress(config: SpringConfig, elapsed_frames: float, fps: float) -> float:
    """Progress toward the target: 0 at release, 1 once settled."""
    return 1 - spring_value(config, elapsed_frames, fps)


def settle_frames(
    config: SpringConfig,
    fps: float,
    threshold: float = 0.005,
    max_seconds: float = 30.0,
) -> int:
    """First frame from which the displacement stays within ``threshold``.

    Returns the search limit when the spring does not settle within
    ``max_seconds``.
    """
    limit = int(math.ceil(max_seconds * fps))
    settled_from = 0
    for frame in range(limit + 1):
        if abs(spring_value(config, frame, fps)) >= threshold:
            settled_from = frame + 1
    return min(settled_from, limit)


# =============================================================================
# Range Interpolation
# =============================================================================


class ExtrapolateType(Enum):
    """How to handle values outside the input range."""

    CLAMP = "clamp"
    EXTEND = "extend"


def interpolate(
    value: float,
    input_range: list[float],
    output_range: list[float],
    *,
    easing: Callable[[float], float] = linear,
    extrapolate_left: ExtrapolateType = ExtrapolateType.CLAMP,
    extrapolate_right: ExtrapolateType = ExtrapolateType.CLAMP,
) -> float:
    """Map ``value`` through a piecewise-linear range with optional easing.

    Examples:
        interpolate(50, [0, 100], [0, 1])  # -> 0.5
        interpolate(75, [0, 50, 100], [0, 1, 0])  # -> 0.5
    """
    if len(input_range) != len(output_range):
        raise ValueError("input_range and output_range must have the same length")
    if len(input_range) < 2:
        raise ValueError("input_range must have at least 2 values")

    for i in range(1, len(input_range)):
        if input_range[i] <= input_range[i - 1]:
            raise ValueError("input_range must be monotonically increasing")

    if value <= input_range[0] and extrapolate_left == ExtrapolateType.CLAMP:
        return output_range[0]
    if value >= input_range[-1] and extrapolate_right == ExtrapolateType.CLAMP:
        return output_range[-1]

    segment_idx = len(input_range) - 2
    for i in range(1, len(input_range)):
        if value <= input_range[i]:
            segment_idx = i - 1
            break

    seg_start = input_range[segment_idx]
    seg_end = input_range[segment_idx + 1]
    t = (value - seg_start) / (seg_end - seg_start)

    out_start = output_range[segment_idx]
    out_end = output_range[segment_idx + 1]
    return out_start + (out_end - out_start) * easing(t)
