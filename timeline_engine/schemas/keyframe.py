"""Keyframe and spring data shapes.

Keyframe frames are relative to the owning item's start (0 = the item's first
visible frame). Out-of-range input is clamped, never rejected.
"""

import math
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator, model_validator

from timeline_engine.exceptions import UnknownEasingError, UnknownSpringPresetError
from timeline_engine.schemas.base import CamelModel

EASING_TYPES = ("linear", "ease-in", "ease-out", "ease-in-out", "spring")
CURVE_EASING_TYPES = EASING_TYPES[:-1]
SPRING_PRESET_NAMES = ("smooth", "snappy", "heavy", "bouncy", "gentle", "wobbly")
SlideDirection = Literal["left", "right", "top", "bottom"]

DEFAULT_EASING = "ease-out"

# (min, max, default) per spring parameter
SPRING_LIMITS: dict[str, tuple[float, float, float]] = {
    "mass": (0.1, 10.0, 1.0),
    "stiffness": (1.0, 1000.0, 100.0),
    "damping": (1.0, 500.0, 10.0),
}


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def clamp_frame(value: Any) -> int:
    """Round to an integer frame and clamp at 0. Garbage becomes 0."""
    number = _finite_number(value)
    if number is None:
        return 0
    return max(0, int(round(number)))


def clamp_duration(value: Any, minimum: int = 1) -> int:
    number = _finite_number(value)
    if number is None:
        return minimum
    return max(minimum, int(round(number)))


class SpringConfig(CamelModel):
    """Explicit mass-spring-damper parameters.

    ``velocity`` is the initial speed toward the target, in units of the
    full displacement per second.
    """

    mass: float = 1.0
    stiffness: float = 100.0
    damping: float = 10.0
    velocity: float = 0.0

    @field_validator("mass", "stiffness", "damping", mode="before")
    @classmethod
    def _clamp_parameter(cls, value: Any, info: ValidationInfo) -> float:
        low, high, default = SPRING_LIMITS[info.field_name]
        number = _finite_number(value)
        if number is None:
            return default
        return min(high, max(low, number))

    @field_validator("velocity", mode="before")
    @classmethod
    def _finite_velocity(cls, value: Any) -> float:
        number = _finite_number(value)
        return 0.0 if number is None else number


def check_easing(value: Any, *, allow_spring: bool = True) -> str:
    """Validate an easing name. Unknown names raise UnknownEasingError."""
    allowed = EASING_TYPES if allow_spring else CURVE_EASING_TYPES
    if value not in allowed:
        raise UnknownEasingError(str(value), list(allowed))
    return value


def check_spring_preset(value: Any) -> str | None:
    if value is None:
        return None
    if value not in SPRING_PRESET_NAMES:
        raise UnknownSpringPresetError(str(value), list(SPRING_PRESET_NAMES))
    return value


class PropertyKeyframe(CamelModel):
    """Property values at a frame offset within an item.

    ``easing`` shapes the segment arriving at this keyframe from the previous
    one. Spring fields only survive when ``easing == "spring"``.
    """

    frame: int = 0
    values: dict[str, float] = Field(default_factory=dict)
    easing: str = DEFAULT_EASING
    spring_preset: str | None = None
    spring_config: SpringConfig | None = None

    @field_validator("frame", mode="before")
    @classmethod
    def _clamp_frame(cls, value: Any) -> int:
        return clamp_frame(value)

    @field_validator("values", mode="before")
    @classmethod
    def _drop_non_finite(cls, value: Any) -> dict[str, float]:
        if not isinstance(value, dict):
            return {}
        cleaned: dict[str, float] = {}
        for name, raw in value.items():
            number = _finite_number(raw)
            if number is not None:
                cleaned[str(name)] = number
        return cleaned

    @field_validator("easing", mode="before")
    @classmethod
    def _check_easing(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_EASING
        return check_easing(value)

    @field_validator("spring_preset", mode="before")
    @classmethod
    def _check_spring_preset(cls, value: Any) -> str | None:
        return check_spring_preset(value)

    @model_validator(mode="after")
    def _strip_spring_fields(self) -> "PropertyKeyframe":
        if self.easing != "spring":
            self.spring_preset = None
            self.spring_config = None
        return self


class AnimationConfig(CamelModel):
    """Enter or exit animation applied at an item's edges."""

    type: Literal["none", "fade", "slide", "scale"] = "fade"
    direction: SlideDirection | None = None
    duration_in_frames: int = 15
    easing: str | None = None
    spring_preset: str | None = None
    stagger_delay: int | None = None

    @field_validator("duration_in_frames", mode="before")
    @classmethod
    def _clamp_duration(cls, value: Any) -> int:
        return clamp_duration(value)

    @field_validator("easing", mode="before")
    @classmethod
    def _check_easing(cls, value: Any) -> str | None:
        return None if value is None else check_easing(value)

    @field_validator("spring_preset", mode="before")
    @classmethod
    def _check_spring_preset(cls, value: Any) -> str | None:
        return check_spring_preset(value)


def sort_keyframes(keyframes: list[PropertyKeyframe]) -> list[PropertyKeyframe]:
    """Stable sort by frame; keyframes on the same frame keep insertion order."""
    return sorted(keyframes, key=lambda kf: kf.frame)


def merge_keyframes(
    existing: list[PropertyKeyframe],
    incoming: list[PropertyKeyframe],
) -> list[PropertyKeyframe]:
    """Merge keyframes by frame, incoming values winning per property.

    An incoming keyframe on an existing frame also replaces that frame's
    easing and spring settings.
    """
    merged = list(existing)
    for kf in incoming:
        for index, current in enumerate(merged):
            if current.frame == kf.frame:
                merged[index] = kf.model_copy(update={"values": {**current.values, **kf.values}})
                break
        else:
            merged.append(kf)
    return sort_keyframes(merged)
