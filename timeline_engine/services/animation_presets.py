"""Animation preset library.

Categories:
- ENTRANCE: fade/slide/zoom/bounce ins
- EXIT: fade/slide/zoom outs
- EMPHASIS: pulse, shake, wiggle ...
- MOTION: slow camera-like drifts
- FILTER: brightness/saturation/blur changes

A preset is a canonical keyframe list authored at a default duration.
Expanding it rescales frames to the requested duration and values around a
neutral baseline for the requested intensity. Position values are authored
around the frame centre (0.5).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from timeline_engine.exceptions import UnknownAnimationPresetError
from timeline_engine.schemas.keyframe import PropertyKeyframe
from timeline_engine.schemas.properties import neutral_value

logger = logging.getLogger(__name__)


class PresetCategory(Enum):
    """Groups of animation presets."""

    ENTRANCE = "entrance"
    EXIT = "exit"
    EMPHASIS = "emphasis"
    MOTION = "motion"
    FILTER = "filter"


@dataclass
class AnimationPreset:
    """A named keyframe animation."""

    id: str
    name: str
    category: PresetCategory
    default_duration: int
    keyframes: list[PropertyKeyframe] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "description": self.description,
            "defaultDuration": self.default_duration,
            "properties": sorted({name for kf in self.keyframes for name in kf.values}),
        }


def _kf(frame: int, values: dict[str, float], easing: str = "ease-out", spring_preset: str | None = None) -> PropertyKeyframe:
    return PropertyKeyframe(frame=frame, values=values, easing=easing, spring_preset=spring_preset)


def scale_keyframes_to_duration(
    keyframes: list[PropertyKeyframe],
    original_duration: int,
    target_duration: int,
) -> list[PropertyKeyframe]:
    """frame' = round(frame * target / original)."""
    ratio = target_duration / original_duration
    return [kf.model_copy(update={"frame": int(round(kf.frame * ratio))}) for kf in keyframes]


def scale_keyframe_intensity(
    keyframes: list[PropertyKeyframe],
    intensity: float,
    base_values: dict[str, float] | None = None,
) -> list[PropertyKeyframe]:
    """value' = base + (value - base) * intensity.

    The base defaults to 1 for opacity/scale-like properties and 0 otherwise.
    """
    bases = base_values or {}
    scaled = []
    for kf in keyframes:
        values = {}
        for name, value in kf.values.items():
            base = bases.get(name, neutral_value(name))
            values[name] = base + (value - base) * intensity
        scaled.append(kf.model_copy(update={"values": values}))
    return scaled


class AnimationPresetLibrary:
    """Registry of built-in animation presets."""

    def __init__(self):
        self._presets: dict[str, AnimationPreset] = {}
        self._load_presets()

    def _register(self, *presets: AnimationPreset) -> None:
        for preset in presets:
            self._presets[preset.id] = preset

    def _load_presets(self):
        entrance = PresetCategory.ENTRANCE
        self._register(
            AnimationPreset(
                id="fade-in",
                name="Fade In",
                category=entrance,
                default_duration=20,
                description="Simple opacity fade from transparent to visible",
                keyframes=[_kf(0, {"opacity": 0}), _kf(20, {"opacity": 1})],
            ),
            AnimationPreset(
                id="slide-in-left",
                name="Slide In Left",
                category=entrance,
                default_duration=25,
                description="Slide in from the left side with fade",
                keyframes=[
                    _kf(0, {"positionX": 0.3, "opacity": 0}),
                    _kf(25, {"positionX": 0.5, "opacity": 1}),
                ],
            ),
            AnimationPreset(
                id="slide-in-right",
                name="Slide In Right",
                category=entrance,
                default_duration=25,
                description="Slide in from the right side with fade",
                keyframes=[
                    _kf(0, {"positionX": 0.7, "opacity": 0}),
                    _kf(25, {"positionX": 0.5, "opacity": 1}),
                ],
            ),
            AnimationPreset(
                id="slide-in-up",
                name="Slide In Up",
                category=entrance,
                default_duration=25,
                description="Slide in from the bottom with fade",
                keyframes=[
                    _kf(0, {"positionY": 0.6, "opacity": 0}),
                    _kf(25, {"positionY": 0.5, "opacity": 1}),
                ],
            ),
            AnimationPreset(
                id="slide-in-down",
                name="Slide In Down",
                category=entrance,
                default_duration=25,
                description="Slide in from the top with fade",
                keyframes=[
                    _kf(0, {"positionY": 0.4, "opacity": 0}),
                    _kf(25, {"positionY": 0.5, "opacity": 1}),
                ],
            ),
            AnimationPreset(
                id="zoom-in",
                name="Zoom In",
                category=entrance,
                default_duration=25,
                description="Scale up from small with fade",
                keyframes=[
                    _kf(0, {"scale": 0.8, "opacity": 0}),
                    _kf(25, {"scale": 1, "opacity": 1}),
                ],
            ),
            AnimationPreset(
                id="bounce",
                name="Bounce",
                category=entrance,
                default_duration=35,
                description="Playful bounce entrance with overshoot",
                keyframes=[
                    _kf(0, {"scale": 0, "opacity": 0}),
                    _kf(15, {"scale": 1.15, "opacity": 1}),
                    _kf(25, {"scale": 0.95}, "ease-in-out"),
                    _kf(35, {"scale": 1}),
                ],
            ),
            AnimationPreset(
                id="elastic",
                name="Elastic",
                category=entrance,
                default_duration=50,
                description="Springy elastic entrance with multiple bounces",
                keyframes=[
                    _kf(0, {"scale": 0, "opacity": 0}),
                    _kf(18, {"scale": 1.2, "opacity": 1}),
                    _kf(28, {"scale": 0.9}, "ease-in-out"),
                    _kf(38, {"scale": 1.05}, "ease-in-out"),
                    _kf(50, {"scale": 1}),
                ],
            ),
            AnimationPreset(
                id="spring-pop",
                name="Spring Pop",
                category=entrance,
                default_duration=20,
                description="Quick spring pop entrance",
                keyframes=[
                    _kf(0, {"scale": 0.5, "opacity": 0}, "spring", "snappy"),
                    _kf(20, {"scale": 1, "opacity": 1}, "spring", "snappy"),
                ],
            ),
            AnimationPreset(
                id="blur-in",
                name="Blur In",
                category=entrance,
                default_duration=30,
                description="Dramatic blur-to-focus reveal",
                keyframes=[
                    _kf(0, {"opacity": 0, "blur": 20}),
                    _kf(30, {"opacity": 1, "blur": 0}),
                ],
            ),
            AnimationPreset(
                id="flip-in",
                name="Flip In",
                category=entrance,
                default_duration=30,
                description="Rotation entrance with skew effect",
                keyframes=[
                    _kf(0, {"rotation": -90, "opacity": 0, "skewY": 10}),
                    _kf(30, {"rotation": 0, "opacity": 1, "skewY": 0}),
                ],
            ),
            AnimationPreset(
                id="rotate-in",
                name="Rotate In",
                category=entrance,
                default_duration=30,
                description="Spinning entrance",
                keyframes=[
                    _kf(0, {"rotation": -180, "scale": 0.5, "opacity": 0}),
                    _kf(30, {"rotation": 0, "scale": 1, "opacity": 1}),
                ],
            ),
        )

        exit_ = PresetCategory.EXIT
        self._register(
            AnimationPreset(
                id="fade-out",
                name="Fade Out",
                category=exit_,
                default_duration=20,
                description="Simple opacity fade to transparent",
                keyframes=[_kf(0, {"opacity": 1}, "ease-in"), _kf(20, {"opacity": 0}, "ease-in")],
            ),
            AnimationPreset(
                id="zoom-out",
                name="Zoom Out",
                category=exit_,
                default_duration=25,
                description="Scale down with fade",
                keyframes=[
                    _kf(0, {"scale": 1, "opacity": 1}, "ease-in"),
                    _kf(25, {"scale": 0.8, "opacity": 0}, "ease-in"),
                ],
            ),
            AnimationPreset(
                id="blur-out",
                name="Blur Out",
                category=exit_,
                default_duration=25,
                description="Focus-to-blur exit",
                keyframes=[
                    _kf(0, {"opacity": 1, "blur": 0}, "ease-in"),
                    _kf(25, {"opacity": 0, "blur": 15}, "ease-in"),
                ],
            ),
            AnimationPreset(
                id="slide-out-left",
                name="Slide Out Left",
                category=exit_,
                default_duration=25,
                description="Slide out to the left with fade",
                keyframes=[
                    _kf(0, {"positionX": 0.5, "opacity": 1}, "ease-in"),
                    _kf(25, {"positionX": 0.3, "opacity": 0}, "ease-in"),
                ],
            ),
            AnimationPreset(
                id="slide-out-right",
                name="Slide Out Right",
                category=exit_,
                default_duration=25,
                description="Slide out to the right with fade",
                keyframes=[
                    _kf(0, {"positionX": 0.5, "opacity": 1}, "ease-in"),
                    _kf(25, {"positionX": 0.7, "opacity": 0}, "ease-in"),
                ],
            ),
        )

        emphasis = PresetCategory.EMPHASIS
        self._register(
            AnimationPreset(
                id="pulse",
                name="Pulse",
                category=emphasis,
                default_duration=60,
                description="Gentle breathing scale",
                keyframes=[
                    _kf(0, {"scale": 1}, "ease-in-out"),
                    _kf(30, {"scale": 1.05}, "ease-in-out"),
                    _kf(60, {"scale": 1}, "ease-in-out"),
                ],
            ),
            AnimationPreset(
                id="shake",
                name="Shake",
                category=emphasis,
                default_duration=20,
                description="Quick horizontal shake",
                keyframes=[
                    _kf(0, {"positionX": 0.5}, "linear"),
                    _kf(4, {"positionX": 0.48}, "linear"),
                    _kf(8, {"positionX": 0.52}, "linear"),
                    _kf(12, {"positionX": 0.49}, "linear"),
                    _kf(16, {"positionX": 0.51}, "linear"),
                    _kf(20, {"positionX": 0.5}),
                ],
            ),
            AnimationPreset(
                id="wiggle",
                name="Wiggle",
                category=emphasis,
                default_duration=30,
                description="Playful rotation wiggle",
                keyframes=[
                    _kf(0, {"rotation": 0}, "ease-in-out"),
                    _kf(6, {"rotation": -5}, "ease-in-out"),
                    _kf(12, {"rotation": 5}, "ease-in-out"),
                    _kf(18, {"rotation": -3}, "ease-in-out"),
                    _kf(24, {"rotation": 2}, "ease-in-out"),
                    _kf(30, {"rotation": 0}),
                ],
            ),
            AnimationPreset(
                id="heartbeat",
                name="Heartbeat",
                category=emphasis,
                default_duration=40,
                description="Double pulse like a heartbeat",
                keyframes=[
                    _kf(0, {"scale": 1}),
                    _kf(8, {"scale": 1.1}),
                    _kf(16, {"scale": 1}),
                    _kf(24, {"scale": 1.15}),
                    _kf(40, {"scale": 1}),
                ],
            ),
            AnimationPreset(
                id="jello",
                name="Jello",
                category=emphasis,
                default_duration=40,
                description="Wobbly skew distortion",
                keyframes=[
                    _kf(0, {"skewX": 0, "skewY": 0}, "ease-in-out"),
                    _kf(8, {"skewX": -8, "skewY": -4}, "ease-in-out"),
                    _kf(16, {"skewX": 6, "skewY": 3}, "ease-in-out"),
                    _kf(24, {"skewX": -4, "skewY": -2}, "ease-in-out"),
                    _kf(32, {"skewX": 2, "skewY": 1}, "ease-in-out"),
                    _kf(40, {"skewX": 0, "skewY": 0}),
                ],
            ),
            AnimationPreset(
                id="glow",
                name="Glow",
                category=emphasis,
                default_duration=45,
                description="Brightness glow pulse",
                keyframes=[
                    _kf(0, {"brightness": 1}, "ease-in-out"),
                    _kf(15, {"brightness": 1.3}, "ease-in-out"),
                    _kf(30, {"brightness": 1}, "ease-in-out"),
                    _kf(45, {"brightness": 1}, "ease-in-out"),
                ],
            ),
        )

        motion = PresetCategory.MOTION
        self._register(
            AnimationPreset(
                id="float",
                name="Float",
                category=motion,
                default_duration=90,
                description="Slow vertical float",
                keyframes=[
                    _kf(0, {"positionY": 0.5}, "ease-in-out"),
                    _kf(45, {"positionY": 0.48}, "ease-in-out"),
                    _kf(90, {"positionY": 0.5}, "ease-in-out"),
                ],
            ),
            AnimationPreset(
                id="drift-right",
                name="Drift Right",
                category=motion,
                default_duration=90,
                description="Slow horizontal drift",
                keyframes=[
                    _kf(0, {"positionX": 0.48}, "linear"),
                    _kf(90, {"positionX": 0.52}, "linear"),
                ],
            ),
            AnimationPreset(
                id="ken-burns-zoom",
                name="Ken Burns Zoom",
                category=motion,
                default_duration=120,
                description="Slow zoom with pan, documentary style",
                keyframes=[
                    _kf(0, {"scale": 1, "positionX": 0.48}, "linear"),
                    _kf(120, {"scale": 1.1, "positionX": 0.52}, "linear"),
                ],
            ),
        )

        filter_ = PresetCategory.FILTER
        self._register(
            AnimationPreset(
                id="color-pop",
                name="Color Pop",
                category=filter_,
                default_duration=30,
                description="Desaturated to vivid",
                keyframes=[_kf(0, {"saturate": 0.3}), _kf(30, {"saturate": 1.2})],
            ),
            AnimationPreset(
                id="flash",
                name="Flash",
                category=filter_,
                default_duration=15,
                description="Quick brightness flash",
                keyframes=[
                    _kf(0, {"brightness": 1}),
                    _kf(5, {"brightness": 2}),
                    _kf(15, {"brightness": 1}),
                ],
            ),
            AnimationPreset(
                id="hue-shift",
                name="Hue Shift",
                category=filter_,
                default_duration=60,
                description="Full hue rotation",
                keyframes=[
                    _kf(0, {"hueRotate": 0}, "linear"),
                    _kf(60, {"hueRotate": 360}, "linear"),
                ],
            ),
            AnimationPreset(
                id="cinematic-focus",
                name="Cinematic Focus",
                category=filter_,
                default_duration=40,
                description="Blur to sharp with a contrast lift",
                keyframes=[
                    _kf(0, {"blur": 8, "contrast": 0.9}),
                    _kf(40, {"blur": 0, "contrast": 1.1}),
                ],
            ),
        )

    def list_presets(self, category: Optional[PresetCategory] = None) -> list[AnimationPreset]:
        """List presets, optionally filtered by category."""
        presets = list(self._presets.values())
        if category is not None:
            presets = [p for p in presets if p.category == category]
        return presets

    def names(self) -> list[str]:
        return list(self._presets.keys())

    def get_preset(self, name: str) -> AnimationPreset:
        """Get a preset by id.

        Raises:
            UnknownAnimationPresetError: If no preset has this id
        """
        preset = self._presets.get(name)
        if preset is None:
            raise UnknownAnimationPresetError(name, self.names())
        return preset

    def expand(
        self,
        name: str,
        *,
        duration_in_frames: Optional[int] = None,
        intensity: Optional[float] = None,
    ) -> list[PropertyKeyframe]:
        """Concrete keyframes for a preset at a duration and intensity."""
        preset = self.get_preset(name)
        keyframes = [kf.model_copy(deep=True) for kf in preset.keyframes]

        if duration_in_frames is not None and duration_in_frames != preset.default_duration:
            target = max(1, int(duration_in_frames))
            keyframes = scale_keyframes_to_duration(keyframes, preset.default_duration, target)

        if intensity is not None and intensity != 1:
            keyframes = scale_keyframe_intensity(keyframes, intensity)

        logger.debug(f"Expanded preset {name} into {len(keyframes)} keyframes")
        return keyframes


preset_library = AnimationPresetLibrary()


def expand_preset(
    name: str,
    *,
    duration_in_frames: Optional[int] = None,
    intensity: Optional[float] = None,
) -> list[PropertyKeyframe]:
    return preset_library.expand(name, duration_in_frames=duration_in_frames, intensity=intensity)
