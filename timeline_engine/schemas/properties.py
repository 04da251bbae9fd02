"""Animatable property catalogue.

Keyframe ``values`` stay a sparse name -> number mapping, but the names are a
closed set per item type so typos are caught when keyframes are written.
"""

from typing import Iterable

from pydantic.alias_generators import to_snake

TRANSFORM_PROPERTIES = frozenset({
    "positionX",
    "positionY",
    "scale",
    "scaleX",
    "scaleY",
    "rotation",
    "rotateX",
    "rotateY",
    "skewX",
    "skewY",
    "width",
    "height",
})

APPEARANCE_PROPERTIES = frozenset({
    "opacity",
    "blur",
    "brightness",
    "contrast",
    "saturate",
    "hueRotate",
    "shadowBlur",
    "shadowOffsetX",
    "shadowOffsetY",
    "shadowOpacity",
})

VISUAL_PROPERTIES = TRANSFORM_PROPERTIES | APPEARANCE_PROPERTIES

EXTRA_PROPERTIES: dict[str, frozenset[str]] = {
    "text": frozenset({"fontSize", "letterSpacing", "wordSpacing", "lineHeight"}),
    "image": frozenset(),
    "video": frozenset({"volume"}),
    "shape": frozenset({"progress", "strokeWidth", "borderRadius"}),
    "cursor": frozenset(),
    "particles": frozenset({"speed", "gravity", "spread", "particleSize"}),
    "gradient": frozenset({"angle", "centerX", "centerY", "speed"}),
    "component": frozenset(),
    "custom-html": frozenset(),
    "film-grain": frozenset({"intensity", "speed", "size"}),
    "vignette": frozenset({"intensity", "size", "softness"}),
    "color-grade": frozenset({"intensity", "saturation", "temperature", "tint"}),
    "blob": frozenset({"speed", "complexity"}),
}

# Neutral value when neither keyframes nor the item define a property
NEUTRAL_DEFAULTS: dict[str, float] = {
    "opacity": 1.0,
    "scale": 1.0,
    "scaleX": 1.0,
    "scaleY": 1.0,
    "brightness": 1.0,
    "contrast": 1.0,
    "saturate": 1.0,
    "volume": 1.0,
    "shadowOpacity": 1.0,
}


def allowed_properties(item_type: str) -> frozenset[str]:
    """Animatable property names for an item type. Audio only animates volume."""
    if item_type == "audio":
        return frozenset({"volume"})
    return VISUAL_PROPERTIES | EXTRA_PROPERTIES.get(item_type, frozenset())


def unknown_properties(item_type: str, names: Iterable[str]) -> list[str]:
    allowed = allowed_properties(item_type)
    return sorted({name for name in names if name not in allowed})


def neutral_value(property_name: str) -> float:
    return NEUTRAL_DEFAULTS.get(property_name, 0.0)


def static_property_value(item, property_name: str) -> float:
    """The value a property has on an item without keyframes.

    ``positionX``/``positionY`` read the item's position (centre when unset);
    other names read the matching snake_case field when it holds a number.
    """
    if property_name in ("positionX", "positionY"):
        position = getattr(item, "position", None) or getattr(item, "emitter_position", None)
        if position is None:
            return 0.5
        return position.x if property_name == "positionX" else position.y

    value = getattr(item, to_snake(property_name), None)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return neutral_value(property_name)
