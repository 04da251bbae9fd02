"""Track layering.

Track order in the document is render order (first = bottom). New tracks are
inserted by a fixed type priority so backgrounds stay below media, media below
text, and the cursor on top. Explicit reordering afterwards always wins; the
priority is only the default placement.
"""

import logging
from dataclasses import dataclass

from timeline_engine.exceptions import UnknownTrackTypeError
from timeline_engine.schemas.composition import Track

logger = logging.getLogger(__name__)

LAYER_PRIORITY: dict[str, int] = {
    # Background effects
    "gradient": 0,
    "blob": 0,
    # Post-processing effects
    "film-grain": 1,
    "vignette": 1,
    "color-grade": 1,
    # Media
    "video": 2,
    "image": 2,
    # Components
    "component": 3,
    "custom-html": 3,
    "shape": 4,
    "text": 5,
    "particles": 6,
    "cursor": 7,
    # No visual output
    "audio": 8,
}


def layer_priority(track_type: str) -> int:
    """Default stacking priority for a track type (lower = further down)."""
    priority = LAYER_PRIORITY.get(track_type)
    if priority is None:
        raise UnknownTrackTypeError(track_type, list(LAYER_PRIORITY.keys()))
    return priority


def insertion_index(existing_tracks: list[Track], new_type: str) -> int:
    """Index of the first track whose priority exceeds ``new_type``'s.

    Tracks of equal priority stay below the new one; with no higher track the
    new one goes on top.
    """
    priority = layer_priority(new_type)
    for index, track in enumerate(existing_tracks):
        if layer_priority(track.type) > priority:
            return index
    return len(existing_tracks)


@dataclass
class RenderLayer:
    """One visible track in paint order."""

    track_id: str
    track_type: str
    z_index: int
    name: str = ""

    def to_dict(self) -> dict:
        return {
            "trackId": self.track_id,
            "trackType": self.track_type,
            "zIndex": self.z_index,
            "name": self.name,
        }


def layer_order(tracks: list[Track]) -> list[RenderLayer]:
    """Visible, non-audio tracks bottom to top.

    Follows document order, which already reflects any explicit reordering.
    """
    layers: list[RenderLayer] = []
    for track in tracks:
        if not track.visible or track.type == "audio":
            continue
        layers.append(
            RenderLayer(
                track_id=track.id,
                track_type=track.type,
                z_index=len(layers),
                name=track.name,
            )
        )
    return layers


def layering_conflicts(tracks: list[Track]) -> list[tuple[Track, Track]]:
    """Adjacent visual track pairs stacked against the default priority.

    Not errors (explicit order wins), but worth surfacing: a text track
    below a full-frame video is usually a mistake.
    """
    visual = [track for track in tracks if track.type != "audio"]
    conflicts = []
    for lower, upper in zip(visual, visual[1:]):
        if layer_priority(lower.type) > layer_priority(upper.type):
            conflicts.append((lower, upper))
    if conflicts:
        logger.debug(f"Found {len(conflicts)} layering conflicts")
    return conflicts
