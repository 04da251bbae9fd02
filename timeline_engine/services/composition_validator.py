"""Composition rule validation engine.

Checks a composition document for problems that the command layer allows
but that usually indicate a mistake:
- Overlapping items on the same track
- Items or keyframes extending past their container
- Overlapping scenes and oversized transitions
- Items tagged with scenes that no longer exist
- Items sitting on a track of another type
- Springs that never settle
- Tracks stacked against the default layer priority
- Empty tracks

Validation is read-only.
"""

import logging
from dataclasses import dataclass
from typing import Any

from timeline_engine.config import Settings, get_settings
from timeline_engine.schemas.composition import CompositionDocument
from timeline_engine.services.track_layering import layering_conflicts
from timeline_engine.utils.easing import is_spring_stable, resolve_spring_config, settle_frames

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """A detected composition issue."""

    rule: str
    severity: str  # "error", "warning", "info"
    message: str
    frame: int | None = None
    track_id: str | None = None
    item_id: str | None = None
    scene_id: str | None = None
    suggestion: str | None = None

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "severity": self.severity,
            "message": self.message,
            "frame": self.frame,
            "trackId": self.track_id,
            "itemId": self.item_id,
            "sceneId": self.scene_id,
            "suggestion": self.suggestion,
        }


class CompositionValidator:
    """Validates composition rules without rendering."""

    def __init__(self, document: CompositionDocument, *, settings: Settings | None = None):
        self.document = document
        self.settings = settings or get_settings()

    @property
    def rules(self) -> dict:
        return {
            "overlapping_items": self._check_overlapping_items,
            "item_bounds": self._check_item_bounds,
            "keyframe_bounds": self._check_keyframe_bounds,
            "scene_overlap": self._check_scene_overlap,
            "scene_transitions": self._check_scene_transitions,
            "scene_references": self._check_scene_references,
            "track_item_types": self._check_track_item_types,
            "spring_stability": self._check_spring_stability,
            "layer_ordering": self._check_layer_ordering,
            "empty_tracks": self._check_empty_tracks,
        }

    def validate(self, rules: list[str] | None = None) -> list[ValidationIssue]:
        """Run all or selected validation rules.

        Args:
            rules: Specific rules to run. None = all rules.

        Returns:
            List of validation issues found.
        """
        all_rules = self.rules
        selected_rules = rules if rules else list(all_rules.keys())
        issues: list[ValidationIssue] = []

        for rule_name in selected_rules:
            rule_fn = all_rules.get(rule_name)
            if rule_fn is None:
                logger.warning(f"Unknown validation rule '{rule_name}' skipped")
                continue
            try:
                issues.extend(rule_fn())
            except Exception as e:
                logger.warning(f"Validation rule '{rule_name}' failed: {e}")
                issues.append(ValidationIssue(
                    rule=rule_name,
                    severity="warning",
                    message=f"Rule check failed: {e}",
                ))

        return issues

    def _check_overlapping_items(self) -> list[ValidationIssue]:
        """Check for overlapping items on the same track."""
        issues: list[ValidationIssue] = []

        for track in self.document.tracks:
            sorted_items = sorted(track.items, key=lambda item: item.from_frame)
            for item_a, item_b in zip(sorted_items, sorted_items[1:]):
                if item_a.end_frame > item_b.from_frame:
                    overlap = item_a.end_frame - item_b.from_frame
                    issues.append(ValidationIssue(
                        rule="overlapping_items",
                        severity="warning",
                        message=f"Items overlap by {overlap} frames on track '{track.name}'",
                        frame=item_b.from_frame,
                        track_id=track.id,
                        item_id=item_b.id,
                        suggestion=f"Move the item to frame {item_a.end_frame} or shorten the previous one",
                    ))

        return issues

    def _check_item_bounds(self) -> list[ValidationIssue]:
        """Check for items running past the composition end."""
        issues: list[ValidationIssue] = []
        duration = self.document.duration_in_frames

        for track, item in self.document.iter_items():
            if item.end_frame > duration:
                issues.append(ValidationIssue(
                    rule="item_bounds",
                    severity="warning",
                    message=f"Item extends {item.end_frame - duration} frames beyond the composition end",
                    frame=item.from_frame,
                    track_id=track.id,
                    item_id=item.id,
                    suggestion=f"Trim the item to {max(1, duration - item.from_frame)} frames",
                ))

        return issues

    def _check_keyframe_bounds(self) -> list[ValidationIssue]:
        """Keyframes past the item's end never play."""
        issues: list[ValidationIssue] = []

        for track, item in self.document.iter_items():
            late = [kf.frame for kf in item.keyframes if kf.frame > item.duration_in_frames]
            if late:
                issues.append(ValidationIssue(
                    rule="keyframe_bounds",
                    severity="warning",
                    message=(
                        f"{len(late)} keyframes lie past the item's {item.duration_in_frames} frames "
                        f"(latest at {max(late)})"
                    ),
                    frame=item.from_frame,
                    track_id=track.id,
                    item_id=item.id,
                    suggestion="Keyframe frames are relative to the item start",
                ))

        return issues

    def _check_scene_overlap(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for previous, scene in zip(self.document.scenes, self.document.scenes[1:]):
            if previous.end_frame > scene.start_frame:
                issues.append(ValidationIssue(
                    rule="scene_overlap",
                    severity="error",
                    message=f"Scene '{scene.name}' starts {previous.end_frame - scene.start_frame} frames before '{previous.name}' ends",
                    frame=scene.start_frame,
                    scene_id=scene.id,
                    suggestion=f"Move the scene to frame {previous.end_frame}",
                ))
            elif previous.end_frame < scene.start_frame:
                issues.append(ValidationIssue(
                    rule="scene_overlap",
                    severity="info",
                    message=f"{scene.start_frame - previous.end_frame} frame gap before scene '{scene.name}'",
                    frame=previous.end_frame,
                    scene_id=scene.id,
                ))

        return issues

    def _check_scene_transitions(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for index, scene in enumerate(self.document.scenes):
            transition = scene.transition
            if transition is None:
                continue
            if index == 0:
                issues.append(ValidationIssue(
                    rule="scene_transitions",
                    severity="error",
                    message=f"First scene '{scene.name}' has a transition with nothing to blend from",
                    scene_id=scene.id,
                    suggestion="Remove the transition",
                ))
            elif transition.duration_in_frames > scene.duration_in_frames:
                issues.append(ValidationIssue(
                    rule="scene_transitions",
                    severity="warning",
                    message=(
                        f"{transition.type} transition ({transition.duration_in_frames} frames) is longer "
                        f"than scene '{scene.name}' ({scene.duration_in_frames} frames)"
                    ),
                    frame=scene.start_frame,
                    scene_id=scene.id,
                    suggestion=f"Shorten the transition to at most {scene.duration_in_frames} frames",
                ))

        return issues

    def _check_scene_references(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        scene_ids = {scene.id for scene in self.document.scenes}

        for track, item in self.document.iter_items():
            if item.scene_id is not None and item.scene_id not in scene_ids:
                issues.append(ValidationIssue(
                    rule="scene_references",
                    severity="error",
                    message=f"Item references missing scene: {item.scene_id}",
                    frame=item.from_frame,
                    track_id=track.id,
                    item_id=item.id,
                    scene_id=item.scene_id,
                    suggestion="Assign the item to an existing scene or unassign it",
                ))

        return issues

    def _check_track_item_types(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for track, item in self.document.iter_items():
            if item.type != track.type:
                issues.append(ValidationIssue(
                    rule="track_item_types",
                    severity="error",
                    message=f"'{item.type}' item on a '{track.type}' track",
                    frame=item.from_frame,
                    track_id=track.id,
                    item_id=item.id,
                    suggestion=f"Move the item to a {item.type} track",
                ))

        return issues

    def _check_spring_stability(self) -> list[ValidationIssue]:
        """Springs that barely damp, or settle after the item has ended."""
        issues: list[ValidationIssue] = []
        fps = self.document.fps
        threshold = self.settings.spring_settle_threshold

        for track, item in self.document.iter_items():
            for kf in item.keyframes:
                if kf.easing != "spring":
                    continue
                config = resolve_spring_config(kf.spring_config, kf.spring_preset)
                if not is_spring_stable(config):
                    issues.append(ValidationIssue(
                        rule="spring_stability",
                        severity="warning",
                        message=f"Spring at frame {kf.frame} is too lightly damped to settle",
                        frame=item.from_frame + kf.frame,
                        track_id=track.id,
                        item_id=item.id,
                        suggestion="Raise damping or use a spring preset",
                    ))
                    continue
                remaining = item.duration_in_frames - kf.frame
                settle = settle_frames(config, fps, threshold)
                if remaining > 0 and settle > remaining:
                    issues.append(ValidationIssue(
                        rule="spring_stability",
                        severity="info",
                        message=f"Spring at frame {kf.frame} needs {settle} frames to settle but the item ends after {remaining}",
                        frame=item.from_frame + kf.frame,
                        track_id=track.id,
                        item_id=item.id,
                    ))

        return issues

    def _check_layer_ordering(self) -> list[ValidationIssue]:
        """Adjacent tracks stacked against the default priority."""
        issues: list[ValidationIssue] = []

        for lower, upper in layering_conflicts(self.document.tracks):
            issues.append(ValidationIssue(
                rule="layer_ordering",
                severity="info",
                message=f"{lower.type} track '{lower.name}' sits below {upper.type} track '{upper.name}'",
                track_id=lower.id,
                suggestion=f"Move '{lower.name}' above '{upper.name}' unless the order is intended",
            ))

        return issues

    def _check_empty_tracks(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for track in self.document.tracks:
            if not track.items:
                issues.append(ValidationIssue(
                    rule="empty_tracks",
                    severity="info",
                    message=f"Track '{track.name}' has no items",
                    track_id=track.id,
                    suggestion="Add items or remove the track",
                ))

        return issues


def summarize(issues: list[ValidationIssue]) -> dict[str, Any]:
    errors = sum(1 for issue in issues if issue.severity == "error")
    warnings = sum(1 for issue in issues if issue.severity == "warning")
    return {
        "isValid": errors == 0,
        "issues": [issue.to_dict() for issue in issues],
        "totalIssues": len(issues),
        "errors": errors,
        "warnings": warnings,
    }
