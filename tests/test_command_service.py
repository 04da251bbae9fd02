"""
Tests for the command execution layer.

These tests verify:
- Track placement by layer priority, reordering and removal
- Item creation with clamping, type checks and warnings
- Keyframe writes including the absolute-frame correction
- Scene, composition and history commands
- Atomicity: a failed command leaves the document untouched

Run with: pytest tests/test_command_service.py -v
"""

import pytest

from timeline_engine.exceptions import (
    UnknownAnimationPresetError,
    UnknownCameraMovementError,
    UnknownEasingError,
    UnknownMotionPathError,
    UnknownPresetCategoryError,
    UnknownTrackTypeError,
    UnknownTransitionTypeError,
)
from timeline_engine.schemas.keyframe import PropertyKeyframe
from timeline_engine.services.command_service import (
    CommandService,
    camera_movement_keyframes,
    correct_absolute_keyframes,
    stagger_order,
)


def _item(service: CommandService, track_id: str, item_id: str):
    return service.document.find_item(track_id, item_id)[1]


def _frames(item) -> list[int]:
    return [kf.frame for kf in item.keyframes]


# =============================================================================
# Tracks
# =============================================================================


class TestTracks:
    """Test track commands."""

    def test_add_track_follows_layer_priority(self, service):
        """gradient, video, then text stacks as [gradient, video, text]."""
        service.add_track("Background", "gradient")
        service.add_track("Clips", "video")
        result = service.add_track("Titles", "text")

        assert result.success
        assert result.data["index"] == 2
        assert [track.type for track in service.document.tracks] == ["gradient", "video", "text"]

    def test_add_track_slots_media_below_text(self, service):
        service.add_track("Titles", "text")
        service.add_track("Pointer", "cursor")
        result = service.add_track("Photos", "image")
        assert result.data["index"] == 0
        assert [track.type for track in service.document.tracks] == ["image", "text", "cursor"]

    def test_add_track_default_name(self, service):
        track_id = service.add_track(track_type="custom-html").data["trackId"]
        assert service.document.find_track(track_id).name == "Custom Html"

    def test_unknown_track_type_raises(self, service):
        with pytest.raises(UnknownTrackTypeError):
            service.add_track("Holo", "hologram")
        assert service.document.tracks == []

    def test_update_track(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        result = service.update_track(track_id, name="Captions", visible=False)
        track = service.document.find_track(track_id)
        assert result.success
        assert (track.name, track.visible, track.locked) == ("Captions", False, False)

    def test_remove_track_cascades(self, service, text_item):
        track_id, _ = text_item
        result = service.remove_track(track_id)
        assert result.data["removedItems"] == 1
        assert service.document.tracks == []

    def test_reorder_to_current_index_is_idempotent(self, service):
        ids = [service.add_track(track_type=t).data["trackId"] for t in ("gradient", "video", "text")]
        result = service.reorder_track(ids[1], 1)
        assert result.success
        assert [track.id for track in service.document.tracks] == ids

    def test_reorder_moves_and_clamps(self, service):
        ids = [service.add_track(track_type=t).data["trackId"] for t in ("gradient", "video", "text")]
        result = service.reorder_track(ids[0], 99)
        assert result.data["index"] == 2
        assert result.warnings == ["newIndex 99 clamped to 2"]
        assert [track.id for track in service.document.tracks] == [ids[1], ids[2], ids[0]]

    def test_missing_track_fails_without_raising(self, service):
        result = service.reorder_track("nope", 0)
        assert not result.success
        assert result.error.code == "TRACK_NOT_FOUND"
        assert result.error.retryable
        assert result.error.location.track_id == "nope"


# =============================================================================
# Items
# =============================================================================


class TestItems:
    """Test item commands."""

    def test_add_item_assigns_fresh_id(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        result = service.add_item(track_id, {"id": "mine", "text": "Hi"})
        assert result.success
        assert result.data["itemId"] != "mine"
        assert _item(service, track_id, result.data["itemId"]).text == "Hi"

    def test_add_item_clamps_timing(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        result = service.add_item(track_id, {"from": -10, "durationInFrames": 0})
        item = _item(service, track_id, result.data["itemId"])
        assert (item.from_frame, item.duration_in_frames) == (0, 1)
        assert result.warnings == ["from -10 clamped to 0", "durationInFrames 0 clamped to 1"]

    def test_add_item_accepts_snake_case(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        result = service.add_item(track_id, {"duration_in_frames": 45, "font_size": 72})
        item = _item(service, track_id, result.data["itemId"])
        assert (item.duration_in_frames, item.font_size) == (45, 72)

    def test_add_item_warns_on_unknown_fields(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        result = service.add_item(track_id, {"txt": "typo"})
        assert result.success
        assert result.warnings == ["Ignored unknown text item fields: txt"]

    def test_add_item_type_mismatch(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        result = service.add_item(track_id, {"type": "video", "src": "clip.mp4"})
        assert not result.success
        assert result.error.code == "TRACK_TYPE_MISMATCH"
        assert service.document.find_track(track_id).items == []

    def test_add_element_creates_track(self, service):
        service.add_track("Titles", "text")
        result = service.add_element({"type": "shape", "shapeType": "circle"}, track_name="Dots")
        assert result.success
        assert result.data["index"] == 0
        track = service.document.find_track(result.data["trackId"])
        assert (track.name, track.type, track.items[0].shape_type) == ("Dots", "shape", "circle")

    def test_add_element_requires_type(self, service):
        result = service.add_element({"text": "Hi"})
        assert not result.success
        assert result.error.code == "INVALID_ARGUMENTS"

    def test_add_element_unknown_type_raises(self, service):
        with pytest.raises(UnknownTrackTypeError):
            service.add_element({"type": "hologram"})

    def test_update_item_merges_fields(self, service, text_item):
        track_id, item_id = text_item
        result = service.update_item(track_id, item_id, {"text": "Bye", "color": "#ff0000"})
        item = _item(service, track_id, item_id)
        assert result.success
        assert (item.text, item.color, item.duration_in_frames) == ("Bye", "#ff0000", 60)

    def test_update_item_keeps_id_and_type(self, service, text_item):
        track_id, item_id = text_item
        result = service.update_item(track_id, item_id, {"id": "other", "type": "video", "text": "x"})
        item = _item(service, track_id, item_id)
        assert (item.id, item.type) == (item_id, "text")
        assert result.warnings == ["id is immutable; ignored", "type is immutable; ignored"]

    def test_update_item_keyframes_sorted_and_stripped(self, service, text_item):
        track_id, item_id = text_item
        service.update_item(track_id, item_id, {
            "keyframes": [
                {"frame": 10, "values": {"opacity": 1}, "easing": "linear", "springPreset": "bouncy"},
                {"frame": 0, "values": {"opacity": 0}},
            ],
        })
        item = _item(service, track_id, item_id)
        assert _frames(item) == [0, 10]
        assert item.keyframes[1].spring_preset is None

    def test_remove_item(self, service, text_item):
        track_id, item_id = text_item
        assert service.remove_item(track_id, item_id).success
        assert service.remove_item(track_id, item_id).error.code == "ITEM_NOT_FOUND"

    def test_move_item_in_time(self, service, text_item):
        track_id, item_id = text_item
        result = service.move_item(track_id, track_id, item_id, -5)
        assert result.data["from"] == 0
        assert result.warnings == ["newFrom -5 clamped to 0"]

    def test_move_item_between_tracks(self, service, text_item):
        track_id, item_id = text_item
        other_id = service.add_track("More titles", "text").data["trackId"]
        assert service.move_item(track_id, other_id, item_id, 30).success
        assert service.document.find_track(track_id).items == []
        assert _item(service, other_id, item_id).from_frame == 30

    def test_move_item_to_wrong_type(self, service, text_item):
        track_id, item_id = text_item
        video_id = service.add_track("Clips", "video").data["trackId"]
        result = service.move_item(track_id, video_id, item_id, 0)
        assert result.error.code == "TRACK_TYPE_MISMATCH"
        assert _item(service, track_id, item_id).from_frame == 0

    def test_assign_item_to_scene(self, service, text_item):
        track_id, item_id = text_item
        scene_id = service.add_scene("Intro").data["sceneId"]
        assert service.assign_item_to_scene(track_id, item_id, scene_id).success
        assert _item(service, track_id, item_id).scene_id == scene_id
        assert service.assign_item_to_scene(track_id, item_id, None).success
        assert _item(service, track_id, item_id).scene_id is None

    def test_assign_item_to_missing_scene(self, service, text_item):
        result = service.assign_item_to_scene(*text_item, "ghost")
        assert result.error.code == "SCENE_NOT_FOUND"


# =============================================================================
# Keyframes
# =============================================================================


class TestAddKeyframes:
    """Test keyframe writes."""

    def test_absolute_frames_shifted(self, service, text_item):
        """Frames 100 and 130 on a 60 frame item are stored as 0 and 30."""
        result = service.add_keyframes_to_item(*text_item, [
            {"frame": 100, "values": {"opacity": 0}},
            {"frame": 130, "values": {"opacity": 1}},
        ])
        assert result.success
        assert result.data["shiftedBy"] == 100
        assert result.warnings
        assert _frames(_item(service, *text_item)) == [0, 30]

    def test_relative_frames_untouched(self, service, text_item):
        result = service.add_keyframes_to_item(*text_item, [
            {"frame": 10, "values": {"opacity": 0}},
            {"frame": 70, "values": {"opacity": 1}},
        ])
        assert result.data["shiftedBy"] == 0
        assert result.warnings == []
        assert _frames(_item(service, *text_item)) == [10, 70]

    def test_threshold_is_exclusive(self, service, text_item):
        service.add_keyframes_to_item(*text_item, [{"frame": 60, "values": {"opacity": 1}}])
        assert _frames(_item(service, *text_item)) == [60]

    def test_merge_on_same_frame(self, service, text_item):
        service.add_keyframes_to_item(*text_item, [{"frame": 0, "values": {"opacity": 0}}])
        service.add_keyframes_to_item(*text_item, [
            PropertyKeyframe(frame=0, values={"scale": 2}),
            PropertyKeyframe(frame=20, values={"opacity": 1}),
        ])
        item = _item(service, *text_item)
        assert _frames(item) == [0, 20]
        assert item.keyframes[0].values == {"opacity": 0, "scale": 2}

    def test_unknown_property_fails(self, service, text_item):
        result = service.add_keyframes_to_item(*text_item, [{"frame": 0, "values": {"opacty": 1}}])
        assert not result.success
        assert result.error.code == "UNKNOWN_PROPERTY"
        assert "opacty" in result.error.message
        assert _item(service, *text_item).keyframes == []

    def test_audio_only_animates_volume(self, service):
        result = service.add_element({"type": "audio", "src": "music.mp3"})
        track_id, item_id = result.data["trackId"], result.data["itemId"]
        assert service.add_keyframes_to_item(track_id, item_id, [{"frame": 0, "values": {"volume": 0}}]).success
        failed = service.add_keyframes_to_item(track_id, item_id, [{"frame": 0, "values": {"opacity": 0}}])
        assert failed.error.code == "UNKNOWN_PROPERTY"

    def test_empty_batch_fails(self, service, text_item):
        assert service.add_keyframes_to_item(*text_item, []).error.code == "INVALID_ARGUMENTS"

    def test_unknown_easing_raises(self, service, text_item):
        with pytest.raises(UnknownEasingError):
            service.add_keyframes_to_item(*text_item, [{"frame": 0, "values": {"opacity": 0}, "easing": "wobble"}])

    def test_missing_item(self, service, text_item):
        track_id, _ = text_item
        result = service.add_keyframes_to_item(track_id, "ghost", [{"frame": 0, "values": {"opacity": 0}}])
        assert result.error.code == "ITEM_NOT_FOUND"


class TestCorrectAbsoluteKeyframes:
    """Test the absolute-frame heuristic on its own."""

    def test_shift(self):
        keyframes, shift = correct_absolute_keyframes(
            [PropertyKeyframe(frame=130), PropertyKeyframe(frame=100)], threshold=60
        )
        assert shift == 100
        assert [kf.frame for kf in keyframes] == [30, 0]

    def test_no_shift(self):
        keyframes, shift = correct_absolute_keyframes([PropertyKeyframe(frame=60)], threshold=60)
        assert shift == 0
        assert keyframes[0].frame == 60

    def test_empty(self):
        assert correct_absolute_keyframes([], threshold=60) == ([], 0)


# =============================================================================
# Animation helpers
# =============================================================================


class TestAnimationCommands:
    """Test presets, camera movements, staggers and motion paths."""

    def test_apply_preset_replaces_keyframes(self, service, text_item):
        service.add_keyframes_to_item(*text_item, [{"frame": 5, "values": {"rotation": 10}}])
        result = service.apply_animation_preset(*text_item, "fade-in", duration_in_frames=40)
        item = _item(service, *text_item)
        assert result.data["keyframeCount"] == 2
        assert _frames(item) == [0, 40]
        assert "rotation" not in item.keyframes[0].values

    def test_apply_preset_recentres_position(self, service):
        result = service.add_element({"type": "text", "position": {"x": 0.2, "y": 0.8}})
        track_id, item_id = result.data["trackId"], result.data["itemId"]
        service.apply_animation_preset(track_id, item_id, "slide-in-left")
        item = _item(service, track_id, item_id)
        assert item.keyframes[0].values["positionX"] == pytest.approx(0.0)
        assert item.keyframes[-1].values["positionX"] == pytest.approx(0.2)

    def test_apply_unknown_preset_raises(self, service, text_item):
        with pytest.raises(UnknownAnimationPresetError):
            service.apply_animation_preset(*text_item, "teleport")

    def test_camera_zoom_on_all_visual_items(self, service, text_item):
        audio = service.add_element({"type": "audio"}).data
        result = service.add_camera_movement("zoom-in", intensity=0.5, duration_in_frames=90)
        item = _item(service, *text_item)
        assert result.data["appliedTo"] == [text_item[1]]
        assert _frames(item) == [0, 90]
        assert item.keyframes[-1].values["scale"] == pytest.approx(1.05)
        assert _item(service, audio["trackId"], audio["itemId"]).keyframes == []

    def test_camera_movement_offsets_to_item_frames(self, service):
        track_id = service.add_track("Titles", "text").data["trackId"]
        item_id = service.add_item(track_id, {"from": 30, "durationInFrames": 200}).data["itemId"]
        service.add_camera_movement(
            "pan-right",
            targets=[{"itemId": item_id}],
            start_frame=60,
            duration_in_frames=30,
        )
        assert _frames(_item(service, track_id, item_id)) == [30, 60]

    def test_camera_negative_intensity_clamped(self, service, text_item):
        result = service.add_camera_movement("zoom-out", intensity=-1)
        assert result.warnings == ["intensity -1 clamped to 0"]

    def test_unknown_camera_movement_raises(self, service):
        with pytest.raises(UnknownCameraMovementError):
            service.add_camera_movement("dolly-zoom")

    def test_camera_keyframes_shake_returns_home(self, service, text_item):
        item = _item(service, *text_item)
        keyframes = camera_movement_keyframes("shake", item, intensity=1, duration_in_frames=50, easing="ease-out")
        assert [kf.frame for kf in keyframes] == [0, 10, 20, 30, 40, 50]
        assert keyframes[0].values == keyframes[-1].values

    def test_stagger_center_out(self, service):
        track_id = service.add_track("Words", "text").data["trackId"]
        ids = [service.add_item(track_id, {"text": word}).data["itemId"] for word in ("a", "b", "c")]
        result = service.add_stagger_animation(
            [{"itemId": item_id, "trackId": track_id} for item_id in ids],
            "opacity",
            0,
            1,
            duration_per_item=10,
            stagger_delay=5,
            direction="center-out",
        )
        assert result.data["order"] == [ids[1], ids[2], ids[0]]
        assert _frames(_item(service, track_id, ids[1])) == [0, 10]
        assert _frames(_item(service, track_id, ids[2])) == [5, 15]
        assert _frames(_item(service, track_id, ids[0])) == [10, 20]

    def test_stagger_missing_target_is_atomic(self, service, text_item):
        result = service.add_stagger_animation(
            [{"itemId": text_item[1]}, {"itemId": "ghost"}], "opacity", 0, 1
        )
        assert result.error.code == "ITEM_NOT_FOUND"
        assert _item(service, *text_item).keyframes == []

    def test_motion_path_preset(self, service, text_item):
        result = service.add_motion_path(*text_item, preset="arc-left-to-right", duration_in_frames=60)
        assert result.data["keyframeCount"] == 3
        assert _frames(_item(service, *text_item)) == [0, 30, 60]

    def test_motion_path_custom_points(self, service, text_item):
        result = service.add_motion_path(
            *text_item,
            points=[{"x": 0, "y": 0}, {"x": 1, "y": 1}],
            auto_rotate=True,
        )
        assert result.data["autoRotate"] is True
        assert "rotation" in _item(service, *text_item).keyframes[0].values

    def test_motion_path_needs_two_points(self, service, text_item):
        result = service.add_motion_path(*text_item, points=[{"x": 0, "y": 0}])
        assert result.error.code == "INVALID_ARGUMENTS"

    def test_unknown_motion_path_raises(self, service, text_item):
        with pytest.raises(UnknownMotionPathError):
            service.add_motion_path(*text_item, preset="zigzag")


class TestStaggerOrder:
    """Test stagger start orders."""

    def test_orders(self):
        assert stagger_order(4, "forward") == [0, 1, 2, 3]
        assert stagger_order(4, "reverse") == [3, 2, 1, 0]
        assert stagger_order(5, "center-out") == [2, 3, 1, 4, 0]

    def test_random_is_seeded(self):
        first = stagger_order(8, "random", seed=7)
        assert first == stagger_order(8, "random", seed=7)
        assert sorted(first) == list(range(8))


# =============================================================================
# Scenes and composition
# =============================================================================


class TestScenes:
    """Test scene commands."""

    def test_scenes_append_back_to_back(self, service):
        first = service.add_scene("Intro", duration_in_seconds=3)
        second = service.add_scene("Main", duration_in_frames=120)
        assert (first.data["startFrame"], first.data["durationInFrames"]) == (0, 90)
        assert (second.data["startFrame"], second.data["durationInFrames"]) == (90, 120)

    def test_first_scene_transition_dropped(self, service):
        result = service.add_scene("Intro", transition={"type": "fade"})
        assert result.warnings == ["The first scene cannot have a transition; dropped"]
        assert service.document.scenes[0].transition is None

    def test_set_scene_transition(self, service):
        first_id = service.add_scene("Intro").data["sceneId"]
        second_id = service.add_scene("Main").data["sceneId"]
        assert service.set_scene_transition(second_id, {"type": "wipe", "direction": "left"}).success
        assert service.document.find_scene(second_id).transition.type == "wipe"

        result = service.set_scene_transition(first_id, {"type": "fade"})
        assert result.warnings
        assert service.document.find_scene(first_id).transition is None

    def test_unknown_transition_raises(self, service):
        service.add_scene("Intro")
        scene_id = service.add_scene("Main").data["sceneId"]
        with pytest.raises(UnknownTransitionTypeError):
            service.set_scene_transition(scene_id, {"type": "dissolve"})

    def test_update_scene_reorders(self, service):
        first_id = service.add_scene("Intro", duration_in_frames=60).data["sceneId"]
        second_id = service.add_scene("Main", duration_in_frames=60).data["sceneId"]
        result = service.update_scene(first_id, start_frame=200, name="Outro")
        assert result.data["index"] == 1
        assert [scene.id for scene in service.document.scenes] == [second_id, first_id]
        assert service.document.find_scene(first_id).name == "Outro"

    def test_update_scene_warns_when_another_scene_becomes_first(self, service):
        first_id = service.add_scene("A", duration_in_frames=60).data["sceneId"]
        second_id = service.add_scene("B", duration_in_frames=60, transition={"type": "fade"}).data["sceneId"]
        result = service.update_scene(first_id, start_frame=400)
        assert service.document.scenes[0].id == second_id
        assert service.document.scenes[0].transition is None
        assert result.warnings == ["Scene 'B' is now first; its transition was dropped"]

    def test_remove_scene_unassigns_items(self, service, text_item):
        scene_id = service.add_scene("Intro").data["sceneId"]
        service.assign_item_to_scene(*text_item, scene_id)
        result = service.remove_scene(scene_id)
        assert result.data["unassignedItems"] == 1
        assert service.document.scenes == []
        assert _item(service, *text_item).scene_id is None

    def test_list_scenes(self, service):
        service.add_scene("Intro", duration_in_seconds=2)
        result = service.list_scenes()
        assert result.data["count"] == 1
        assert result.data["scenes"][0]["durationInSeconds"] == 2.0


class TestComposition:
    """Test composition-wide commands."""

    def test_update_composition_clamps(self, service):
        result = service.update_composition(name="Promo", fps=0, width=1280)
        assert result.warnings == ["fps 0 clamped to 1"]
        assert (service.document.name, service.document.fps, service.document.width) == ("Promo", 1, 1280)

    def test_clear_composition(self, service, text_item):
        service.add_track("Background", "gradient")
        service.add_scene("Intro")
        result = service.clear_composition()
        assert result.data == {"removedTracks": 2, "removedItems": 1, "removedScenes": 1}
        assert service.document.tracks == []
        assert service.document.scenes == []

    def test_clear_empty_composition(self, service):
        assert service.clear_composition().success
        assert service.document.tracks == []
        assert service.document.scenes == []

    def test_load_document(self, service):
        result = service.load_document({
            "name": "Loaded",
            "fps": 60,
            "tracks": [{"type": "text", "items": [{"type": "text", "from": 5, "text": "Hi"}]}],
        })
        assert result.success
        assert service.document.name == "Loaded"
        assert service.document.tracks[0].items[0].from_frame == 5
        service.undo()
        assert service.document.name == "Untitled composition"

    def test_load_invalid_document(self, service):
        result = service.load_document({"tracks": [{"type": "text", "items": "nope"}]})
        assert result.error.code == "INVALID_ARGUMENTS"

    def test_load_rejects_item_on_wrong_track(self, service):
        result = service.load_document({"tracks": [{"id": "t1", "type": "text", "items": [{"id": "i1", "type": "video"}]}]})
        assert not result.success
        assert result.error.code == "INVALID_ARGUMENTS"
        assert result.error.location.field == "tracks.0.items.0.type"
        assert service.document.tracks == []

    @pytest.mark.parametrize("payload,field", [
        (
            {"tracks": [{"id": "t1", "type": "text", "items": [{"id": "i1", "type": "text"}, {"id": "i1", "type": "text"}]}]},
            "tracks.0.items.1.id",
        ),
        (
            {"tracks": [{"id": "t1", "type": "text"}, {"id": "t1", "type": "video"}]},
            "tracks.1.id",
        ),
        (
            {"scenes": [{"id": "s1", "startFrame": 0}, {"id": "s1", "startFrame": 200}]},
            "scenes.1.id",
        ),
    ])
    def test_load_rejects_duplicate_ids(self, service, payload, field):
        result = service.load_document(payload)
        assert result.error.code == "INVALID_ARGUMENTS"
        assert result.error.location.field == field
        assert not service.history.can_undo

    def test_unknown_preset_category_raises(self, service):
        with pytest.raises(UnknownPresetCategoryError):
            service.list_animation_presets("sparkle")

    def test_catalogues(self, service):
        presets = service.list_animation_presets("filter")
        assert presets.data["count"] == 4
        assert service.list_properties("audio").data["properties"] == ["volume"]
        assert "fontSize" in service.list_properties("text").data["properties"]


# =============================================================================
# Atomicity and history
# =============================================================================


class TestAtomicity:
    """Test that failed commands change nothing."""

    def test_failed_update_leaves_document(self, service, text_item):
        before = service.document.to_payload()
        result = service.update_item(*text_item, {
            "text": "changed",
            "keyframes": [{"frame": 0, "values": {"nonsense": 1}}],
        })
        assert not result.success
        assert service.document.to_payload() == before
        assert len(service.history.get_history()) == 2

    def test_failed_camera_movement_leaves_document(self, service, text_item):
        before = service.document.to_payload()
        result = service.add_camera_movement("zoom-in", targets=[{"itemId": text_item[1]}, {"itemId": "ghost"}])
        assert not result.success
        assert service.document.to_payload() == before


class TestHistory:
    """Test undo and redo through the service."""

    def test_undo_redo(self, service):
        service.add_track("Titles", "text")
        assert service.undo().success
        assert service.document.tracks == []
        assert service.redo().success
        assert len(service.document.tracks) == 1

    def test_nothing_to_undo(self, service):
        result = service.undo()
        assert result.error.code == "NOTHING_TO_UNDO"

    def test_new_command_clears_redo(self, service):
        service.add_track("Titles", "text")
        service.undo()
        service.add_track("Clips", "video")
        assert service.redo().error.code == "NOTHING_TO_REDO"

    def test_history_newest_first(self, service):
        service.add_track("Titles", "text")
        service.add_scene("Intro")
        operations = service.get_history().data["operations"]
        assert [op["command"] for op in operations] == ["add_scene", "add_track"]

    def test_queries_not_recorded(self, service):
        service.list_scenes()
        assert service.get_history().data["operations"] == []
