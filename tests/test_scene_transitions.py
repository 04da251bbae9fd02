"""
Tests for scene transition resolution and blend functions.

Run with: pytest tests/test_scene_transitions.py -v
"""

import pytest

from timeline_engine.exceptions import UnknownTransitionTypeError
from timeline_engine.schemas.composition import TRANSITION_TYPES, CompositionDocument, Scene, SceneTransition
from timeline_engine.services.scene_transitions import (
    BLEND_FUNCTIONS,
    blend,
    get_blend_function,
    resolve_scene_at,
    transition_window,
)


def _scenes(transition_type: str = "fade", duration: int = 15, **transition) -> list[Scene]:
    return [
        Scene(id="intro", start_frame=0, duration_in_frames=90),
        Scene(
            id="main",
            start_frame=90,
            duration_in_frames=90,
            transition=SceneTransition(type=transition_type, duration_in_frames=duration, **transition),
        ),
    ]


class TestResolveSceneAt:
    """Test which scenes are on screen at a frame."""

    def test_fade_midway(self):
        """Fade of 15 frames starting at 90: frame 97 is 7/15 of the way in."""
        scene_frame = resolve_scene_at(_scenes(), 97)

        assert scene_frame.in_transition
        assert scene_frame.weight == pytest.approx(0.467, abs=1e-3)
        exiting = scene_frame.layer("exiting")
        entering = scene_frame.layer("entering")
        assert exiting.scene_id == "intro"
        assert entering.scene_id == "main"
        assert exiting.appearance.opacity + entering.appearance.opacity == pytest.approx(1.0)

    def test_window_start_shows_previous_scene(self):
        """At w=0 the previous scene is untouched and the new one not yet visible."""
        scene_frame = resolve_scene_at(_scenes(), 90)
        assert scene_frame.weight == 0
        assert scene_frame.layer("exiting").appearance.is_identity
        assert scene_frame.layer("entering").appearance.is_hidden

    def test_after_window_single_active(self):
        """The window is half-open, so its end frame is already plain playback."""
        scene_frame = resolve_scene_at(_scenes(), 105)
        assert not scene_frame.in_transition
        assert [(layer.scene_id, layer.role) for layer in scene_frame.layers] == [("main", "active")]

    def test_before_transition_single_active(self):
        scene_frame = resolve_scene_at(_scenes(), 45)
        assert [(layer.scene_id, layer.role) for layer in scene_frame.layers] == [("intro", "active")]

    def test_outside_all_scenes(self):
        assert resolve_scene_at(_scenes(), 500).layers == []

    def test_first_scene_transition_ignored(self):
        scenes = [Scene(id="only", start_frame=0, duration_in_frames=60, transition=SceneTransition(type="wipe"))]
        scene_frame = resolve_scene_at(scenes, 5)
        assert not scene_frame.in_transition
        assert scene_frame.layers[0].role == "active"

    def test_transition_clamped_to_scene(self):
        """A transition longer than its scene ends with the scene."""
        scenes = _scenes(duration=30)
        scenes[1] = scenes[1].model_copy(update={"duration_in_frames": 10})
        assert transition_window(scenes[1], scenes[1].transition) == (90, 100)
        assert resolve_scene_at(scenes, 95).weight == pytest.approx(0.5)

    def test_custom_easing(self):
        scene_frame = resolve_scene_at(_scenes(duration=10, easing="linear"), 95)
        assert scene_frame.progress == pytest.approx(0.5)

    def test_default_easing_is_ease_in_out(self):
        scene_frame = resolve_scene_at(_scenes(duration=10), 92)
        # smoothstep(0.2)
        assert scene_frame.progress == pytest.approx(0.104)

    def test_direction_reported(self):
        scene_frame = resolve_scene_at(_scenes("slide", direction="right"), 95)
        assert scene_frame.transition_type == "slide"
        assert scene_frame.direction == "right"
        assert scene_frame.layer("exiting").appearance.translate_x > 0

    def test_to_dict_camel_case(self):
        payload = resolve_scene_at(_scenes(), 97).to_dict()
        assert payload["transitionType"] == "fade"
        assert payload["layers"][0]["appearance"]["translateX"] == 0.0


class TestBlendFunctions:
    """Test blend endpoint guarantees for every transition type."""

    def test_every_transition_type_has_a_blend(self):
        assert set(BLEND_FUNCTIONS) == set(TRANSITION_TYPES)

    @pytest.mark.parametrize("transition_type", TRANSITION_TYPES)
    def test_start_state(self, transition_type):
        """p=0: exiting untouched, entering in its pre-transition state."""
        exiting, entering = blend(transition_type, 0.0)
        assert exiting.is_identity
        assert entering.is_hidden

    @pytest.mark.parametrize("transition_type", TRANSITION_TYPES)
    def test_end_state(self, transition_type):
        """p=1: entering untouched, exiting hidden."""
        exiting, entering = blend(transition_type, 1.0)
        assert entering.is_identity
        assert exiting.is_hidden

    @pytest.mark.parametrize("p", [0.1, 0.25, 0.5, 0.9])
    def test_fade_opacities_sum_to_one(self, p):
        exiting, entering = blend("fade", p)
        assert exiting.opacity + entering.opacity == pytest.approx(1.0)

    def test_curtain_closes_then_opens(self):
        early_exit, early_enter = blend("curtain", 0.25)
        late_exit, late_enter = blend("curtain", 0.75)
        assert early_exit.reveal == pytest.approx(0.5)
        assert early_enter.is_hidden
        assert late_exit.is_hidden
        assert late_enter.reveal == pytest.approx(0.5)

    def test_unknown_transition_raises(self):
        with pytest.raises(UnknownTransitionTypeError):
            get_blend_function("dissolve")


class TestSceneModel:
    """Test scene and transition validation on the document."""

    def test_unknown_transition_type_rejected(self):
        with pytest.raises(UnknownTransitionTypeError):
            SceneTransition(type="dissolve")

    def test_document_sorts_scenes_and_drops_first_transition(self):
        document = CompositionDocument(scenes=[
            Scene(id="b", start_frame=100, transition=SceneTransition(type="fade")),
            Scene(id="a", start_frame=0, transition=SceneTransition(type="zoom")),
        ])
        assert [scene.id for scene in document.scenes] == ["a", "b"]
        assert document.scenes[0].transition is None
        assert document.scenes[1].transition.type == "fade"
