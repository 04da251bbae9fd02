"""
Tests for the HTTP API (envelope format).

These tests verify:
- Envelope response format (request_id, data, meta)
- Command dispatch over HTTP, including failure status codes
- Composition, frame and validation queries

Run with: pytest tests/test_api.py -v
"""

import uuid


def _add_text(client, **fields) -> dict:
    item = {"type": "text", "text": "Hello", "durationInFrames": 60, **fields}
    response = client.post("/api/commands/add_element", json={"item": item})
    assert response.status_code == 200
    data = response.json()["data"]["data"]
    return {"trackId": data["trackId"], "itemId": data["itemId"]}


class TestEnvelopeFormat:
    """Test envelope response format compliance."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_list_commands_returns_envelope(self, client):
        response = client.get("/api/commands")
        assert response.status_code == 200
        body = response.json()

        assert "request_id" in body
        assert "data" in body
        assert "meta" in body
        assert "error" not in body
        uuid.UUID(body["request_id"])

        meta = body["meta"]
        assert meta["api_version"] == "1.0"
        assert "processing_time_ms" in meta
        assert "timestamp" in meta

        assert body["data"]["count"] == len(body["data"]["commands"])

    def test_unknown_route_returns_envelope(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestCommands:
    """Test POST /api/commands/{name}."""

    def test_add_element(self, client, fresh_app_service):
        ids = _add_text(client)
        assert fresh_app_service.document.find_item(ids["trackId"], ids["itemId"])

    def test_warnings_in_meta(self, client):
        response = client.post("/api/commands/add_element", json={"item": {"type": "text", "from": -3}})
        body = response.json()
        assert body["data"]["warnings"] == ["from -3 clamped to 0"]
        assert body["meta"]["warnings"] == ["from -3 clamped to 0"]

    def test_unknown_command_is_404(self, client):
        response = client.post("/api/commands/explode", json={})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "UNKNOWN_COMMAND"

    def test_missing_track_is_404_with_result(self, client):
        response = client.post(
            "/api/commands/add_keyframes",
            json={"trackId": "nope", "itemId": "nope", "keyframes": [{"frame": 0, "values": {"opacity": 0}}]},
        )
        assert response.status_code == 404
        body = response.json()
        assert body["error"]["code"] == "TRACK_NOT_FOUND"
        assert body["error"]["retryable"] is True
        assert body["data"]["success"] is False

    def test_invalid_arguments_is_400(self, client):
        response = client.post("/api/commands/reorder_track", json={"trackId": "x"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ARGUMENTS"

    def test_unknown_preset_is_400(self, client):
        ids = _add_text(client)
        response = client.post(
            "/api/commands/apply_animation_preset",
            json={**ids, "preset": "teleport"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "UNKNOWN_ANIMATION_PRESET"
        assert "fade-in" in body["error"]["message"]

    def test_body_optional(self, client):
        response = client.post("/api/commands/list_scenes")
        assert response.status_code == 200
        assert response.json()["data"]["data"]["count"] == 0

    def test_non_object_body_is_422(self, client):
        response = client.post("/api/commands/list_scenes", json=[1, 2])
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestComposition:
    """Test composition, frame and validation endpoints."""

    def test_get_composition(self, client):
        _add_text(client)
        response = client.get("/api/composition")
        assert response.status_code == 200
        tracks = response.json()["data"]["tracks"]
        assert tracks[0]["items"][0]["durationInFrames"] == 60
        assert tracks[0]["items"][0]["from"] == 0

    def test_replace_composition(self, client):
        response = client.put("/api/composition", json={"name": "Promo", "fps": 24})
        assert response.status_code == 200
        assert response.json()["data"]["command"] == "load_composition"
        assert client.get("/api/composition").json()["data"]["fps"] == 24

    def test_composition_round_trips(self, client):
        _add_text(client)
        client.post("/api/commands/add_scene", json={"name": "Intro"})
        payload = client.get("/api/composition").json()["data"]
        client.put("/api/composition", json=payload)
        assert client.get("/api/composition").json()["data"] == payload

    def test_frame(self, client):
        ids = _add_text(client)
        client.post(
            "/api/commands/add_keyframes",
            json={**ids, "keyframes": [{"frame": 0, "values": {"opacity": 0}, "easing": "linear"}, {"frame": 20, "values": {"opacity": 1}, "easing": "linear"}]},
        )
        body = client.get("/api/frames/10").json()
        assert body["data"]["items"][0]["values"]["opacity"] == 0.5

    def test_frame_out_of_range_warns(self, client):
        body = client.get("/api/frames/5000").json()
        assert body["data"]["inRange"] is False
        assert body["meta"]["warnings"]

    def test_validation(self, client):
        client.post("/api/commands/add_track", json={"type": "text"})
        body = client.get("/api/validation", params=[("rules", "empty_tracks"), ("rules", "bogus")]).json()
        assert body["data"]["totalIssues"] == 1
        assert body["data"]["issues"][0]["rule"] == "empty_tracks"
        assert body["meta"]["warnings"] == ["Unknown validation rules skipped: bogus"]
