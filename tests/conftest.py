"""
Pytest fixtures for timeline engine tests.

Every test gets a fresh CommandService; the HTTP fixtures swap a fresh one
onto the app so tests never share a document.
"""

import pytest
from fastapi.testclient import TestClient

from timeline_engine.config import Settings
from timeline_engine.main import app
from timeline_engine.services.command_service import CommandService


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def service(settings) -> CommandService:
    """Command service over an empty 30fps, 900 frame composition."""
    return CommandService(settings=settings)


@pytest.fixture
def text_item(service):
    """(track_id, item_id) of a 60 frame text item at frame 0."""
    track_id = service.add_track("Titles", "text").data["trackId"]
    result = service.add_item(track_id, {"text": "Hello", "from": 0, "durationInFrames": 60})
    return track_id, result.data["itemId"]


@pytest.fixture
def fresh_app_service(settings) -> CommandService:
    service = CommandService(settings=settings)
    app.state.command_service = service
    return service


@pytest.fixture
def client(fresh_app_service):
    """FastAPI test client."""
    return TestClient(app, raise_server_exceptions=False)
