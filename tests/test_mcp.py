"""
Tests for the MCP tools.

The tools talk to the HTTP API through ``api_client``; here the client is
pointed at the FastAPI app in-process.
"""

import json

import httpx
import pytest

from timeline_engine.main import app
from timeline_engine.mcp import api_client, tools
from timeline_engine.mcp.server import mcp


@pytest.fixture
def in_process_api(monkeypatch, fresh_app_service):
    def _client(timeout=None):
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    monkeypatch.setattr(api_client, "_client", _client)
    return fresh_app_service


class TestServer:
    @pytest.mark.asyncio
    async def test_tools_registered(self):
        names = {tool.name for tool in await mcp.list_tools()}
        assert names == {
            "list_commands",
            "execute_command",
            "get_composition",
            "inspect_frame",
            "validate_composition",
        }


class TestTools:
    """Tool calls return the API envelope as JSON text."""

    @pytest.mark.asyncio
    async def test_list_commands(self, in_process_api):
        body = json.loads(await tools.list_commands())
        names = [command["name"] for command in body["data"]["commands"]]
        assert "add_element" in names
        assert "list_properties" in names

    @pytest.mark.asyncio
    async def test_execute_and_read_back(self, in_process_api):
        body = json.loads(await tools.execute_command(
            "add_element",
            {"item": {"type": "text", "text": "Hi", "durationInFrames": 30}},
        ))
        assert body["data"]["success"] is True

        composition = json.loads(await tools.get_composition())
        assert composition["data"]["tracks"][0]["items"][0]["text"] == "Hi"
        assert in_process_api.document.tracks[0].items[0].text == "Hi"

    @pytest.mark.asyncio
    async def test_error_envelope_is_returned(self, in_process_api):
        body = json.loads(await tools.execute_command("explode", {}))
        assert body["error"]["code"] == "UNKNOWN_COMMAND"

    @pytest.mark.asyncio
    async def test_inspect_frame(self, in_process_api):
        await tools.execute_command("add_element", {"item": {"type": "text", "text": "Hi", "from": 10}})
        body = json.loads(await tools.inspect_frame(15))
        assert body["data"]["items"][0]["relativeFrame"] == 5

    @pytest.mark.asyncio
    async def test_validate_selected_rules(self, in_process_api):
        await tools.execute_command("add_track", {"type": "video"})
        body = json.loads(await tools.validate_composition(["empty_tracks"]))
        assert body["data"]["totalIssues"] == 1
        assert body["data"]["isValid"] is True
