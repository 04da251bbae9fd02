"""HTTP client for the timeline engine API."""

from typing import Any

import httpx

from timeline_engine.config import get_settings


def _client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create an async HTTP client for the API."""
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=timeout or settings.request_timeout,
    )


def _envelope(resp: httpx.Response) -> dict:
    # 4xx envelopes carry error codes and suggestions the agent can act on
    if resp.status_code >= 500:
        resp.raise_for_status()
    return resp.json()


async def list_commands() -> dict:
    async with _client() as client:
        resp = await client.get("/api/commands")
        return _envelope(resp)


async def execute_command(name: str, arguments: dict[str, Any] | None = None) -> dict:
    async with _client() as client:
        resp = await client.post(f"/api/commands/{name}", json=arguments or {})
        return _envelope(resp)


async def get_composition() -> dict:
    async with _client() as client:
        resp = await client.get("/api/composition")
        return _envelope(resp)


async def get_frame(frame: int) -> dict:
    async with _client() as client:
        resp = await client.get(f"/api/frames/{frame}")
        return _envelope(resp)


async def validate(rules: list[str] | None = None) -> dict:
    params = [("rules", rule) for rule in rules or []]
    async with _client() as client:
        resp = await client.get("/api/validation", params=params)
        return _envelope(resp)
