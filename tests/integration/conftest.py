"""Shared fixtures for integration tests."""

from __future__ import annotations

import httpx
import pytest

BOOKS = [
    {"title": "Dune", "pages": 412},
    {"title": "Emma", "pages": 474},
]


def _book_api(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/books":
        return httpx.Response(200, json={"books": BOOKS})
    if request.url.path == "/flaky":
        return httpx.Response(503, json={"error": "unavailable"})
    return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
async def api_client():
    """Async client backed by an in-process book API."""
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(_book_api), base_url="https://api.test"
    ) as client:
        yield client
