"""Tests for the chatbot webhook passthrough."""

from __future__ import annotations

import json

import httpx
import pytest

from agent_architect.relay.passthrough import NOT_CONFIGURED_ERROR, passthrough, preflight
from tests.conftest import failing_transport

CHATBOT_URL = "https://n8n.example/webhook/chatbot"


class TestPassthrough:
    @pytest.mark.asyncio
    async def test_not_configured(self) -> None:
        resp = await passthrough(b"{}", None)
        assert resp.status_code == 500
        assert json.loads(resp.body) == {"ok": False, "error": NOT_CONFIGURED_ERROR}

    @pytest.mark.asyncio
    async def test_mirrors_upstream_response(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                202, content=b"queued", headers={"Content-Type": "text/plain"},
            )

        resp = await passthrough(
            b'{"text": "hi"}', CHATBOT_URL, transport=httpx.MockTransport(handler),
        )

        assert resp.status_code == 202
        assert resp.body == b"queued"
        assert resp.headers["content-type"].startswith("text/plain")
        assert json.loads(seen[0].content) == {"text": "hi"}

    @pytest.mark.asyncio
    async def test_upstream_error_status_is_mirrored(self) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(404, json={"message": "no such workflow"}),
        )
        resp = await passthrough(b"{}", CHATBOT_URL, transport=transport)
        assert resp.status_code == 404
        assert json.loads(resp.body) == {"message": "no such workflow"}

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        transport = failing_transport(httpx.ConnectError("connection refused"))
        resp = await passthrough(b"{}", CHATBOT_URL, transport=transport)
        assert resp.status_code == 500
        body = json.loads(resp.body)
        assert body["ok"] is False
        assert "connection refused" in body["error"]

    @pytest.mark.asyncio
    async def test_malformed_upstream_url(self) -> None:
        resp = await passthrough(b'{"a": 1}', "http://exa\x01mple.com/hook")
        assert resp.status_code == 500
        body = json.loads(resp.body)
        assert body["ok"] is False
        assert body["error"]

    @pytest.mark.asyncio
    async def test_invalid_json_body(self) -> None:
        resp = await passthrough(b"not json", CHATBOT_URL)
        assert resp.status_code == 500
        assert json.loads(resp.body)["ok"] is False

    @pytest.mark.asyncio
    async def test_timeout_is_passed_through(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        await passthrough(b"{}", CHATBOT_URL, timeout=2.5, transport=httpx.MockTransport(handler))
        assert seen[0].extensions["timeout"]["read"] == 2.5


def test_preflight() -> None:
    resp = preflight()
    assert resp.status_code == 204
    assert resp.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert resp.headers["access-control-allow-headers"] == "Content-Type"
    assert resp.headers["access-control-max-age"] == "86400"
