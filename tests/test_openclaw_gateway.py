"""
Tests for the OpenClaw gateway HTTP client.
"""

import json

import httpx
import pytest

from dreamlist.infrastructure.openclaw_gateway import GatewayError, OpenClawGateway


def _gateway(handler) -> OpenClawGateway:
    client = httpx.AsyncClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))
    return OpenClawGateway("http://gateway.test", client=client)


class TestOpenClawGateway:
    """Tests for tool invocation and result unwrapping."""

    @pytest.mark.asyncio
    async def test_list_sessions_request_and_result(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"ok": True, "result": {"details": {"sessions": [{"key": "agent:main:main"}, {"nokey": 1}]}}},
            )

        gateway = _gateway(handler)
        sessions = await gateway.list_sessions(["main", "other"], 20)

        assert seen["path"] == "/tools/invoke"
        assert seen["body"] == {"tool": "sessions_list", "args": {"kinds": ["main", "other"], "limit": 20}}
        assert sessions == [{"key": "agent:main:main"}]

    @pytest.mark.asyncio
    async def test_session_history_from_text_content(self):
        payload = {"messages": [{"messageId": "m1", "content": "hi"}]}

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body["args"] == {"sessionKey": "agent:main:main", "limit": 10, "includeTools": False}
            return httpx.Response(
                200,
                json={"ok": True, "result": {"content": [{"type": "text", "text": json.dumps(payload)}]}},
            )

        gateway = _gateway(handler)
        messages = await gateway.session_history("agent:main:main", 10)

        assert messages == [{"messageId": "m1", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_plain_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": True, "result": {"messages": []}})

        assert await _gateway(handler).session_history("k", 5) == []

    @pytest.mark.asyncio
    async def test_bearer_token_header(self):
        gateway = OpenClawGateway("http://gateway.test", token="secret")

        assert gateway._client.headers["Authorization"] == "Bearer secret"
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(GatewayError, match="HTTP 503"):
            await _gateway(handler).list_sessions(["main"], 1)

    @pytest.mark.asyncio
    async def test_ok_false(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": False, "error": "tool not allowed"})

        with pytest.raises(GatewayError, match="tool not allowed"):
            await _gateway(handler).list_sessions(["main"], 1)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GatewayError):
            await _gateway(handler).session_history("k", 5)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(GatewayError, match="invalid JSON"):
            await _gateway(handler).session_history("k", 5)
