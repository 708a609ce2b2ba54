"""
Tests for the task store HTTP client.
"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from dreamlist.domain.message import ExtractedTask
from dreamlist.domain.todo import Priority
from dreamlist.infrastructure.todo_client import TaskStoreClient, TaskStoreError


def _client(handler) -> TaskStoreClient:
    http = httpx.AsyncClient(base_url="http://dreamlist.test/api", transport=httpx.MockTransport(handler))
    return TaskStoreClient("http://dreamlist.test/api", source="openclaw", tag="bot", client=http)


@pytest.fixture
def task() -> ExtractedTask:
    return ExtractedTask(
        text="call the bank",
        priority=Priority.MEDIUM,
        session_key="agent:main:main",
        message_id="m1",
        extracted_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestCheckConnection:
    """Tests for the startup probe."""

    @pytest.mark.asyncio
    async def test_ok(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/api/todos"
            return httpx.Response(200, json={"success": True, "data": []})

        assert await _client(handler).check_connection() is True

    @pytest.mark.asyncio
    async def test_non_2xx(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        assert await _client(handler).check_connection() is False

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await _client(handler).check_connection() is False


class TestAddTodo:
    """Tests for dispatching extracted tasks."""

    @pytest.mark.asyncio
    async def test_success(self, task):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"success": True, "data": {"id": "abc123"}})

        todo_id = await _client(handler).add_todo(task)

        assert todo_id == "abc123"
        assert seen["body"] == {
            "text": "call the bank",
            "priority": "medium",
            "source": "openclaw",
            "tag": "bot",
            "metadata": {
                "sessionKey": "agent:main:main",
                "messageId": "m1",
                "timestamp": 1767225600000,
            },
        }

    @pytest.mark.asyncio
    async def test_success_false(self, task):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": "Text is required"})

        assert await _client(handler).add_todo(task) is None

    @pytest.mark.asyncio
    async def test_server_error(self, task):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, content=b"Bad gateway")

        assert await _client(handler).add_todo(task) is None

    @pytest.mark.asyncio
    async def test_timeout(self, task):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        assert await _client(handler).add_todo(task) is None


class TestListAndComplete:
    """Tests for list_todos and complete_todo."""

    @pytest.mark.asyncio
    async def test_list_with_filters(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["tag"] == "bot"
            assert request.url.params["pending"] == "true"
            return httpx.Response(200, json={"success": True, "data": [{"id": "1", "text": "x"}]})

        todos = await _client(handler).list_todos(tag="bot", pending=True)

        assert todos == [{"id": "1", "text": "x"}]

    @pytest.mark.asyncio
    async def test_list_raises_on_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with pytest.raises(TaskStoreError):
            await _client(handler).list_todos()

    @pytest.mark.asyncio
    async def test_complete(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PUT"
            assert request.url.path == "/api/todos/abc"
            assert json.loads(request.content) == {"completed": True}
            return httpx.Response(200, json={"success": True, "data": {"id": "abc", "text": "x"}})

        assert await _client(handler).complete_todo("abc") is True

    @pytest.mark.asyncio
    async def test_complete_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"success": False, "error": "Todo not found"})

        assert await _client(handler).complete_todo("missing") is False
