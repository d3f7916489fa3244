"""Tests for the async HTTP client."""

import json

import httpx
import pytest

from focus_tasks.client.api_client import TaskApiClient
from focus_tasks.domain.task import Task
from focus_tasks.exceptions import ApiError


BASE_URL = "http://tasks.test/api/tasks"


def make_client(handler):
    return TaskApiClient(BASE_URL, transport=httpx.MockTransport(handler))


class TestRequests:
    """Test request shapes and response parsing."""

    async def test_list_tasks(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            return httpx.Response(200, json=[
                {"id": "t1", "title": "Buy milk", "completed": False},
                {"_id": "t2", "title": "Walk", "completed": True},
            ])

        async with make_client(handler) as client:
            tasks = await client.list_tasks()

        assert seen == [("GET", BASE_URL)]
        assert tasks == [Task("t1", "Buy milk"), Task("t2", "Walk", True)]

    async def test_create_task(self):
        def handler(request):
            assert request.method == "POST"
            assert json.loads(request.content) == {"title": "Buy milk"}
            return httpx.Response(201, json={"id": "t1", "title": "Buy milk", "completed": False})

        async with make_client(handler) as client:
            task = await client.create_task("Buy milk")

        assert task == Task("t1", "Buy milk")

    async def test_update_task_returns_raw_fields(self):
        def handler(request):
            assert request.method == "PUT"
            assert str(request.url) == f"{BASE_URL}/t1"
            assert json.loads(request.content) == {"completed": True}
            return httpx.Response(200, json={"id": "t1", "completed": True})

        async with make_client(handler) as client:
            data = await client.update_task("t1", completed=True)

        assert data == {"id": "t1", "completed": True}

    async def test_delete_task(self):
        def handler(request):
            assert request.method == "DELETE"
            assert str(request.url) == f"{BASE_URL}/t1"
            return httpx.Response(200, json={"message": "Task deleted"})

        async with make_client(handler) as client:
            assert await client.delete_task("t1") == "Task deleted"

    def test_trailing_slash_stripped(self):
        client = TaskApiClient(BASE_URL + "/")
        assert client.base_url == BASE_URL


class TestFailures:
    """Test every failure becomes ApiError."""

    async def test_error_body_message(self):
        def handler(request):
            return httpx.Response(400, json={"error": "Title is required"})

        async with make_client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.create_task("")

        assert exc_info.value.status_code == 400
        assert exc_info.value.is_client_error
        assert str(exc_info.value) == "Title is required"

    async def test_server_error_without_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway")

        async with make_client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.list_tasks()

        assert exc_info.value.status_code == 502
        assert not exc_info.value.is_client_error
        assert str(exc_info.value) == "HTTP 502"

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.list_tasks()

        assert exc_info.value.status_code is None

    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        async with make_client(handler) as client:
            with pytest.raises(ApiError, match="Invalid JSON"):
                await client.list_tasks()

    async def test_unexpected_shape(self):
        def handler(request):
            return httpx.Response(200, json={"tasks": []})

        async with make_client(handler) as client:
            with pytest.raises(ApiError, match="list of tasks"):
                await client.list_tasks()

    async def test_task_without_id(self):
        def handler(request):
            return httpx.Response(201, json={"title": "Buy milk"})

        async with make_client(handler) as client:
            with pytest.raises(ApiError):
                await client.create_task("Buy milk")
