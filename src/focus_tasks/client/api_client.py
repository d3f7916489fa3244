"""Async HTTP client for the Focus Tasks API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..domain.task import Task
from ..exceptions import ApiError


logger = logging.getLogger(__name__)


class TaskApiClient:
    """Talks to ``/api/tasks`` with ``httpx.AsyncClient``.

    Every failure, whether transport-level or a non-2xx response, is raised
    as ``ApiError``. Successful calls return domain objects.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _task_url(self, task_id: str) -> str:
        return f"{self.base_url}/{task_id}"

    async def _request(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise ApiError(f"Request failed: {e}") from e

        if response.is_error:
            raise ApiError(self._error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Invalid JSON in response", status_code=response.status_code) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"

    @staticmethod
    def _to_task(data: Any) -> Task:
        if not isinstance(data, dict):
            raise ApiError("Expected a task object")
        try:
            return Task.from_dict(data)
        except ValueError as e:
            raise ApiError(str(e)) from e

    async def list_tasks(self) -> List[Task]:
        data = await self._request("GET", self.base_url)
        if not isinstance(data, list):
            raise ApiError("Expected a list of tasks")
        return [self._to_task(item) for item in data]

    async def create_task(self, title: str) -> Task:
        data = await self._request("POST", self.base_url, json={"title": title})
        return self._to_task(data)

    async def update_task(self, task_id: str, **patch: Any) -> Dict[str, Any]:
        """Send a partial update and return the server's fields as a dict.

        The raw fields are returned so the caller can merge only what the
        server sent back.
        """
        data = await self._request("PUT", self._task_url(task_id), json=patch)
        if not isinstance(data, dict):
            raise ApiError("Expected a task object")
        return data

    async def delete_task(self, task_id: str) -> str:
        data = await self._request("DELETE", self._task_url(task_id))
        return data.get("message", "") if isinstance(data, dict) else ""
