"""
HTTP client for the Dream List task API.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from dreamlist.domain.message import ExtractedTask

logger = logging.getLogger(__name__)


class TaskStoreError(Exception):
    """Raised when the task API cannot be reached or answers with an error."""


class TaskStoreClient:
    """
    Thin wrapper over the /todos endpoints.

    Dispatch is best-effort: add_todo never raises, it logs and returns None.
    """

    def __init__(
        self,
        base_url: str,
        source: str = "openclaw",
        tag: Optional[str] = "bot",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.tag = tag
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def check_connection(self) -> bool:
        """
        Probe the task API.

        Returns:
            True if GET /todos answered with a 2xx status
        """
        try:
            response = await self._client.get("/todos")
        except httpx.HTTPError as e:
            logger.error(f"Cannot connect to task API at {self.base_url}: {e}")
            return False

        if not response.is_success:
            logger.error(f"Task API at {self.base_url} answered {response.status_code}")
            return False
        return True

    async def add_todo(self, task: ExtractedTask) -> Optional[str]:
        """
        Create a todo for an extracted task.

        Args:
            task: The task to send

        Returns:
            The created todo id, or None if the call failed
        """
        payload = task.to_payload(source=self.source, tag=self.tag)

        try:
            response = await self._client.post("/todos", json=payload)
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(
                f"API error adding task {task.text!r} "
                f"(session={task.session_key}, message={task.message_id}): {e}"
            )
            return None
        except ValueError:
            logger.error(
                f"Task API returned a non-JSON body ({response.status_code}) "
                f"for message {task.message_id}"
            )
            return None

        if not response.is_success or not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            logger.error(
                f"Failed to add task {task.text!r} "
                f"(session={task.session_key}, message={task.message_id}): "
                f"{error or response.status_code}"
            )
            return None

        todo_id = (data.get("data") or {}).get("id")
        logger.info(f"Added to Dream List: {task.text!r} [{task.priority.value}] id={todo_id}")
        return todo_id

    async def list_todos(self, tag: Optional[str] = None, pending: bool = False) -> List[Dict[str, Any]]:
        """
        Fetch todos from the task API.

        Args:
            tag: Only return todos with this tag
            pending: Only return todos that are not completed

        Returns:
            List of todo dicts, newest first

        Raises:
            TaskStoreError: If the API is unreachable or reports a failure
        """
        params: Dict[str, str] = {}
        if tag:
            params["tag"] = tag
        if pending:
            params["pending"] = "true"

        try:
            response = await self._client.get("/todos", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TaskStoreError(f"Failed to list todos: {e}") from e

        if not data.get("success"):
            raise TaskStoreError(f"Failed to list todos: {data.get('error', 'unknown error')}")
        return data.get("data") or []

    async def complete_todo(self, todo_id: str) -> bool:
        """
        Mark a todo as completed.

        Args:
            todo_id: Id of the todo

        Returns:
            True if the API confirmed the update
        """
        try:
            response = await self._client.put(f"/todos/{todo_id}", json={"completed": True})
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to complete todo {todo_id}: {e}")
            return False

        if response.is_success and data.get("success"):
            logger.info(f"Completed todo {todo_id}: {data['data'].get('text')!r}")
            return True

        logger.error(f"Failed to complete todo {todo_id}: {data.get('error', response.status_code)}")
        return False
