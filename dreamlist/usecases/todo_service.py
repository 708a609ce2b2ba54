"""
Todo service for the task-list API.
"""

import logging
from typing import List, Optional, Tuple

from dreamlist.domain.todo import Todo, TodoCreate, TodoStats, TodoUpdate
from dreamlist.infrastructure.todo_repository import TodoRepository

logger = logging.getLogger(__name__)


class TodoValidationError(ValueError):
    """Raised when a request carries invalid todo data."""


class TodoNotFoundError(LookupError):
    """Raised when a todo id does not exist."""


class TodoService:
    """Service class for todo operations."""

    def __init__(self, repository: TodoRepository):
        self.repository = repository

    async def list_todos(
        self,
        pending: bool = False,
        tag: Optional[str] = None,
    ) -> Tuple[List[Todo], TodoStats]:
        """
        List todos, newest first.

        Args:
            pending: Only todos that are not completed
            tag: Only todos with this tag

        Returns:
            (todos, stats) - stats always cover the whole list
        """
        todos = await self.repository.list(pending=pending, tag=tag)
        stats = await self.repository.stats()
        return todos, stats

    async def add_todo(self, data: TodoCreate) -> Todo:
        """
        Create a todo.

        Raises:
            TodoValidationError: If the text is blank
        """
        if not data.text or not data.text.strip():
            raise TodoValidationError("Text is required")

        todo = await self.repository.create(data)
        logger.info(f"Created todo {todo.id} from {todo.source}: {todo.text!r}")
        return todo

    async def update_todo(self, todo_id: str, changes: TodoUpdate) -> Todo:
        """
        Update completion, text or priority of a todo.

        Raises:
            TodoValidationError: If the new text is blank
            TodoNotFoundError: If no todo has this id
        """
        if changes.text is not None and not changes.text.strip():
            raise TodoValidationError("Text is required")

        todo = await self.repository.update(todo_id, changes)
        if todo is None:
            raise TodoNotFoundError("Todo not found")
        return todo

    async def delete_todo(self, todo_id: str) -> Todo:
        """
        Delete a todo and return it.

        Raises:
            TodoNotFoundError: If no todo has this id
        """
        todo = await self.repository.delete(todo_id)
        if todo is None:
            raise TodoNotFoundError("Todo not found")
        logger.info(f"Deleted todo {todo_id}")
        return todo
