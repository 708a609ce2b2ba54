"""
Storage backends for the task-list API.

The API is written against TodoRepository; the backend is picked by the
DREAMLIST_TODO_BACKEND setting.
"""

import logging
from typing import Dict, List, Optional, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from dreamlist.domain.todo import Todo, TodoCreate, TodoRecord, TodoStats, TodoUpdate, new_todo_id
from dreamlist.utils.time import now_ms

logger = logging.getLogger(__name__)


class TodoRepository(Protocol):
    """Todo persistence operations."""

    async def list(self, pending: bool = False, tag: Optional[str] = None) -> List[Todo]:
        ...

    async def stats(self) -> TodoStats:
        ...

    async def create(self, data: TodoCreate) -> Todo:
        ...

    async def update(self, todo_id: str, changes: TodoUpdate) -> Optional[Todo]:
        ...

    async def delete(self, todo_id: str) -> Optional[Todo]:
        ...


def _apply_update(todo: Todo, changes: TodoUpdate, timestamp: int) -> Todo:
    update: Dict[str, object] = {"updated_at": timestamp}
    if changes.completed is not None:
        update["completed"] = changes.completed
        update["completed_at"] = timestamp if changes.completed else None
    if changes.text is not None:
        update["text"] = changes.text.strip()
    if changes.priority is not None:
        update["priority"] = changes.priority
    return todo.model_copy(update=update)


class InMemoryTodoRepository:
    """Process-local list of todos, newest first. Lost on restart."""

    def __init__(self) -> None:
        self._todos: List[Todo] = []

    async def list(self, pending: bool = False, tag: Optional[str] = None) -> List[Todo]:
        todos = sorted(self._todos, key=lambda t: t.created_at, reverse=True)
        if pending:
            todos = [t for t in todos if not t.completed]
        if tag:
            todos = [t for t in todos if t.tag == tag]
        return todos

    async def stats(self) -> TodoStats:
        completed = sum(1 for t in self._todos if t.completed)
        return TodoStats(total=len(self._todos), completed=completed, pending=len(self._todos) - completed)

    async def create(self, data: TodoCreate) -> Todo:
        todo = Todo(
            id=new_todo_id(),
            text=data.text.strip(),
            priority=data.priority,
            source=data.source,
            tag=data.tag,
            metadata=data.metadata,
            created_at=now_ms(),
        )
        self._todos.insert(0, todo)
        return todo

    async def update(self, todo_id: str, changes: TodoUpdate) -> Optional[Todo]:
        for index, todo in enumerate(self._todos):
            if todo.id == todo_id:
                updated = _apply_update(todo, changes, now_ms())
                self._todos[index] = updated
                return updated
        return None

    async def delete(self, todo_id: str) -> Optional[Todo]:
        for index, todo in enumerate(self._todos):
            if todo.id == todo_id:
                return self._todos.pop(index)
        return None


def _record_to_todo(record: TodoRecord) -> Todo:
    return Todo(
        id=record.id,
        text=record.text,
        priority=record.priority,
        completed=record.completed,
        source=record.source,
        tag=record.tag,
        metadata=record.meta or {},
        created_at=record.created_at,
        updated_at=record.updated_at,
        completed_at=record.completed_at,
    )


class SqlTodoRepository:
    """SQLAlchemy-backed todos (sqlite via aiosqlite by default)."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def list(self, pending: bool = False, tag: Optional[str] = None) -> List[Todo]:
        query = select(TodoRecord).order_by(TodoRecord.created_at.desc(), TodoRecord.id.desc())
        if pending:
            query = query.where(TodoRecord.completed.is_(False))
        if tag:
            query = query.where(TodoRecord.tag == tag)

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_record_to_todo(r) for r in result.scalars().all()]

    async def stats(self) -> TodoStats:
        async with self._session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(TodoRecord))
            completed = await session.scalar(
                select(func.count()).select_from(TodoRecord).where(TodoRecord.completed.is_(True))
            )
        total = total or 0
        completed = completed or 0
        return TodoStats(total=total, completed=completed, pending=total - completed)

    async def create(self, data: TodoCreate) -> Todo:
        record = TodoRecord(
            id=new_todo_id(),
            text=data.text.strip(),
            priority=data.priority,
            completed=False,
            source=data.source,
            tag=data.tag,
            meta=data.metadata,
            created_at=now_ms(),
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
            return _record_to_todo(record)

    async def update(self, todo_id: str, changes: TodoUpdate) -> Optional[Todo]:
        async with self._session_factory() as session:
            record = await session.get(TodoRecord, todo_id)
            if record is None:
                return None

            updated = _apply_update(_record_to_todo(record), changes, now_ms())
            record.text = updated.text
            record.priority = updated.priority
            record.completed = updated.completed
            record.completed_at = updated.completed_at
            record.updated_at = updated.updated_at
            await session.commit()
            return updated

    async def delete(self, todo_id: str) -> Optional[Todo]:
        async with self._session_factory() as session:
            record = await session.get(TodoRecord, todo_id)
            if record is None:
                return None
            todo = _record_to_todo(record)
            await session.execute(delete(TodoRecord).where(TodoRecord.id == todo_id))
            await session.commit()
            return todo
