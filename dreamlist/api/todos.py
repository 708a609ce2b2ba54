"""
Todo endpoints of the Dream List API.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dreamlist.domain.todo import TodoCreate, TodoUpdate
from dreamlist.usecases.todo_service import TodoNotFoundError, TodoService, TodoValidationError

logger = logging.getLogger(__name__)
router = APIRouter()


def get_todo_service(request: Request) -> TodoService:
    """Todo service created at application startup."""
    return request.app.state.todo_service


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.get("/todos")
async def list_todos(
    pending: bool = False,
    tag: Optional[str] = None,
    service: TodoService = Depends(get_todo_service),
):
    """List todos, newest first, with overall stats."""
    todos, stats = await service.list_todos(pending=pending, tag=tag)
    return {
        "success": True,
        "data": [todo.to_json() for todo in todos],
        "stats": stats.model_dump(),
    }


@router.post("/todos", status_code=201)
async def create_todo(
    payload: TodoCreate,
    service: TodoService = Depends(get_todo_service),
):
    """Add a todo."""
    try:
        todo = await service.add_todo(payload)
    except TodoValidationError as e:
        return error_response(str(e), 400)
    return {"success": True, "data": todo.to_json()}


@router.put("/todos/{todo_id}")
async def update_todo(
    todo_id: str,
    payload: TodoUpdate,
    service: TodoService = Depends(get_todo_service),
):
    """Update completion, text or priority."""
    try:
        todo = await service.update_todo(todo_id, payload)
    except TodoValidationError as e:
        return error_response(str(e), 400)
    except TodoNotFoundError as e:
        return error_response(str(e), 404)
    return {"success": True, "data": todo.to_json()}


@router.delete("/todos/{todo_id}")
async def delete_todo(
    todo_id: str,
    service: TodoService = Depends(get_todo_service),
):
    """Delete a todo."""
    try:
        todo = await service.delete_todo(todo_id)
    except TodoNotFoundError as e:
        return error_response(str(e), 404)
    return {"success": True, "data": todo.to_json()}
