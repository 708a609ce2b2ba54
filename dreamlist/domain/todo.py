"""
Todo domain model and schemas.
"""

import random
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import JSON, BigInteger, Boolean, Column, String, Enum as SQLEnum
from sqlalchemy.orm import declarative_base

from dreamlist.utils.time import now_ms

Base = declarative_base()

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class Priority(str, Enum):
    """Todo priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_todo_id() -> str:
    """Short, roughly time-ordered id (timestamp plus random suffix, base 36)."""
    return _to_base36(now_ms()) + _to_base36(random.getrandbits(40))


class TodoRecord(Base):
    """SQLAlchemy model for todos (sqlite backend)."""

    __tablename__ = "todos"

    id = Column(String(32), primary_key=True, default=new_todo_id)
    text = Column(String(1000), nullable=False)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    source = Column(String(64), default="manual", nullable=False)
    tag = Column(String(32), nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, default=dict)
    created_at = Column(BigInteger, default=now_ms, nullable=False)
    updated_at = Column(BigInteger, nullable=True)
    completed_at = Column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<TodoRecord(id={self.id}, text={self.text}, completed={self.completed})>"


# Pydantic Schemas

class TodoCreate(BaseModel):
    """Schema for creating a todo. Blank text is rejected by the API layer."""
    text: str = ""
    priority: Priority = Priority.MEDIUM
    source: str = "manual"
    tag: Optional[str] = Field(None, max_length=32)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TodoUpdate(BaseModel):
    """Schema for updating a todo."""
    completed: Optional[bool] = None
    text: Optional[str] = Field(None, min_length=1, max_length=1000)
    priority: Optional[Priority] = None


class Todo(BaseModel):
    """Todo as exposed over the API (camelCase timestamps, epoch ms)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    text: str
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    source: str = "manual"
    tag: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: int = Field(alias="createdAt")
    updated_at: Optional[int] = Field(None, alias="updatedAt")
    completed_at: Optional[int] = Field(None, alias="completedAt")

    def to_json(self) -> Dict[str, Any]:
        """Serialize the way API clients expect it."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TodoStats(BaseModel):
    """Counts returned alongside todo listings."""
    total: int
    completed: int
    pending: int
