# app/schemas/task.py
from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional

from app.models.task import TaskStatus, TaskPriority
from app.schemas.base import CamelModel

class TaskCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None

    @field_validator('title')
    def title_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError('Title must not be blank')
        return v

class TaskUpdate(CamelModel):
    """Partial update: only keys present in the request body are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None

    @field_validator('title', 'status', 'priority')
    def must_not_be_null(cls, v, info):
        # Defaults are not validated, so this only fires for an explicit null
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v

    @field_validator('title')
    def title_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError('Title must not be blank')
        return v

class TaskStatusUpdate(CamelModel):
    status: TaskStatus

class TaskOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

class TaskDeleted(CamelModel):
    id: int
