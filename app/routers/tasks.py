import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.user import User
from app.schemas.task import TaskCreate, TaskDeleted, TaskOut, TaskStatusUpdate, TaskUpdate
from app.services.task_service import TaskService
from app.utils.auth import get_current_user
from app.utils.dependencies import get_task_service
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError

router = APIRouter()

logger = logging.getLogger(__name__)


def _task_error(error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, ForbiddenError):
        return HTTPException(status_code=401, detail=error.message)
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=error.message)
    logger.exception("Unexpected error in task route")
    return HTTPException(status_code=500, detail="Server Error")


@router.get("", response_model=List[TaskOut])
def get_tasks(
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Tasks owned by the current user, newest first"""
    try:
        return task_service.list_tasks(current_user.id)
    except Exception as e:
        raise _task_error(e)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    try:
        return task_service.create_task(current_user.id, task)
    except Exception as e:
        raise _task_error(e)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    try:
        return task_service.update_task(current_user.id, task_id, task_update)
    except Exception as e:
        raise _task_error(e)


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    status_update: TaskStatusUpdate,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    try:
        return task_service.update_status(current_user.id, task_id, status_update.status)
    except Exception as e:
        raise _task_error(e)


@router.delete("/{task_id}", response_model=TaskDeleted)
def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    try:
        deleted_id = task_service.delete_task(current_user.id, task_id)
        return {"id": deleted_id}
    except Exception as e:
        raise _task_error(e)
