import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.models.task import Task, TaskPriority, TaskStatus
from app.schemas.task import TaskCreate, TaskUpdate
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class TaskService:
    """CRUD on tasks, scoped to the authenticated owner."""

    def __init__(self, db: Session):
        self.db = db

    def _get_owned_task(self, owner_id: int, task_id: int) -> Task:
        # Existence is checked before ownership, so probing a missing id is a 404 for everyone
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found")
        if task.user_id != owner_id:
            raise ForbiddenError("User not authorized")
        return task

    def list_tasks(self, owner_id: int) -> List[Task]:
        return self.db.query(Task).filter(
            Task.user_id == owner_id
        ).order_by(Task.created_at.desc(), Task.id.desc()).all()

    def create_task(self, owner_id: int, payload: TaskCreate) -> Task:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Please add a title")

        task = Task(
            title=payload.title,
            description=payload.description,
            priority=payload.priority or TaskPriority.MEDIUM,
            status=TaskStatus.TODO,
            user_id=owner_id,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task {task.id} created by user {owner_id}")
        return task

    def update_task(self, owner_id: int, task_id: int, changes: TaskUpdate) -> Task:
        task = self._get_owned_task(owner_id, task_id)

        # Apply updates (only fields provided in request)
        update_data: Dict[str, Any] = changes.model_dump(exclude_unset=True)
        if not update_data:
            return task

        for key, value in update_data.items():
            setattr(task, key, value)

        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task {task.id} updated with fields: {sorted(update_data)}")
        return task

    def update_status(self, owner_id: int, task_id: int, status: TaskStatus) -> Task:
        return self.update_task(owner_id, task_id, TaskUpdate(status=status))

    def delete_task(self, owner_id: int, task_id: int) -> int:
        task = self._get_owned_task(owner_id, task_id)

        self.db.delete(task)
        self.db.commit()

        logger.info(f"Task {task_id} deleted by user {owner_id}")
        return task_id
