"""Task list and task queries scoped to the owning user"""

from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.task import Task
from app.models.task_list import TaskList
from app.schemas.task import (
    TaskCreate,
    TaskListCreate,
    TaskListResponse,
    TaskListUpdate,
    TaskResponse,
    TaskUpdate,
)

logger = logging.getLogger(__name__)


class ListService:
    """CRUD for lists and tasks; every query filters on the caller's user id"""

    @staticmethod
    def get_lists(db: Session, user_id: str) -> List[TaskList]:
        return (
            db.query(TaskList)
            .filter(TaskList.user_id == user_id)
            .order_by(TaskList.id)
            .all()
        )

    @staticmethod
    def find_list(db: Session, user_id: str, list_id: int) -> Optional[TaskList]:
        return (
            db.query(TaskList)
            .filter(TaskList.id == list_id, TaskList.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_list(db: Session, user_id: str, list_id: int) -> TaskList:
        """Get a list owned by the user; other users' lists are reported as missing"""
        task_list = ListService.find_list(db, user_id, list_id)
        if task_list is None:
            raise ResourceNotFoundError("List")
        return task_list

    @staticmethod
    def create_list(db: Session, user_id: str, data: TaskListCreate) -> TaskList:
        task_list = TaskList(title=data.title, user_id=user_id)
        db.add(task_list)
        db.commit()
        db.refresh(task_list)
        return task_list

    @staticmethod
    def update_list(db: Session, user_id: str, list_id: int, data: TaskListUpdate) -> TaskList:
        task_list = ListService.get_list(db, user_id, list_id)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(task_list, field, value)
        db.commit()
        db.refresh(task_list)
        return task_list

    @staticmethod
    def delete_list(db: Session, user_id: str, list_id: int) -> TaskListResponse:
        """Delete a list together with its tasks; returns the removed list"""
        task_list = ListService.get_list(db, user_id, list_id)
        removed = TaskListResponse.model_validate(task_list)
        task_count = len(task_list.tasks)
        db.delete(task_list)
        db.commit()
        logger.info("Deleted list %s with %d tasks", list_id, task_count)
        return removed

    @staticmethod
    def get_tasks(db: Session, user_id: str, list_id: int) -> List[Task]:
        ListService.get_list(db, user_id, list_id)
        return db.query(Task).filter(Task.list_id == list_id).order_by(Task.id).all()

    @staticmethod
    def get_task(db: Session, user_id: str, list_id: int, task_id: int) -> Task:
        ListService.get_list(db, user_id, list_id)
        task = db.query(Task).filter(Task.id == task_id, Task.list_id == list_id).first()
        if task is None:
            raise ResourceNotFoundError("Task")
        return task

    @staticmethod
    def create_task(db: Session, user_id: str, list_id: int, data: TaskCreate) -> Task:
        ListService.get_list(db, user_id, list_id)
        task = Task(title=data.title, list_id=list_id)
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def update_task(db: Session, user_id: str, list_id: int, task_id: int, data: TaskUpdate) -> Task:
        task = ListService.get_task(db, user_id, list_id, task_id)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(task, field, value)
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def delete_task(db: Session, user_id: str, list_id: int, task_id: int) -> TaskResponse:
        task = ListService.get_task(db, user_id, list_id, task_id)
        removed = TaskResponse.model_validate(task)
        db.delete(task)
        db.commit()
        return removed


list_service = ListService()
