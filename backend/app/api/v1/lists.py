"""Task list and task routes"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.core.database import get_db
from app.schemas.response import APIResponse
from app.schemas.task import (
    TaskCreate,
    TaskListCreate,
    TaskListResponse,
    TaskListUpdate,
    TaskResponse,
    TaskUpdate,
)
from app.services.list_service import list_service

router = APIRouter()


@router.get("", response_model=List[TaskListResponse])
def get_lists(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """All lists belonging to the authenticated user"""
    return list_service.get_lists(db, user_id)


@router.post("", response_model=TaskListResponse, status_code=status.HTTP_200_OK)
def create_list(
    data: TaskListCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return list_service.create_list(db, user_id, data)


@router.patch("/{list_id}", response_model=APIResponse)
def update_list(
    list_id: int,
    data: TaskListUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    list_service.update_list(db, user_id, list_id, data)
    return APIResponse(message="Updated successfully")


@router.delete("/{list_id}", response_model=TaskListResponse)
def delete_list(
    list_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a list and every task in it

    Returns:
        The removed list
    """
    return list_service.delete_list(db, user_id, list_id)


@router.get("/{list_id}/tasks", response_model=List[TaskResponse])
def get_tasks(
    list_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return list_service.get_tasks(db, user_id, list_id)


@router.get("/{list_id}/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    list_id: int,
    task_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return list_service.get_task(db, user_id, list_id, task_id)


@router.post("/{list_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_200_OK)
def create_task(
    list_id: int,
    data: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a task; only the list owner may add to it"""
    return list_service.create_task(db, user_id, list_id, data)


@router.patch("/{list_id}/tasks/{task_id}", response_model=APIResponse)
def update_task(
    list_id: int,
    task_id: int,
    data: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    list_service.update_task(db, user_id, list_id, task_id, data)
    return APIResponse(message="Updated successfully")


@router.delete("/{list_id}/tasks/{task_id}", response_model=TaskResponse)
def delete_task(
    list_id: int,
    task_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return list_service.delete_task(db, user_id, list_id, task_id)
