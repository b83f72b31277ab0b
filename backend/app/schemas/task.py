"""Task list and task schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskListCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class TaskListUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)


class TaskListResponse(BaseModel):
    id: int
    title: str
    user_id: str

    model_config = ConfigDict(from_attributes=True)


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class TaskUpdate(BaseModel):
    """Partial task update; omitted fields are left untouched"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    completed: Optional[bool] = None


class TaskResponse(BaseModel):
    id: int
    title: str
    completed: bool
    list_id: int

    model_config = ConfigDict(from_attributes=True)
