"""Pydantic schemas for API validation"""

from app.schemas.user import UserCreate, UserLogin, UserResponse, AccessTokenResponse
from app.schemas.task import (
    TaskListCreate,
    TaskListUpdate,
    TaskListResponse,
    TaskCreate,
    TaskUpdate,
    TaskResponse,
)
from app.schemas.response import APIResponse, ErrorResponse, HealthResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "AccessTokenResponse",
    "TaskListCreate", "TaskListUpdate", "TaskListResponse",
    "TaskCreate", "TaskUpdate", "TaskResponse",
    "APIResponse", "ErrorResponse", "HealthResponse",
]
