"""Database models"""

from app.models.user import User
from app.models.session import UserSession
from app.models.task_list import TaskList
from app.models.task import Task

__all__ = ["User", "UserSession", "TaskList", "Task"]
