"""Task list model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.clock import utcnow
from app.core.database import Base


class TaskList(Base):
    """List of tasks owned by a single user"""

    __tablename__ = "task_lists"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="task_lists")
    tasks = relationship(
        "Task",
        back_populates="task_list",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Task.id",
    )

    def __repr__(self):
        return f"<TaskList(id={self.id}, title='{self.title}')>"
