"""Task model"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.clock import utcnow
from app.core.database import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    list_id = Column(Integer, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    task_list = relationship("TaskList", back_populates="tasks")

    def __repr__(self):
        return f"<Task(id={self.id}, list_id={self.list_id}, completed={self.completed})>"
