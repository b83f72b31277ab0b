"""User model"""

import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from app.core.clock import utcnow
from app.core.database import Base


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Account that owns sessions and task lists"""

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_user_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    sessions = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="UserSession.id",
    )
    task_lists = relationship("TaskList", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User(id='{self.id}', email='{self.email}')>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
