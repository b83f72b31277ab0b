"""Refresh-token session model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.core.clock import utcnow
from app.core.database import Base


class UserSession(Base):
    """One authenticated device: an opaque refresh token and its fixed expiry."""

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(255), unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("idx_user_sessions_user_token", "user_id", "token"),
    )

    def is_expired(self, now) -> bool:
        return now >= self.expires_at

    def __repr__(self):
        return f"<UserSession(id={self.id}, user_id='{self.user_id}', expires_at={self.expires_at})>"
