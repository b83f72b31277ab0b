"""Credential store - user records and their refresh-token sessions"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateEmailError, TokenGenerationError
from app.models.session import UserSession
from app.models.user import User

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Persistence operations for users and sessions.

    Session mutations are single INSERT/DELETE statements scoped to one
    user so the database serializes concurrent writers; the user row is
    never read, modified in memory and written back.
    """

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

    @staticmethod
    def find_user_by_id(db: Session, user_id: str) -> Optional[User]:
        """Get user by id"""
        if not user_id:
            return None
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def find_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by (normalized) email"""
        return db.query(User).filter(User.email == email.strip().lower()).first()

    @staticmethod
    def save(db: Session, user: User) -> User:
        """
        Persist a user record

        Raises:
            DuplicateEmailError: Email already registered
        """
        user.email = user.email.strip().lower()
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateEmailError()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(user)
        return user

    @staticmethod
    def append_session(db: Session, user_id: str, token: str, expires_at: datetime) -> UserSession:
        """
        Add a session to the user's session set

        Raises:
            TokenGenerationError: Token value already exists (or owner vanished)
        """
        record = UserSession(user_id=user_id, token=token, expires_at=expires_at)
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.error("Refresh token collision for user %s", user_id)
            raise TokenGenerationError()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(record)
        return record

    @staticmethod
    def find_session(db: Session, user_id: str, token: str) -> Optional[UserSession]:
        if not token:
            return None
        return (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.token == token)
            .first()
        )

    @staticmethod
    def remove_session(db: Session, user_id: str, token: str) -> bool:
        """Delete one session by token; returns whether it existed"""
        deleted = (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.token == token)
            .delete(synchronize_session=False)
        )
        CredentialStore._commit(db)
        return deleted > 0

    @staticmethod
    def prune_expired_sessions(db: Session, user_id: str, now: datetime) -> int:
        """Delete the user's sessions whose expiry is at or before now"""
        deleted = (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.expires_at <= now)
            .delete(synchronize_session=False)
        )
        CredentialStore._commit(db)
        return deleted

    @staticmethod
    def trim_sessions(db: Session, user_id: str, keep: int) -> int:
        """Keep only the ``keep`` newest sessions of a user"""
        stale_ids = [
            row.id
            for row in db.query(UserSession.id)
            .filter(UserSession.user_id == user_id)
            .order_by(UserSession.id.desc())
            .offset(keep)
            .all()
        ]
        if not stale_ids:
            return 0
        deleted = (
            db.query(UserSession)
            .filter(UserSession.id.in_(stale_ids))
            .delete(synchronize_session=False)
        )
        CredentialStore._commit(db)
        return deleted
