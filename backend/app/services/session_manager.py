"""Per-user refresh-token sessions."""

from __future__ import annotations

from datetime import timedelta
from typing import Tuple
import logging

from sqlalchemy.orm import Session

from app.config import Settings
from app.core.clock import Clock, utcnow
from app.core.exceptions import SessionExpiredError, SessionNotFoundError, UserNotFoundError
from app.models.session import UserSession
from app.models.user import User
from app.services.credential_store import CredentialStore
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Create and validate sessions.

    A session's expiry is fixed when it is created. Validation never
    extends it or rotates the token; a new session is only created by
    an explicit signup or login.
    """

    def __init__(
        self,
        token_service: TokenService,
        settings: Settings,
        clock: Clock = utcnow,
    ) -> None:
        self._tokens = token_service
        self._settings = settings
        self._clock = clock

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.refresh_token_ttl_seconds)

    def create_session(self, db: Session, user: User) -> str:
        """Append a new session to the user and return its refresh token"""
        now = self._clock()
        pruned = CredentialStore.prune_expired_sessions(db, user.id, now)
        if pruned:
            logger.debug("Pruned %d expired sessions for user %s", pruned, user.id)

        token = self._tokens.mint_refresh_token()
        CredentialStore.append_session(db, user.id, token, now + self.refresh_ttl)

        limit = self._settings.MAX_SESSIONS_PER_USER
        if limit > 0:
            dropped = CredentialStore.trim_sessions(db, user.id, limit)
            if dropped:
                logger.info("Dropped %d oldest sessions for user %s", dropped, user.id)
        return token

    def validate(self, db: Session, user_id: str, refresh_token: str) -> Tuple[User, UserSession]:
        """
        Resolve a (user id, refresh token) pair to its live session

        Raises:
            UserNotFoundError: No such user
            SessionNotFoundError: Token is not one of the user's sessions
            SessionExpiredError: Session expiry is at or before now
        """
        user = CredentialStore.find_user_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError()

        session = CredentialStore.find_session(db, user.id, refresh_token)
        if session is None:
            raise SessionNotFoundError()

        if session.is_expired(self._clock()):
            raise SessionExpiredError()
        return user, session

    def end_session(self, db: Session, user_id: str, refresh_token: str) -> bool:
        """Remove one session (logout). Issued access tokens stay valid until they expire."""
        return CredentialStore.remove_session(db, user_id, refresh_token)
