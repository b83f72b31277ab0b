"""Signup and login flows composed from the user, session and token services."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserCreate
from app.services.session_manager import SessionManager
from app.services.token_service import TokenService
from app.services.user_service import UserService


@dataclass(frozen=True)
class IssuedTokens:
    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """
    Issue token pairs.

    Steps run strictly in order: persist or authenticate the user, create
    the session, then mint the access token. An exception at any step
    propagates and no token leaves the service.
    """

    def __init__(
        self,
        user_service: UserService,
        session_manager: SessionManager,
        token_service: TokenService,
    ) -> None:
        self._users = user_service
        self._sessions = session_manager
        self._tokens = token_service

    def sign_up(self, db: Session, user_data: UserCreate) -> IssuedTokens:
        user = self._users.create_user(db, user_data)
        return self._issue(db, user)

    def login(self, db: Session, email: str, password: str) -> IssuedTokens:
        user = self._users.authenticate_user(db, email, password)
        return self._issue(db, user)

    def mint_access_token(self, user: User) -> str:
        return self._tokens.mint_access_token(user.id)

    def _issue(self, db: Session, user: User) -> IssuedTokens:
        refresh_token = self._sessions.create_session(db, user)
        access_token = self._tokens.mint_access_token(user.id)
        return IssuedTokens(user=user, access_token=access_token, refresh_token=refresh_token)
