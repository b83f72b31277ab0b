"""API dependencies - access-token and session gates"""

from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.config import Settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, UnauthorizedError
from app.core.metrics import AUTH_FAILURES
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.rate_limiter import InMemoryRateLimiter
from app.services.session_manager import SessionManager
from app.services.token_service import TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "x-access-token"
REFRESH_TOKEN_HEADER = "x-refresh-token"
USER_ID_HEADER = "_id"


@dataclass(frozen=True)
class AuthenticatedContext:
    """Identity established by the session gate"""
    user_id: str
    user: User
    refresh_token: str


def _reject(gate: str, exc: AuthenticationError) -> UnauthorizedError:
    AUTH_FAILURES.labels(gate, exc.reason).inc()
    logger.warning("%s rejected request: %s", gate, exc.reason)
    return UnauthorizedError()


def access_gate(token_service: TokenService, access_token: Optional[str]) -> str:
    """
    Verify an access token and return the authenticated user id

    Raises:
        UnauthorizedError: Missing, malformed, tampered or expired token
    """
    try:
        return token_service.verify_access_token(access_token or "")
    except AuthenticationError as exc:
        raise _reject("access_gate", exc) from exc


def session_gate(
    session_manager: SessionManager,
    db: Session,
    user_id: Optional[str],
    refresh_token: Optional[str],
) -> AuthenticatedContext:
    """
    Validate a refresh-token session and expose the owning user

    Raises:
        UnauthorizedError: Unknown user, unknown token or expired session
    """
    try:
        user, session = session_manager.validate(db, user_id or "", refresh_token or "")
    except AuthenticationError as exc:
        raise _reject("session_gate", exc) from exc
    return AuthenticatedContext(user_id=user.id, user=user, refresh_token=session.token)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_rate_limiter(request: Request) -> InMemoryRateLimiter:
    return request.app.state.rate_limiter


async def get_current_user_id(
    x_access_token: Optional[str] = Header(default=None, alias=ACCESS_TOKEN_HEADER),
    token_service: TokenService = Depends(get_token_service),
) -> str:
    """
    Get authenticated user id from the access token header

    Returns:
        User id carried by the token (no store lookup)
    """
    return access_gate(token_service, x_access_token)


def get_session_context(
    x_refresh_token: Optional[str] = Header(default=None, alias=REFRESH_TOKEN_HEADER),
    user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER, convert_underscores=False),
    session_manager: SessionManager = Depends(get_session_manager),
    db: Session = Depends(get_db),
) -> AuthenticatedContext:
    """
    Get authenticated context from the refresh token and user id headers

    Returns:
        User id, user record and the presented refresh token
    """
    return session_gate(session_manager, db, user_id, x_refresh_token)
