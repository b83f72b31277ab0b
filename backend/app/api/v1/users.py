"""User routes - signup, login and session-based token refresh"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.api.deps import (
    ACCESS_TOKEN_HEADER,
    REFRESH_TOKEN_HEADER,
    AuthenticatedContext,
    get_auth_service,
    get_current_user_id,
    get_rate_limiter,
    get_session_context,
    get_session_manager,
    get_settings,
    get_user_service,
)
from app.config import Settings
from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.schemas.response import APIResponse
from app.schemas.user import AccessTokenResponse, UserCreate, UserLogin, UserResponse
from app.services.auth_service import AuthService, IssuedTokens
from app.services.rate_limiter import InMemoryRateLimiter
from app.services.session_manager import SessionManager
from app.services.user_service import UserService

router = APIRouter()


def _token_response(issued: IssuedTokens, response: Response) -> UserResponse:
    response.headers[REFRESH_TOKEN_HEADER] = issued.refresh_token
    response.headers[ACCESS_TOKEN_HEADER] = issued.access_token
    return UserResponse.model_validate(issued.user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_200_OK)
def sign_up(
    user_data: UserCreate,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    db: Session = Depends(get_db)
):
    """
    Signup endpoint - create account and open the first session

    Returns:
        User record; tokens in the x-refresh-token / x-access-token headers
    """
    issued = auth_service.sign_up(db, user_data)
    return _token_response(issued, response)


@router.post("/login", response_model=UserResponse, status_code=status.HTTP_200_OK)
def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    rate_limiter: InMemoryRateLimiter = Depends(get_rate_limiter),
    auth_service: AuthService = Depends(get_auth_service),
    db: Session = Depends(get_db)
):
    """
    Login endpoint - authenticate and open a new session

    Each login adds a session; earlier sessions stay valid.
    """
    client_ip = request.client.host if request.client else "unknown"
    rate_limiter.check_login(settings, client_ip, credentials.email)

    issued = auth_service.login(db, credentials.email, credentials.password)
    return _token_response(issued, response)


@router.get("/me/access-token", response_model=AccessTokenResponse)
def get_access_token(
    response: Response,
    context: AuthenticatedContext = Depends(get_session_context),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Mint a fresh access token for a valid session

    The session itself is neither extended nor rotated.
    """
    access_token = auth_service.mint_access_token(context.user)
    response.headers[ACCESS_TOKEN_HEADER] = access_token
    return AccessTokenResponse(accessToken=access_token)


@router.post("/logout", response_model=APIResponse)
def logout(
    context: AuthenticatedContext = Depends(get_session_context),
    session_manager: SessionManager = Depends(get_session_manager),
    db: Session = Depends(get_db),
):
    """Remove the presented session; outstanding access tokens expire naturally"""
    session_manager.end_session(db, context.user_id, context.refresh_token)
    return APIResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
    db: Session = Depends(get_db),
):
    """Current user's profile"""
    user = user_service.get_user_by_id(db, user_id)
    if user is None:
        raise ResourceNotFoundError("User")
    return UserResponse.model_validate(user)
