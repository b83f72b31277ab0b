"""User service - handles account creation and credential checks"""

from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.config import Settings
from app.core.exceptions import InvalidCredentialsError
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts"""

    def __init__(self, settings: Settings) -> None:
        self._rounds = settings.BCRYPT_ROUNDS
        # unknown emails are checked against this so they cost one bcrypt compare
        self._dummy_hash = get_password_hash("timing-equalization", rounds=self._rounds)

    def create_user(self, db: Session, user_data: UserCreate) -> User:
        """
        Create new user

        Args:
            db: Database session
            user_data: Signup data (email already normalized)

        Returns:
            Created user

        Raises:
            DuplicateEmailError: Email already registered
        """
        user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password, rounds=self._rounds),
        )
        user = CredentialStore.save(db, user)
        logger.info(f"Created user: {user.id}")
        return user

    def authenticate_user(self, db: Session, email: str, password: str) -> User:
        """
        Authenticate user by email and password

        Unknown emails and wrong passwords raise the same error, and both
        pay for one bcrypt comparison.

        Raises:
            InvalidCredentialsError: Email unknown or password mismatch
        """
        user = CredentialStore.find_user_by_email(db, email)

        if not user:
            verify_password(password, self._dummy_hash)
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info(f"Login failed: bad password for user {user.id}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated: {user.id}")
        return user

    def get_user_by_id(self, db: Session, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return CredentialStore.find_user_by_id(db, user_id)
