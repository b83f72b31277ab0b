"""Access and refresh token minting."""

from __future__ import annotations

from datetime import timedelta

from app.config import Settings
from app.core.clock import Clock, utcnow
from app.core.security import create_access_token, decode_access_token, generate_refresh_token


class TokenService:
    """
    Mint and verify the two token kinds.

    Access tokens are signed JWTs checked without touching the store.
    Refresh tokens are opaque random strings; only the session manager
    can tell whether one is valid.
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow) -> None:
        self._settings = settings
        self._clock = clock

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.access_token_ttl_seconds)

    def mint_access_token(self, user_id: str) -> str:
        # exp keeps the clock's sub-second part so the token lives the full ttl
        issued_at = self._clock()
        return create_access_token(
            subject=str(user_id),
            issued_at=issued_at,
            expires_at=issued_at + self.access_ttl,
            secret_key=self._settings.SECRET_KEY,
            algorithm=self._settings.ALGORITHM,
        )

    def verify_access_token(self, token: str) -> str:
        """
        Verify an access token and return its subject.

        Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
        """
        payload = decode_access_token(
            token,
            secret_key=self._settings.SECRET_KEY,
            now=self._clock(),
            algorithm=self._settings.ALGORITHM,
        )
        return payload["sub"]

    def mint_refresh_token(self) -> str:
        return generate_refresh_token(self._settings.REFRESH_TOKEN_BYTES)
