"""Security utilities - JWT, password hashing, refresh token generation"""

from datetime import datetime
from typing import Dict, Any
from jose import jws, jwt
from jose.exceptions import JWSError
from jose.utils import base64url_decode, base64url_encode
import binascii
import bcrypt
import json
import secrets

from app.core.clock import numeric_date_to_microseconds, to_microseconds, to_numeric_date, to_timestamp
from app.core.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
    ValidationError,
)

ACCESS_TOKEN_TYPE = "access"

# bcrypt only considers the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches; False for any mismatch or unusable hash
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        return False


def get_password_hash(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password
        rounds: bcrypt work factor (log2 iterations)

    Returns:
        str: Hashed password with embedded salt
    """
    encoded = password.encode('utf-8')
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def create_access_token(
    subject: str,
    issued_at: datetime,
    expires_at: datetime,
    secret_key: str,
    algorithm: str = "HS256",
) -> str:
    """
    Create JWT access token

    Args:
        subject: User id carried in the ``sub`` claim
        issued_at: Naive UTC time of issuance
        expires_at: Naive UTC time from which the token is rejected
        secret_key: Process-wide signing secret
        algorithm: HMAC algorithm

    Returns:
        str: Encoded JWT token
    """
    to_encode = {
        "sub": subject,
        "iat": to_timestamp(issued_at),
        "exp": to_numeric_date(expires_at),
        "typ": ACCESS_TOKEN_TYPE,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def _has_canonical_signature(token: str) -> bool:
    # base64url leaves spare low bits in the last character; they must be zero
    segment = token.rsplit(".", 1)[-1].encode("ascii", errors="replace")
    try:
        return base64url_encode(base64url_decode(segment)) == segment
    except (binascii.Error, ValueError):
        return False


def decode_access_token(
    token: str,
    secret_key: str,
    now: datetime,
    algorithm: str = "HS256",
) -> Dict[str, Any]:
    """
    Decode and verify JWT access token

    Only the segment count is checked before the signature. Any change to
    the header, payload or signature of a three-segment token therefore
    fails as a bad signature, and a tampered token never reports as
    merely expired.

    Args:
        token: JWT token string
        secret_key: Signing secret
        now: Naive UTC time of the check
        algorithm: Accepted algorithm

    Returns:
        Dict: Verified claims

    Raises:
        MalformedTokenError: Wrong shape, or signed claims lack required fields
        InvalidSignatureError: Signature does not match
        TokenExpiredError: ``now`` is at or past ``exp``
    """
    if not token:
        raise MalformedTokenError("Missing token")
    if token.count(".") != 2:
        raise MalformedTokenError()

    try:
        signed_payload = jws.verify(token, secret_key, algorithms=[algorithm])
    except JWSError as exc:
        raise InvalidSignatureError() from exc
    if not _has_canonical_signature(token):
        raise InvalidSignatureError()

    try:
        payload = json.loads(signed_payload)
    except ValueError as exc:
        raise MalformedTokenError("Token claims are not JSON") from exc
    if not isinstance(payload, dict):
        raise MalformedTokenError("Token claims are not an object")

    subject = payload.get("sub")
    expires_at = payload.get("exp")
    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        raise MalformedTokenError("Token is not an access token")
    if not isinstance(subject, str) or not subject:
        raise MalformedTokenError("Token has no subject")
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        raise MalformedTokenError("Token has no expiry")

    if to_microseconds(now) >= numeric_date_to_microseconds(expires_at):
        raise TokenExpiredError()
    return payload


def generate_refresh_token(nbytes: int = 64) -> str:
    """
    Generate opaque refresh token

    Args:
        nbytes: Bytes of randomness (hex encoded, so the string is twice as long)

    Returns:
        str: Random token carrying no claims
    """
    return secrets.token_hex(nbytes)
