"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    reason = "authentication_failed"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class UnauthorizedError(AuthenticationError):
    """Uniform failure returned to clients by the auth gates"""
    reason = "unauthorized"

    def __init__(self):
        super().__init__("Unauthorized")


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password (also raised for unknown emails)"""
    reason = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


class InvalidSignatureError(AuthenticationError):
    """Access token signature does not match"""
    reason = "invalid_signature"

    def __init__(self):
        super().__init__("Invalid token signature")


class MalformedTokenError(AuthenticationError):
    """Access token cannot be parsed or lacks required claims"""
    reason = "malformed_token"

    def __init__(self, message: str = "Malformed token"):
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """Access token has expired"""
    reason = "token_expired"

    def __init__(self):
        super().__init__("Token has expired")


class UserNotFoundError(AuthenticationError):
    """Session owner does not exist"""
    reason = "user_not_found"

    def __init__(self):
        super().__init__("User not found")


class SessionNotFoundError(AuthenticationError):
    """Refresh token is not registered for the user"""
    reason = "session_not_found"

    def __init__(self):
        super().__init__("Session not found")


class SessionExpiredError(AuthenticationError):
    """Refresh token session has expired"""
    reason = "session_expired"

    def __init__(self):
        super().__init__("Session has expired")


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


class ResourceAlreadyExistsError(BaseAPIException):
    """Resource already exists"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} already exists", status_code=409)


class DuplicateEmailError(ResourceAlreadyExistsError):
    """Email is already registered"""
    def __init__(self):
        super().__init__("Account with this email")


# Validation Errors
class ValidationError(BaseAPIException):
    """Validation error"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


# System Errors
class TokenGenerationError(BaseAPIException):
    """Refresh token could not be stored as a unique session"""
    def __init__(self, message: str = "Failed to generate session token"):
        super().__init__(message, status_code=500)


class RateLimitExceededError(BaseAPIException):
    """Rate limit exceeded"""
    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message, status_code=429)
