"""Core infrastructure: settings, security, logging, exceptions."""

from .config import settings
from .exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConflictError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    NotFoundError,
)
from .security import (
    SessionData,
    create_session_token,
    credentials_match,
    decode_session_token,
)


__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "ConflictError",
    "InsufficientFundsError",
    "InsufficientHoldingsError",
    "NotFoundError",
    "SessionData",
    "create_session_token",
    "credentials_match",
    "decode_session_token",
    "settings",
]
