"""
Password hashing, token signing and the register/login operations.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from relief_api.config import Settings, get_settings
from relief_api.db import DbClient
from relief_api.errors import BadRequestError, ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
PASSWORD_REQUIRED = "Password is required"

_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str, rounds: int = 10) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def issue_token(email: str, settings: Settings, *, now: Optional[float] = None) -> str:
    issued_at = int(now if now is not None else time.time())
    payload = {
        "email": email,
        "iat": issued_at,
        "exp": issued_at + settings.jwt_expires_in,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """
    Verify signature and expiry, returning the claims.

    Raises:
        UnauthorizedError: If the token is expired, tampered with or malformed.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "email"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Invalid token") from exc


def register(
    db: DbClient,
    settings: Settings,
    *,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> None:
    """
    Store a new user with a bcrypt hash of the password.

    Raises:
        BadRequestError: If the password is missing or too long.
        ConflictError: If a user with the same email already exists.
    """
    if not password:
        raise BadRequestError(PASSWORD_REQUIRED)
    try:
        password_hash = hash_password(password, rounds=settings.bcrypt_rounds)
    except ValueError as exc:
        # bcrypt refuses passwords longer than 72 bytes.
        raise BadRequestError("Password is too long", error=str(exc)) from exc
    user = db.create_user(name, email, password_hash)
    if user is None:
        logger.info("Registration rejected for existing email")
        raise ConflictError("User already exists")
    logger.info("Registered user %s", user.id)


def login(
    db: DbClient,
    settings: Settings,
    *,
    email: Optional[str],
    password: Optional[str],
) -> str:
    """
    Check credentials and return a signed token for the user's email.

    The same error is raised for an unknown email and for a wrong password.
    """
    if not password:
        raise BadRequestError(PASSWORD_REQUIRED)
    user = db.get_user_by_email(email) if email else None
    if user is None or not verify_password(password, user.password):
        logger.info("Failed login attempt")
        raise UnauthorizedError(INVALID_CREDENTIALS)
    return issue_token(user.email, settings)


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[dict]:
    """
    FastAPI dependency guarding write routes. Returns the token claims, or
    None when auth enforcement is switched off.
    """
    if not settings.require_auth:
        return None
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Authentication required")
    return decode_token(credentials.credentials, settings)
