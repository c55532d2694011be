"""
JWT utilities and request-scoped dependencies.

The storage handle, the mailer and the settings are created once by
`create_app` and kept on `app.state`; the dependencies below hand them to
each request.
"""

import uuid
from datetime import timedelta
from typing import Iterator

import jwt
from fastapi import Cookie, Request, Response
from sqlalchemy.orm import Session

from whisperbox.database.config.config import Settings
from whisperbox.database.core.errors import UnauthorizedError
from whisperbox.database.core.funcs import Principal
from whisperbox.database.core.mailer import VerificationMailer
from whisperbox.database.entities import utcnow

COOKIE_NAME = "token"


def create_access_token(principal: Principal, settings: Settings, expires_delta: timedelta | None = None) -> str:
    """
    Issue a signed JWT carrying the principal, so later requests need no lookup.

    Args:
        principal: The authenticated identity.
        settings: Provides `SECRET_KEY`, `ALGORITHM` and the default lifetime.
        expires_delta: Overrides `ACCESS_TOKEN_EXPIRE_MINUTES`.

    Returns:
        str: The encoded token.
    """
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(principal.id),
        "username": principal.username,
        "is_verified": principal.is_verified,
        "is_accepting_messages": principal.is_accepting_messages,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str, settings: Settings) -> Principal:
    """
    Validate a JWT and rebuild the principal from its claims.

    Raises:
        UnauthorizedError: the token is expired, malformed or badly signed.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return Principal(
            id=uuid.UUID(payload["sub"]),
            username=payload["username"],
            is_verified=bool(payload["is_verified"]),
            is_accepting_messages=bool(payload["is_accepting_messages"]),
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Session expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise UnauthorizedError("Invalid or expired token")


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="none" if settings.COOKIE_SECURE else "lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> VerificationMailer:
    return request.app.state.mailer


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.sessionmaker()
    try:
        yield db
    finally:
        db.close()


def get_principal(request: Request, token: str = Cookie(None)) -> Principal:
    """Owner-only routes depend on this; no valid session cookie means 401."""
    if not token:
        raise UnauthorizedError("Unauthorized")
    return verify_token(token, request.app.state.settings)
