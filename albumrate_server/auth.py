# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication: JWT session tokens, password hashing, and the session dependency."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from albumrate_server.config import settings
from albumrate_server.database import get_db
from albumrate_server.errors import Unauthorized
from albumrate_server.models import User

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)
bearer_scheme = HTTPBearer(auto_error=False)


class InvalidToken(Exception):
    """Token is malformed, wrongly signed, expired, or missing identity claims."""


@dataclass(frozen=True)
class TokenIdentity:
    id: int
    username: str


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Spend the same time as a real verify when there is no user to check against."""
    pwd_context.dummy_verify()


def create_access_token(
    user_id: int, username: str, expires_delta: timedelta | None = None
) -> str:
    """Create a JWT asserting {id, username}."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "id": user_id,
        "username": username,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenIdentity:
    """Decode and validate a JWT token. Raises InvalidToken."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidToken(str(e)) from e
    user_id = payload.get("id")
    username = payload.get("username")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
        raise InvalidToken("Token is missing identity claims")
    return TokenIdentity(id=user_id, username=username)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Admit a request carrying a valid Bearer token for an existing user.

    The user is loaded without its password hash and attached to request.state.user.
    Raises Unauthorized otherwise.
    """
    if not credentials:
        raise Unauthorized("No token provided")
    try:
        identity = decode_token(credentials.credentials)
    except InvalidToken:
        raise Unauthorized("Invalid or expired token")
    result = await db.execute(
        select(User)
        .options(defer(User.password_hash, raiseload=True))
        .where(User.id == identity.id)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise Unauthorized("User not found")
    request.state.user = user
    return user
