# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User accounts: registration and credential checks."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrate_server.auth import dummy_verify, hash_password, verify_password
from albumrate_server.errors import Conflict, Unauthorized
from albumrate_server.models import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


async def register_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    avatar_url: str | None = None,
) -> User:
    """Create a user. Raises Conflict if the username or email is taken."""
    email = email.lower()
    result = await db.execute(
        select(User.id).where(
            or_(User.username == username, func.lower(User.email) == email)
        )
    )
    if result.first():
        raise Conflict("User with this username or email already exists")
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        avatar_url=avatar_url,
        favorite_genres=[],
        social_links={},
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same name/email
        await db.rollback()
        raise Conflict("User with this username or email already exists")
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the user for these credentials.

    Unknown email and wrong password raise the same Unauthorized message.
    """
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    user = result.scalar_one_or_none()
    if not user:
        dummy_verify()
        raise Unauthorized(INVALID_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS)
    return user

