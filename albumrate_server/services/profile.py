# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Profile page data and profile edits."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrate_server.errors import Conflict
from albumrate_server.models import AlbumList, Rating, User

PROFILE_RECENT_LISTS = 6

# An explicit null clears these
NULLABLE_FIELDS = ("description", "location", "avatar_url")
# Null means "leave unchanged" for these
REQUIRED_FIELDS = ("username", "favorite_genres", "social_links")


async def get_profile(db: AsyncSession, user: User) -> tuple[list[Rating], list[AlbumList]]:
    """All of the user's ratings and their most recent lists, newest first."""
    ratings = await db.execute(
        select(Rating)
        .where(Rating.user_id == user.id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    lists = await db.execute(
        select(AlbumList)
        .where(AlbumList.user_id == user.id)
        .order_by(AlbumList.created_at.desc(), AlbumList.id.desc())
        .limit(PROFILE_RECENT_LISTS)
    )
    return list(ratings.scalars().all()), list(lists.scalars().all())


async def update_profile(db: AsyncSession, user: User, changes: dict[str, Any]) -> User:
    """Apply the supplied profile fields. Raises Conflict if the new username is taken."""
    username = changes.get("username")
    if username:
        result = await db.execute(
            select(User.id).where(User.username == username, User.id != user.id)
        )
        if result.first():
            raise Conflict("Username is already taken")
    for field in NULLABLE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])
    for field in REQUIRED_FIELDS:
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Username is already taken")
    return user
