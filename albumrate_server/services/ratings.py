# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album ratings: one per (user, album), owner-checked deletes, paginated reads."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from albumrate_server.errors import NotFound, ValidationError
from albumrate_server.models import Rating
from albumrate_server.models.rating import MAX_RATING, MIN_RATING

logger = logging.getLogger(__name__)


def validate_rating(value: object) -> int:
    """Accept only an int in MIN_RATING..MAX_RATING (bool is not an int here)."""
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return value


async def _find_rating(db: AsyncSession, user_id: int, album_id: str) -> Rating | None:
    result = await db.execute(
        select(Rating).where(Rating.user_id == user_id, Rating.album_id == album_id)
    )
    return result.scalar_one_or_none()


async def upsert_rating(
    db: AsyncSession,
    user_id: int,
    album_id: str,
    rating: int,
    *,
    album_name: str,
    artist_name: str,
    album_image: str | None = None,
    review: str | None = None,
) -> tuple[Rating, bool]:
    """Create or overwrite the user's rating for an album.

    Returns (rating, created). Last write wins when two submissions race.
    """
    validate_rating(rating)
    fields = {
        "rating": rating,
        "review": review,
        "album_name": album_name,
        "artist_name": artist_name,
        "album_image": album_image,
    }
    existing = await _find_rating(db, user_id, album_id)
    if existing:
        for key, value in fields.items():
            setattr(existing, key, value)
        await db.commit()
        return existing, False

    new = Rating(user_id=user_id, album_id=album_id, **fields)
    db.add(new)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request inserted the same (user, album) first
        await db.rollback()
        existing = await _find_rating(db, user_id, album_id)
        if not existing:
            raise
        for key, value in fields.items():
            setattr(existing, key, value)
        await db.commit()
        return existing, False
    logger.debug("User %s rated album %s: %s", user_id, album_id, rating)
    return new, True


async def get_album_rating(db: AsyncSession, user_id: int, album_id: str) -> Rating:
    """The user's own rating for an album."""
    rating = await _find_rating(db, user_id, album_id)
    if not rating:
        raise NotFound("Rating not found")
    return rating


async def delete_rating(db: AsyncSession, user_id: int, rating_id: int) -> None:
    """Delete a rating the user owns. Other users' ratings are indistinguishable from missing."""
    result = await db.execute(
        delete(Rating).where(Rating.id == rating_id, Rating.user_id == user_id)
    )
    if result.rowcount == 0:
        raise NotFound("Rating not found")
    await db.commit()


async def list_user_ratings(
    db: AsyncSession, user_id: int, limit: int, offset: int
) -> tuple[list[Rating], int]:
    """Newest-first page of the user's ratings and the total count."""
    total = await db.scalar(
        select(func.count()).select_from(Rating).where(Rating.user_id == user_id)
    )
    result = await db.execute(
        select(Rating)
        .where(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total or 0


async def list_recent_ratings(
    db: AsyncSession, limit: int, offset: int
) -> tuple[list[Rating], int]:
    """Newest-first page of ratings across all users, authors loaded."""
    total = await db.scalar(select(func.count()).select_from(Rating))
    result = await db.execute(
        select(Rating)
        .options(selectinload(Rating.user))
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total or 0
