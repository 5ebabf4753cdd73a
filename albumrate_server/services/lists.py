# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User album lists: owner-checked CRUD and idempotent album membership."""

import logging
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from albumrate_server.errors import NotFound, ValidationError
from albumrate_server.models import Album, AlbumList, ListAlbum
from albumrate_server.models.album_list import LIST_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

LIST_NOT_FOUND = "List not found"


def _check_name(name: str) -> str:
    if not name or len(name) > LIST_NAME_MAX_LENGTH:
        raise ValidationError(f"List name must be between 1 and {LIST_NAME_MAX_LENGTH} characters")
    return name


async def _owned_list(db: AsyncSession, list_id: int, user_id: int) -> AlbumList:
    result = await db.execute(
        select(AlbumList).where(AlbumList.id == list_id, AlbumList.user_id == user_id)
    )
    album_list = result.scalar_one_or_none()
    if not album_list:
        raise NotFound(LIST_NOT_FOUND)
    return album_list


async def _load_with_albums(db: AsyncSession, list_id: int) -> AlbumList:
    result = await db.execute(
        select(AlbumList)
        .options(selectinload(AlbumList.albums))
        .where(AlbumList.id == list_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_list(
    db: AsyncSession,
    user_id: int,
    name: str,
    description: str | None = None,
    is_public: bool = False,
) -> AlbumList:
    album_list = AlbumList(
        user_id=user_id,
        name=_check_name(name),
        description=description,
        is_public=is_public,
    )
    db.add(album_list)
    await db.commit()
    return await _load_with_albums(db, album_list.id)


async def list_user_lists(db: AsyncSession, user_id: int) -> list[AlbumList]:
    """All of the user's lists with their albums, newest first."""
    result = await db.execute(
        select(AlbumList)
        .options(selectinload(AlbumList.albums))
        .where(AlbumList.user_id == user_id)
        .order_by(AlbumList.created_at.desc(), AlbumList.id.desc())
    )
    return list(result.scalars().all())


async def page_user_lists(
    db: AsyncSession, user_id: int, limit: int, offset: int
) -> tuple[list[AlbumList], int]:
    total = await db.scalar(
        select(func.count()).select_from(AlbumList).where(AlbumList.user_id == user_id)
    )
    result = await db.execute(
        select(AlbumList)
        .where(AlbumList.user_id == user_id)
        .order_by(AlbumList.created_at.desc(), AlbumList.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total or 0


async def get_list(db: AsyncSession, list_id: int, requestor_id: int) -> AlbumList:
    """A list the requestor owns, or any public list. Private lists of others are NotFound."""
    result = await db.execute(
        select(AlbumList)
        .options(selectinload(AlbumList.albums), selectinload(AlbumList.owner))
        .where(
            AlbumList.id == list_id,
            or_(AlbumList.user_id == requestor_id, AlbumList.is_public.is_(True)),
        )
        .execution_options(populate_existing=True)
    )
    album_list = result.scalar_one_or_none()
    if not album_list:
        raise NotFound(LIST_NOT_FOUND)
    return album_list


async def update_list(
    db: AsyncSession, list_id: int, user_id: int, changes: dict[str, Any]
) -> AlbumList:
    """Apply supplied name/description/is_public to a list the user owns."""
    album_list = await _owned_list(db, list_id, user_id)
    if changes.get("name") is not None:
        album_list.name = _check_name(changes["name"])
    if "description" in changes:
        album_list.description = changes["description"]
    if changes.get("is_public") is not None:
        album_list.is_public = changes["is_public"]
    await db.commit()
    return await _load_with_albums(db, list_id)


async def delete_list(db: AsyncSession, list_id: int, user_id: int) -> None:
    result = await db.execute(
        delete(AlbumList).where(AlbumList.id == list_id, AlbumList.user_id == user_id)
    )
    if result.rowcount == 0:
        raise NotFound(LIST_NOT_FOUND)
    # Covered by ON DELETE CASCADE where the backend enforces foreign keys
    await db.execute(delete(ListAlbum).where(ListAlbum.list_id == list_id))
    await db.commit()


async def _find_or_create_album(
    db: AsyncSession,
    album_id: str,
    name: str,
    artist_name: str,
    image_url: str | None,
) -> Album:
    album = await db.get(Album, album_id)
    if album:
        return album
    album = Album(id=album_id, name=name, artist_name=artist_name, image_url=image_url)
    db.add(album)
    try:
        await db.flush()
    except IntegrityError:
        # Another request cached it first; nothing else is pending in this session
        await db.rollback()
        album = await db.get(Album, album_id)
        if not album:
            raise
    return album


async def add_album_to_list(
    db: AsyncSession,
    list_id: int,
    user_id: int,
    album_id: str,
    *,
    name: str,
    artist_name: str,
    image_url: str | None = None,
) -> None:
    """Add a catalog album to a list the user owns. Adding a member again is a no-op."""
    await _owned_list(db, list_id, user_id)
    await _find_or_create_album(db, album_id, name, artist_name, image_url)
    member = await db.get(ListAlbum, (list_id, album_id))
    if member:
        await db.commit()
        return
    db.add(ListAlbum(list_id=list_id, album_id=album_id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if not await db.get(ListAlbum, (list_id, album_id)):
            raise
    logger.debug("Added album %s to list %s", album_id, list_id)


async def remove_album_from_list(
    db: AsyncSession, list_id: int, user_id: int, album_id: str
) -> None:
    """Remove an album from a list the user owns. Removing a non-member is a no-op."""
    await _owned_list(db, list_id, user_id)
    await db.execute(
        delete(ListAlbum).where(ListAlbum.list_id == list_id, ListAlbum.album_id == album_id)
    )
    await db.commit()
