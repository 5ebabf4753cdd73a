# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album list API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from albumrate_server.auth import get_current_user
from albumrate_server.database import get_db
from albumrate_server.models import User
from albumrate_server.api.schemas import (
    ApiResponse,
    ListAlbumAdd,
    ListCreate,
    ListDetailResponse,
    ListResponse,
    ListUpdate,
)
from albumrate_server.services import lists as list_service
from albumrate_server.services.pagination import MAX_DB_INT

router = APIRouter(prefix="/lists", tags=["lists"])

ListId = Annotated[int, Path(ge=1, le=MAX_DB_INT)]


@router.post("", response_model=ApiResponse[ListResponse], status_code=status.HTTP_201_CREATED)
async def create_list(
    data: ListCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ListResponse]:
    """Create a new list."""
    album_list = await list_service.create_list(
        db, user.id, data.name, description=data.description, is_public=data.is_public
    )
    return ApiResponse(
        message="List created successfully", data=ListResponse.model_validate(album_list)
    )


@router.get("", response_model=ApiResponse[list[ListResponse]])
async def get_user_lists(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ListResponse]]:
    """List current user's lists with their albums."""
    lists = await list_service.list_user_lists(db, user.id)
    return ApiResponse(data=[ListResponse.model_validate(l) for l in lists])


@router.get("/{list_id}", response_model=ApiResponse[ListDetailResponse])
async def get_list(
    list_id: ListId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ListDetailResponse]:
    """Get a list the user owns or one that is public."""
    album_list = await list_service.get_list(db, list_id, user.id)
    return ApiResponse(data=ListDetailResponse.model_validate(album_list))


@router.put("/{list_id}", response_model=ApiResponse[ListResponse])
async def update_list(
    list_id: ListId,
    data: ListUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ListResponse]:
    """Rename, describe, or change visibility of an owned list."""
    album_list = await list_service.update_list(
        db, list_id, user.id, data.model_dump(exclude_unset=True)
    )
    return ApiResponse(
        message="List updated successfully", data=ListResponse.model_validate(album_list)
    )


@router.delete("/{list_id}", response_model=ApiResponse[None])
async def delete_list(
    list_id: ListId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    """Delete an owned list."""
    await list_service.delete_list(db, list_id, user.id)
    return ApiResponse(message="List deleted successfully")


@router.post("/{list_id}/albums", response_model=ApiResponse[None])
async def add_album_to_list(
    list_id: ListId,
    data: ListAlbumAdd,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    """Add a catalog album to an owned list."""
    await list_service.add_album_to_list(
        db,
        list_id,
        user.id,
        data.album_id,
        name=data.album_name,
        artist_name=data.artist_name,
        image_url=data.image_url,
    )
    return ApiResponse(message="Album added to list successfully")


@router.delete("/{list_id}/albums/{album_id}", response_model=ApiResponse[None])
async def remove_album_from_list(
    list_id: ListId,
    album_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    """Remove an album from an owned list."""
    await list_service.remove_album_from_list(db, list_id, user.id, album_id)
    return ApiResponse(message="Album removed from list successfully")
