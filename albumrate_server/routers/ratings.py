# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album rating API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from albumrate_server.auth import get_current_user
from albumrate_server.database import get_db
from albumrate_server.models import User
from albumrate_server.api.schemas import (
    ApiResponse,
    RatingCreate,
    RatingPage,
    RatingResponse,
    RecentRatingPage,
    RecentRatingResponse,
)
from albumrate_server.services import ratings as rating_service
from albumrate_server.services.pagination import MAX_DB_INT, total_pages

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", response_model=ApiResponse[RatingResponse], status_code=status.HTTP_201_CREATED)
async def create_rating(
    data: RatingCreate,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RatingResponse]:
    """Rate an album 1-5. Rating the same album again replaces the earlier rating."""
    rating, created = await rating_service.upsert_rating(
        db,
        user.id,
        data.album_id,
        data.rating,
        album_name=data.album_name,
        artist_name=data.artist_name,
        album_image=data.album_image,
        review=data.review,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return ApiResponse(
        message="Rating created successfully" if created else "Rating updated successfully",
        data=RatingResponse.model_validate(rating),
    )


@router.get("/album/{album_id}", response_model=ApiResponse[RatingResponse])
async def get_album_rating(
    album_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RatingResponse]:
    """Current user's rating for an album."""
    rating = await rating_service.get_album_rating(db, user.id, album_id)
    return ApiResponse(data=RatingResponse.model_validate(rating))


@router.get("/user", response_model=ApiResponse[RatingPage])
async def get_user_ratings(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0, le=MAX_DB_INT),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RatingPage]:
    """Current user's ratings, newest first."""
    rows, total = await rating_service.list_user_ratings(db, user.id, limit, offset)
    return ApiResponse(
        data=RatingPage(
            ratings=[RatingResponse.model_validate(r) for r in rows],
            total=total,
            limit=limit,
            offset=offset,
            total_pages=total_pages(total, limit),
        )
    )


@router.get("/recent", response_model=ApiResponse[RecentRatingPage])
async def get_recent_ratings(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0, le=MAX_DB_INT),
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RecentRatingPage]:
    """Latest ratings from all users with author info (dashboard feed)."""
    rows, total = await rating_service.list_recent_ratings(db, limit, offset)
    return ApiResponse(
        data=RecentRatingPage(
            ratings=[RecentRatingResponse.model_validate(r) for r in rows],
            total=total,
            limit=limit,
            offset=offset,
            total_pages=total_pages(total, limit),
        )
    )


@router.delete("/{rating_id}", response_model=ApiResponse[None])
async def delete_rating(
    rating_id: Annotated[int, Path(ge=1, le=MAX_DB_INT)],
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    """Delete one of the current user's ratings."""
    await rating_service.delete_rating(db, user.id, rating_id)
    return ApiResponse(message="Rating deleted successfully")
