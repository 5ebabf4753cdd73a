# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Profile API routes - the signed-in user's page."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from albumrate_server.auth import get_current_user
from albumrate_server.database import get_db
from albumrate_server.models import User
from albumrate_server.api.schemas import (
    ApiResponse,
    ListSummary,
    Pagination,
    ProfileListPage,
    ProfileRatingPage,
    ProfileResponse,
    ProfileUpdate,
    RatingResponse,
    UserResponse,
)
from albumrate_server.services import lists as list_service
from albumrate_server.services import profile as profile_service
from albumrate_server.services import ratings as rating_service
from albumrate_server.services.pagination import MAX_DB_INT, page_offset, total_pages

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ApiResponse[ProfileResponse])
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProfileResponse]:
    """Profile with all ratings and the most recent lists."""
    ratings, lists = await profile_service.get_profile(db, user)
    return ApiResponse(
        data=ProfileResponse(
            **UserResponse.model_validate(user).model_dump(),
            ratings=[RatingResponse.model_validate(r) for r in ratings],
            lists=[ListSummary.model_validate(l) for l in lists],
        )
    )


@router.put("", response_model=ApiResponse[UserResponse])
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserResponse]:
    """Update profile fields that are present in the body."""
    user = await profile_service.update_profile(db, user, data.model_dump(exclude_unset=True))
    return ApiResponse(message="Profile updated successfully", data=UserResponse.model_validate(user))


@router.get("/ratings", response_model=ApiResponse[ProfileRatingPage])
async def get_profile_ratings(
    page: int = Query(1, ge=1, le=MAX_DB_INT),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProfileRatingPage]:
    """Page through the user's ratings."""
    rows, total = await rating_service.list_user_ratings(db, user.id, limit, page_offset(page, limit))
    return ApiResponse(
        data=ProfileRatingPage(
            ratings=[RatingResponse.model_validate(r) for r in rows],
            pagination=Pagination(
                total=total, page=page, limit=limit, total_pages=total_pages(total, limit)
            ),
        )
    )


@router.get("/lists", response_model=ApiResponse[ProfileListPage])
async def get_profile_lists(
    page: int = Query(1, ge=1, le=MAX_DB_INT),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProfileListPage]:
    """Page through the user's lists."""
    rows, total = await list_service.page_user_lists(db, user.id, limit, page_offset(page, limit))
    return ApiResponse(
        data=ProfileListPage(
            lists=[ListSummary.model_validate(l) for l in rows],
            pagination=Pagination(
                total=total, page=page, limit=limit, total_pages=total_pages(total, limit)
            ),
        )
    )
