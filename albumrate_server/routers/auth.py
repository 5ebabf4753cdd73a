# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication API routes."""

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from albumrate_server.auth import bearer_scheme, create_access_token, get_current_user
from albumrate_server.database import get_db
from albumrate_server.models import User
from albumrate_server.api.schemas import (
    ApiResponse,
    AuthPayload,
    UserCreate,
    UserLogin,
    UserResponse,
)
from albumrate_server.rate_limit import rate_limit_auth_dep
from albumrate_server.services.users import authenticate, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_payload(user: User, token: str | None = None) -> AuthPayload:
    return AuthPayload(
        user=UserResponse.model_validate(user),
        token=token or create_access_token(user.id, user.username),
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_auth_dep)],
)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    """Create a new user account and sign it in."""
    user = await register_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        avatar_url=data.avatar_url,
    )
    return ApiResponse(message="User registered successfully", data=_auth_payload(user))


@router.post(
    "/login",
    response_model=ApiResponse[AuthPayload],
    dependencies=[Depends(rate_limit_auth_dep)],
)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    """Authenticate and return JWT."""
    user = await authenticate(db, data.email, data.password)
    return ApiResponse(message="Login successful", data=_auth_payload(user))


@router.get("/verify", response_model=ApiResponse[AuthPayload])
async def verify_session(
    user: User = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> ApiResponse[AuthPayload]:
    """Confirm the presented token is still good and return its user."""
    return ApiResponse(data=_auth_payload(user, credentials.credentials))
