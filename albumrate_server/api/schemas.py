# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from datetime import datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from albumrate_server.models.album_list import LIST_NAME_MAX_LENGTH
from albumrate_server.models.rating import MAX_RATING, MIN_RATING

T = TypeVar("T")


class CamelModel(BaseModel):
    """camelCase on the wire; snake_case or camelCase accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# Envelope
class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Every response body: `{success, message?, data?, error?, errors?}`."""

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: str | None = None
    errors: list[FieldError] | None = None

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler) -> dict[str, Any]:
        return {k: v for k, v in handler(self).items() if v is not None}


# Auth
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6


def _check_username(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Username is required")
    if not USERNAME_MIN_LENGTH <= len(v) <= USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    return v


def _check_email(v: Any, handler) -> str:
    try:
        email = handler(v.strip() if isinstance(v, str) else v)
    except ValidationError:
        raise ValueError("Please provide a valid email address") from None
    return email.lower()


class UserCreate(CamelModel):
    username: str
    email: EmailStr
    password: str
    confirm_password: str
    avatar_url: str | None = None

    @field_validator("username")
    @classmethod
    def valid_username(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("email", mode="wrap")
    @classmethod
    def valid_email(cls, v: Any, handler) -> str:
        return _check_email(v, handler)

    @field_validator("password")
    @classmethod
    def valid_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        return v

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("Passwords do not match")
        return v


class UserLogin(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="wrap")
    @classmethod
    def valid_email(cls, v: Any, handler) -> str:
        return _check_email(v, handler)

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    avatar_url: str | None = None
    description: str | None = None
    location: str | None = None
    favorite_genres: list[str] = []
    social_links: dict[str, str] = {}
    created_at: datetime


class AuthPayload(CamelModel):
    user: UserResponse
    token: str


# Ratings
RatingValue = Annotated[int, Field(strict=True, ge=MIN_RATING, le=MAX_RATING)]


class RatingCreate(CamelModel):
    album_id: str = Field(min_length=1, max_length=64)
    album_name: str = Field(min_length=1)
    artist_name: str = Field(min_length=1)
    album_image: str | None = None
    rating: RatingValue
    review: str | None = None


class RatingAuthor(CamelModel):
    id: int
    username: str
    avatar_url: str | None = None


class RatingResponse(CamelModel):
    id: int
    user_id: int
    album_id: str
    album_name: str
    artist_name: str
    album_image: str | None = None
    rating: int
    review: str | None = None
    created_at: datetime
    updated_at: datetime


class RecentRatingResponse(RatingResponse):
    user: RatingAuthor


class RatingPage(CamelModel):
    """Offset-form page of ratings."""

    ratings: list[RatingResponse]
    total: int
    limit: int
    offset: int
    total_pages: int


class RecentRatingPage(RatingPage):
    ratings: list[RecentRatingResponse]


# Albums & lists
class AlbumResponse(CamelModel):
    id: str
    name: str
    artist_name: str
    image_url: str | None = None


class ListCreate(CamelModel):
    name: str = Field(min_length=1, max_length=LIST_NAME_MAX_LENGTH)
    description: str | None = None
    is_public: bool = False


class ListUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=LIST_NAME_MAX_LENGTH)
    description: str | None = None
    is_public: bool | None = None


class ListAlbumAdd(CamelModel):
    album_id: str = Field(min_length=1, max_length=64)
    album_name: str = Field(min_length=1)
    artist_name: str = Field(min_length=1)
    image_url: str | None = None


class ListSummary(CamelModel):
    id: int
    user_id: int
    name: str
    description: str | None = None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class ListResponse(ListSummary):
    albums: list[AlbumResponse] = []


class ListDetailResponse(ListResponse):
    owner: RatingAuthor


# Profile
class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class ProfileRatingPage(CamelModel):
    ratings: list[RatingResponse]
    pagination: Pagination


class ProfileListPage(CamelModel):
    lists: list[ListSummary]
    pagination: Pagination


class ProfileResponse(UserResponse):
    ratings: list[RatingResponse] = []
    lists: list[ListSummary] = []


class ProfileUpdate(CamelModel):
    username: str | None = None
    description: str | None = None
    location: str | None = None
    favorite_genres: list[str] | None = None
    social_links: dict[str, str] | None = None
    avatar_url: str | None = None

    @field_validator("username")
    @classmethod
    def valid_username(cls, v: str | None) -> str | None:
        return None if v is None else _check_username(v)
