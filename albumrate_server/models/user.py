# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User model."""

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from albumrate_server.models.base import Base
from albumrate_server.models.timestamp import TimestampMixin


class User(Base, TimestampMixin):
    """User account for authentication and profile."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    # Stored lower-cased
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    favorite_genres: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    social_links: Mapped[dict[str, str]] = mapped_column(JSON, default=dict, nullable=False)

    ratings: Mapped[list["Rating"]] = relationship(
        "Rating", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    lists: Mapped[list["AlbumList"]] = relationship(
        "AlbumList", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
