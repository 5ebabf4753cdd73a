# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User-curated album list models."""

from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from albumrate_server.models.base import Base
from albumrate_server.models.timestamp import TimestampMixin, utcnow

LIST_NAME_MAX_LENGTH = 100


class AlbumList(Base, TimestampMixin):
    """User list of albums. Private unless is_public."""

    __tablename__ = "lists"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(LIST_NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    owner: Mapped["User"] = relationship("User", back_populates="lists")
    # Membership rows are written through ListAlbum directly
    albums: Mapped[list["Album"]] = relationship(
        "Album",
        secondary="list_albums",
        order_by="ListAlbum.added_at",
        viewonly=True,
    )


class ListAlbum(Base):
    """Album membership in a list."""

    __tablename__ = "list_albums"

    list_id: Mapped[int] = mapped_column(
        ForeignKey("lists.id", ondelete="CASCADE"), primary_key=True
    )
    album_id: Mapped[str] = mapped_column(
        ForeignKey("albums.id", ondelete="CASCADE"), primary_key=True
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
