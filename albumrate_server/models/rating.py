# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album rating model."""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from albumrate_server.models.base import Base
from albumrate_server.models.timestamp import TimestampMixin

MIN_RATING = 1
MAX_RATING = 5


class Rating(Base, TimestampMixin):
    """A user's 1-5 rating of a catalog album. One per (user, album)."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "album_id", name="uq_ratings_user_album"),
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}",
            name="ck_ratings_rating_range",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Catalog (Spotify) album id, not a local foreign key
    album_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    album_name: Mapped[str] = mapped_column(String(255), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(255), nullable=False)
    album_image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="ratings")
