# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from albumrate_server.models.base import Base
from albumrate_server.models.timestamp import TimestampMixin


class Album(Base, TimestampMixin):
    """Catalog album cached the first time a list references it."""

    __tablename__ = "albums"

    # Spotify album id
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
