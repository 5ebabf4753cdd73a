# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from albumrate_server.models.base import Base
from albumrate_server.models.user import User
from albumrate_server.models.rating import Rating
from albumrate_server.models.album import Album
from albumrate_server.models.album_list import AlbumList, ListAlbum

__all__ = [
    "Base",
    "User",
    "Rating",
    "Album",
    "AlbumList",
    "ListAlbum",
]
