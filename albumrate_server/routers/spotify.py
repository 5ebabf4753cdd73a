# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Spotify catalog proxy - album search and details."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from albumrate_server.auth import get_current_user
from albumrate_server.errors import ValidationError
from albumrate_server.models import User
from albumrate_server.api.schemas import ApiResponse
from albumrate_server.services.spotify import (
    DEFAULT_SEARCH_LIMIT,
    MAX_SEARCH_LIMIT,
    MAX_SEARCH_OFFSET,
    CatalogError,
    SpotifyClient,
)

router = APIRouter(prefix="/spotify", tags=["spotify"])


def get_spotify_client(request: Request) -> SpotifyClient:
    """Dependency: the process-wide Spotify client owned by the app lifespan."""
    client = getattr(request.app.state, "spotify", None)
    if client is None:
        raise CatalogError("Spotify client is not running")
    return client


@router.get("/search", response_model=ApiResponse[dict[str, Any]])
async def search_albums(
    query: str | None = Query(None),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    offset: int = Query(0, ge=0, le=MAX_SEARCH_OFFSET),
    _user: User = Depends(get_current_user),
    spotify: SpotifyClient = Depends(get_spotify_client),
) -> ApiResponse[dict[str, Any]]:
    """Search Spotify albums. `limit` is capped so short queries cannot return unbounded pages."""
    if not query or not query.strip():
        raise ValidationError("Search query is required")
    try:
        results = await spotify.search_albums(query.strip(), limit=limit, offset=offset)
    except CatalogError as e:
        raise CatalogError("Error searching albums", detail=e.detail or str(e)) from e
    return ApiResponse(data=results)


@router.get("/albums/{album_id}", response_model=ApiResponse[dict[str, Any]])
async def get_album_details(
    album_id: str,
    _user: User = Depends(get_current_user),
    spotify: SpotifyClient = Depends(get_spotify_client),
) -> ApiResponse[dict[str, Any]]:
    """Full Spotify album object (tracks, artists, images)."""
    try:
        album = await spotify.get_album(album_id)
    except CatalogError as e:
        raise CatalogError("Error getting album details", detail=e.detail or str(e)) from e
    return ApiResponse(data=album)
