# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Rating upsert, ownership, and pagination tests."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from albumrate_server.errors import NotFound, ValidationError
from albumrate_server.models import Rating
from albumrate_server.services import ratings as rating_service

from conftest import bearer, register


def rating_body(rating, album_id="4aawyAB9vmqN3uQ7FjRGTy", **extra):
    return {
        "albumId": album_id,
        "albumName": "Global Warming",
        "artistName": "Pitbull",
        "albumImage": "https://i.scdn.co/image/ab67616d0000b273",
        "rating": rating,
        **extra,
    }


async def test_second_rating_overwrites_first(client: AsyncClient, db):
    user = await register(client)
    headers = bearer(user["token"])

    first = await client.post("/api/ratings", json=rating_body(3), headers=headers)
    assert first.status_code == 201
    assert first.json()["message"] == "Rating created successfully"

    second = await client.post(
        "/api/ratings", json=rating_body(5, review="Grew on me"), headers=headers
    )
    assert second.status_code == 200
    assert second.json()["message"] == "Rating updated successfully"
    assert second.json()["data"]["id"] == first.json()["data"]["id"]

    rows = (
        await db.execute(
            select(Rating.rating, Rating.review).where(Rating.user_id == user["user"]["id"])
        )
    ).all()
    assert rows == [(5, "Grew on me")]


async def test_upsert_service_reports_created_flag(client: AsyncClient, db):
    user_id = (await register(client))["user"]["id"]
    meta = {"album_name": "Blue", "artist_name": "Joni Mitchell"}
    _, created = await rating_service.upsert_rating(db, user_id, "blue", 3, **meta)
    again, created_again = await rating_service.upsert_rating(db, user_id, "blue", 5, **meta)
    assert created is True
    assert created_again is False
    assert again.rating == 5
    count = await db.scalar(
        select(func.count()).select_from(Rating).where(Rating.user_id == user_id)
    )
    assert count == 1


@pytest.mark.parametrize("value", [0, 6, -1, 3.5, 2.0, "4", True, None])
async def test_rating_outside_range_is_rejected(client: AsyncClient, value):
    user = await register(client)
    r = await client.post("/api/ratings", json=rating_body(value), headers=bearer(user["token"]))
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "rating" in [e["field"] for e in r.json()["errors"]]


@pytest.mark.parametrize("value", [0, 6, 4.5, 1.0, True, "3"])
def test_validate_rating_rejects(value):
    with pytest.raises(ValidationError):
        rating_service.validate_rating(value)


@pytest.mark.parametrize("value", [1, 3, 5])
def test_validate_rating_accepts(value):
    assert rating_service.validate_rating(value) == value


async def test_get_own_album_rating(client: AsyncClient):
    user = await register(client)
    headers = bearer(user["token"])
    await client.post("/api/ratings", json=rating_body(4, album_id="abc"), headers=headers)

    r = await client.get("/api/ratings/album/abc", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["rating"] == 4
    assert r.json()["data"]["albumId"] == "abc"

    missing = await client.get("/api/ratings/album/zzz", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Rating not found"


async def test_album_rating_is_per_user(client: AsyncClient):
    alice = await register(client, "alice")
    bob = await register(client, "bobby")
    await client.post("/api/ratings", json=rating_body(4, album_id="abc"), headers=bearer(alice["token"]))
    r = await client.get("/api/ratings/album/abc", headers=bearer(bob["token"]))
    assert r.status_code == 404


async def test_delete_by_non_owner_is_not_found(client: AsyncClient, db):
    alice = await register(client, "alice")
    mallory = await register(client, "mallory")
    created = await client.post("/api/ratings", json=rating_body(2), headers=bearer(alice["token"]))
    rating_id = created.json()["data"]["id"]

    r = await client.delete(f"/api/ratings/{rating_id}", headers=bearer(mallory["token"]))
    assert r.status_code == 404
    assert r.json()["message"] == "Rating not found"
    assert await db.scalar(select(func.count()).select_from(Rating)) == 1

    r = await client.delete(f"/api/ratings/{rating_id}", headers=bearer(alice["token"]))
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Rating deleted successfully"}
    assert await db.scalar(select(func.count()).select_from(Rating)) == 0


async def test_delete_rating_service_requires_ownership(client: AsyncClient, db):
    owner = (await register(client, "owner"))["user"]["id"]
    other = (await register(client, "other"))["user"]["id"]
    rating, _ = await rating_service.upsert_rating(
        db, owner, "x1", 4, album_name="A", artist_name="B"
    )
    rating_id = rating.id
    with pytest.raises(NotFound):
        await rating_service.delete_rating(db, other, rating_id)
    await rating_service.delete_rating(db, owner, rating_id)
    with pytest.raises(NotFound):
        await rating_service.delete_rating(db, owner, rating_id)


async def _seed_ratings(db, user_id: int, n: int) -> None:
    for i in range(n):
        await rating_service.upsert_rating(
            db, user_id, f"album-{i:02d}", i % 5 + 1, album_name=f"Album {i}", artist_name="Various"
        )


async def test_profile_pagination_last_page(client: AsyncClient, db):
    """25 ratings, limit=10: page 3 holds the remaining 5 of 3 pages."""
    user = await register(client)
    await _seed_ratings(db, user["user"]["id"], 25)

    r = await client.get(
        "/api/profile/ratings", params={"page": 3, "limit": 10}, headers=bearer(user["token"])
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert len(data["ratings"]) == 5
    assert data["pagination"] == {"total": 25, "page": 3, "limit": 10, "totalPages": 3}


async def test_user_ratings_offset_pagination(client: AsyncClient, db):
    user = await register(client)
    await _seed_ratings(db, user["user"]["id"], 25)

    r = await client.get(
        "/api/ratings/user", params={"limit": 10, "offset": 20}, headers=bearer(user["token"])
    )
    data = r.json()["data"]
    assert len(data["ratings"]) == 5
    assert data["total"] == 25
    assert data["totalPages"] == 3
    assert data["offset"] == 20


async def test_user_ratings_newest_first(client: AsyncClient, db):
    user = await register(client)
    await _seed_ratings(db, user["user"]["id"], 3)
    r = await client.get("/api/ratings/user", headers=bearer(user["token"]))
    assert [x["albumId"] for x in r.json()["data"]["ratings"]] == ["album-02", "album-01", "album-00"]


async def test_recent_ratings_include_author(client: AsyncClient):
    alice = await register(client, "alice")
    bob = await register(client, "bobby")
    await client.post("/api/ratings", json=rating_body(5, album_id="a"), headers=bearer(alice["token"]))
    await client.post("/api/ratings", json=rating_body(1, album_id="b"), headers=bearer(bob["token"]))

    r = await client.get("/api/ratings/recent", headers=bearer(alice["token"]))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total"] == 2
    authors = [x["user"]["username"] for x in data["ratings"]]
    assert authors == ["bobby", "alice"]
    assert "passwordHash" not in data["ratings"][0]["user"]


async def test_pagination_params_are_validated(client: AsyncClient):
    user = await register(client)
    r = await client.get("/api/profile/ratings", params={"page": 0}, headers=bearer(user["token"]))
    assert r.status_code == 400


@pytest.mark.parametrize(
    "method, path, params",
    [
        ("GET", "/api/profile/ratings", {"page": 10**17, "limit": 100}),
        ("GET", "/api/profile/lists", {"page": 2**31}),
        ("GET", "/api/ratings/user", {"offset": 2**63}),
        ("GET", "/api/ratings/recent", {"offset": 2**31}),
        ("DELETE", f"/api/ratings/{2**64}", {}),
        ("DELETE", "/api/ratings/0", {}),
    ],
)
async def test_out_of_range_integers_are_bad_requests(client: AsyncClient, method, path, params):
    user = await register(client)
    r = await client.request(method, path, params=params, headers=bearer(user["token"]))
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"


async def test_largest_page_and_offset_are_accepted(client: AsyncClient):
    user = await register(client)
    headers = bearer(user["token"])
    r = await client.get("/api/profile/ratings", params={"page": 2**31 - 1, "limit": 100}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["ratings"] == []
    r = await client.get("/api/ratings/user", params={"offset": 2**31 - 1}, headers=headers)
    assert r.status_code == 200


async def test_concurrent_upsert_last_write_wins(client: AsyncClient, db, session_maker, monkeypatch):
    """Another request inserts the same (user, album) between our lookup and our insert."""
    user_id = (await register(client))["user"]["id"]
    meta = {"album_name": "In Rainbows", "artist_name": "Radiohead"}
    real_find = rating_service._find_rating
    raced = []

    async def find_after_other_insert(session, uid, album_id):
        if not raced:
            raced.append(True)
            async with session_maker() as other:
                await rating_service.upsert_rating(other, uid, album_id, 2, **meta)
            return None
        return await real_find(session, uid, album_id)

    monkeypatch.setattr(rating_service, "_find_rating", find_after_other_insert)
    rating, created = await rating_service.upsert_rating(db, user_id, "rainbows", 5, **meta)

    assert created is False
    assert rating.rating == 5
    rows = (await db.execute(select(Rating.rating).where(Rating.user_id == user_id))).all()
    assert rows == [(5,)]
