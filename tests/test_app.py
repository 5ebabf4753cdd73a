# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""App-level endpoints and error envelopes."""

from httpx import AsyncClient

from albumrate_server.main import VERSION


async def test_health(client: AsyncClient):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_root_info(client: AsyncClient):
    r = await client.get("/")
    assert r.json()["version"] == VERSION
    assert r.json()["api"] == "/api"


async def test_unknown_route_uses_envelope(client: AsyncClient):
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Not Found"}


async def test_unauthorized_advertises_bearer(client: AsyncClient):
    r = await client.get("/api/profile")
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"


async def test_malformed_json_is_bad_request(client: AsyncClient):
    r = await client.post(
        "/api/auth/login", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"
