# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Each test gets a fresh in-memory SQLite database."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SPOTIFY_CLIENT_ID", "test-client-id")
os.environ.setdefault("SPOTIFY_CLIENT_SECRET", "test-client-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from albumrate_server.database import engine_options, get_db, init_db, make_session_maker
from albumrate_server.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def session_maker():
    engine = create_async_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))
    await init_db(bind=engine)
    yield make_session_maker(engine)
    await engine.dispose()


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(
    client: AsyncClient,
    username: str = "alice",
    email: str | None = None,
    password: str = "secret123",
) -> dict:
    """Register through the API and return `data` ({user, token})."""
    r = await client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
            "confirmPassword": password,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
