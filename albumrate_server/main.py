# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""AlbumRate Server - Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from albumrate_server import __version__
from albumrate_server.api.schemas import ApiResponse, FieldError
from albumrate_server.config import settings
from albumrate_server.database import init_db
from albumrate_server.errors import AppError, InternalError, Unauthorized
from albumrate_server.routers import auth, lists, profile, ratings, spotify
from albumrate_server.services.spotify import SpotifyClient

logger = logging.getLogger(__name__)

VERSION = __version__


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db(force=settings.db_force_sync)
    if not (settings.spotify_client_id and settings.spotify_client_secret):
        logger.info(
            "SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set - album search will fail. "
            "Create an app at https://developer.spotify.com/dashboard"
        )
    spotify = app.state.spotify = SpotifyClient.from_settings()
    try:
        yield
    finally:
        del app.state.spotify
        await spotify.aclose()


app = FastAPI(
    title="AlbumRate Server",
    description="Album ratings, lists, and Spotify catalog search",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body or auth headers)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


def _envelope(status_code: int, body: ApiResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors as `{success: false, message}`."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return _envelope(
        exc.status_code,
        ApiResponse(
            success=False,
            message=exc.message,
            error=exc.detail if settings.expose_error_details else None,
        ),
        headers,
    )


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Bad request shape: 400 with one entry per offending field."""
    errors = [
        FieldError(field=_field_name(tuple(e.get("loc", ()))), message=e.get("msg", "").removeprefix("Value error, "))
        for e in exc.errors()
    ]
    return _envelope(
        status.HTTP_400_BAD_REQUEST,
        ApiResponse(success=False, message="Validation failed", errors=errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _envelope(
        exc.status_code,
        ApiResponse(success=False, message=str(exc.detail)),
        getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await app_error_handler(request, InternalError(detail=str(exc)))


app.include_router(auth.router, prefix="/api")
app.include_router(ratings.router, prefix="/api")
app.include_router(profile.router, prefix="/api")
app.include_router(lists.router, prefix="/api")
app.include_router(spotify.router, prefix="/api")


@app.get("/")
async def root():
    """Health check / API info."""
    return {
        "name": "AlbumRate Server",
        "version": VERSION,
        "api": "/api",
        "docs": "/api/docs",
    }


@app.get("/api/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
