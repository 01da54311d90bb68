# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.spotify_auth_api import router as spotify_router
from app.config.settings import CORS_ORIGINS, LOG_LEVEL, load_spotify_config

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("spotify_widget")

VERSION = "1.0.0"
ENDPOINTS = ["/auth", "/refresh", "/currently-playing"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail at startup, not on the first request, if CLIENT_ID / REDIRECT_URI are missing
    load_spotify_config()
    logger.info("Spotify Widget API %s started", VERSION)
    yield


app = FastAPI(
    title="Spotify Widget API",
    description=(
        "Backend for the Spotify widget: "
        "• PKCE code exchange "
        "• Access token refresh "
        "• Currently playing (with transparent re-auth)"
    ),
    version=VERSION,
    lifespan=lifespan,
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    max_age=86400,
)

# === Spotify token lifecycle ===
app.include_router(spotify_router, tags=["Spotify"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        logger.info("Endpoint not found: %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=404,
            content={"error": "Endpoint Not Found", "path": request.url.path},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.get("/")
def root():
    return {
        "message": "Spotify Widget API",
        "version": VERSION,
        "endpoints": ENDPOINTS,
    }


@app.get("/health")
def health():
    return {"status": "ok"}
