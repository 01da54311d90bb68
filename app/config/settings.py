# app/config/settings.py
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def load_env():
    if os.getenv("ENVIRONMENT") == "production":
        return

    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    env_path = os.path.join(base_dir, ".env")

    if os.path.exists(env_path):
        load_dotenv(env_path)

# Load env now
load_env()

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE = "https://api.spotify.com/v1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# "*" keeps the widget usable from any page; narrow it in production
CORS_ORIGINS: List[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]


class ConfigError(Exception):
    pass


class SpotifyConfig(BaseModel):
    client_id: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)
    token_url: str = SPOTIFY_TOKEN_URL
    api_base_url: str = SPOTIFY_API_BASE
    timeout_seconds: float = Field(5.0, gt=0)


class TokenStoreSettings(BaseModel):
    backend: str = "redis"
    timeout_seconds: float = Field(5.0, gt=0)   # per store call, both backends

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_key_prefix: str = "spotify:refresh_token:"

    # Firestore
    firestore_collection: str = "spotify_refresh_tokens"
    google_cloud_credentials: Optional[str] = None


def load_spotify_config(environ: Optional[Mapping[str, str]] = None) -> SpotifyConfig:
    """
    Build the Spotify client configuration from the environment.

    CLIENT_ID and REDIRECT_URI are required; a missing value raises ConfigError
    so the process refuses to start instead of failing on the first request.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in ("CLIENT_ID", "REDIRECT_URI") if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    timeout_raw = env.get("SPOTIFY_TIMEOUT_SECONDS", "5")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"SPOTIFY_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")
    if timeout <= 0:
        raise ConfigError("SPOTIFY_TIMEOUT_SECONDS must be positive")

    return SpotifyConfig(
        client_id=env["CLIENT_ID"].strip(),
        redirect_uri=env["REDIRECT_URI"].strip(),
        timeout_seconds=timeout,
    )


def load_token_store_settings(environ: Optional[Mapping[str, str]] = None) -> TokenStoreSettings:
    env = os.environ if environ is None else environ

    backend = env.get("TOKEN_STORE_BACKEND", "redis").strip().lower()
    if backend not in ("redis", "firestore"):
        raise ConfigError(f"Unknown TOKEN_STORE_BACKEND: {backend!r}")

    try:
        redis_port = int(env.get("REDIS_PORT", "6379"))
    except ValueError:
        raise ConfigError("REDIS_PORT must be an integer")

    timeout_raw = env.get("TOKEN_STORE_TIMEOUT_SECONDS", "5")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"TOKEN_STORE_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")
    if timeout <= 0:
        raise ConfigError("TOKEN_STORE_TIMEOUT_SECONDS must be positive")

    return TokenStoreSettings(
        backend=backend,
        timeout_seconds=timeout,
        redis_host=env.get("REDIS_HOST", "localhost"),
        redis_port=redis_port,
        redis_password=env.get("REDIS_PASSWORD") or None,
        redis_key_prefix=env.get("REDIS_KEY_PREFIX", "spotify:refresh_token:"),
        firestore_collection=env.get("FIRESTORE_COLLECTION", "spotify_refresh_tokens"),
        google_cloud_credentials=env.get("GOOGLE_CLOUD_CREDENTIALS") or None,
    )
