# app/api/deps.py
from functools import lru_cache

from fastapi import Request

from app.config.settings import load_spotify_config, load_token_store_settings
from app.services.spotify_client import SpotifyClient
from app.services.token_store import TokenStore, build_token_store


# One instance per process; tests swap them through app.dependency_overrides
@lru_cache
def get_spotify_client() -> SpotifyClient:
    return SpotifyClient(load_spotify_config())


@lru_cache
def get_token_store() -> TokenStore:
    return build_token_store(load_token_store_settings())


async def raw_body(request: Request) -> bytes:
    return await request.body()
