# app/models/spotify_auth_models.py
from typing import Optional

from pydantic import BaseModel


# === Validated request bodies ===
class AuthRequest(BaseModel):
    code: str
    code_verifier: str


class RefreshRequest(BaseModel):
    user_id: str


class CurrentlyPlayingRequest(BaseModel):
    access_token: str
    user_id: str


# === Response payloads (wrapped in the success envelope) ===
class AuthResponse(BaseModel):
    access_token: str
    user_id: str
    expires_in: Optional[int] = None


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None


class TrackInfo(BaseModel):
    name: Optional[str] = None
    artist: str = ""            # all artist names, comma separated
    album: Optional[str] = None
    image: Optional[str] = None
    external_url: Optional[str] = None
    duration_ms: Optional[int] = None
    progress_ms: Optional[int] = None


class TrackSnapshot(BaseModel):
    isPlaying: bool = False
    track: Optional[TrackInfo] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str
