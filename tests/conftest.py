"""Shared fakes: recording token store, scripted Spotify client, fake HTTP session."""

import json
import os
from typing import Any, Dict, List, Optional

import pytest
import requests

os.environ.setdefault("CLIENT_ID", "test_client_id")
os.environ.setdefault("REDIRECT_URI", "http://127.0.0.1:5500/callback.html")
os.environ.setdefault("ENVIRONMENT", "production")  # never read a developer .env

from app.models.result_models import Err, Ok, ProviderErrorKind  # noqa: E402
from app.models.spotify_auth_models import TrackInfo, TrackSnapshot  # noqa: E402

JSON_HEADERS = {"content-type": "application/json"}
VERIFIER = "v" * 43


def body(data: Any) -> bytes:
    return json.dumps(data).encode()


def make_response(status: int, json_body: Any = None, text: Optional[str] = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    if json_body is not None:
        r._content = json.dumps(json_body).encode()
        r.headers["content-type"] = "application/json"
    else:
        r._content = (text or "").encode()
    return r


class RecordingTokenStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.gets: List[str] = []
        self.puts: List[tuple] = []

    def get(self, user_id: str) -> Optional[str]:
        self.gets.append(user_id)
        return self.data.get(user_id)

    def put(self, user_id: str, refresh_token: str) -> None:
        self.puts.append((user_id, refresh_token))
        self.data[user_id] = refresh_token


class ScriptedSpotifyClient:
    """Stands in for SpotifyClient; every call is recorded in `calls`."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.exchange_result = Ok({
            "access_token": "AT1",
            "refresh_token": "RT1",
            "expires_in": 3600,
            "token_type": "Bearer",
            "scope": "user-read-currently-playing",
        })
        self.profile_result = Ok({"id": "user42", "display_name": "User 42"})
        self.refresh_result = Ok({"access_token": "AT2", "expires_in": 3600, "token_type": "Bearer"})
        self.playback_results: List[Any] = [Ok(playing_snapshot())]

    def exchange_code_for_token(self, code, code_verifier):
        self.calls.append(("exchange", code, code_verifier))
        return self.exchange_result

    def refresh_access_token(self, refresh_token):
        self.calls.append(("refresh", refresh_token))
        return self.refresh_result

    def get_user_profile(self, access_token):
        self.calls.append(("profile", access_token))
        return self.profile_result

    def get_currently_playing(self, access_token):
        self.calls.append(("playback", access_token))
        return self.playback_results.pop(0)

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


class FakeSession:
    """requests.Session replacement returning queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def _next(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


def playing_snapshot() -> TrackSnapshot:
    return TrackSnapshot(
        isPlaying=True,
        track=TrackInfo(
            name="Song",
            artist="Artist A, Artist B",
            album="Album",
            image="https://i.scdn.co/image/1",
            external_url="https://open.spotify.com/track/1",
            duration_ms=200000,
            progress_ms=1000,
        ),
    )


def expired() -> Err:
    return Err(ProviderErrorKind.PROVIDER_HTTP, 401, "The access token expired")


@pytest.fixture
def store():
    return RecordingTokenStore()


@pytest.fixture
def spotify():
    return ScriptedSpotifyClient()


@pytest.fixture
def api_client(store, spotify):
    from fastapi.testclient import TestClient

    from app.api.deps import get_spotify_client, get_token_store
    from app.main import app

    app.dependency_overrides[get_spotify_client] = lambda: spotify
    app.dependency_overrides[get_token_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
