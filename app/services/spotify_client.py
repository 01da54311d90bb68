# app/services/spotify_client.py
import logging
import threading
from typing import Any, Dict, Optional

import pydantic
import requests

from app.config.settings import SpotifyConfig
from app.models.result_models import Err, Ok, ProviderErrorKind, Result
from app.models.spotify_auth_models import TrackInfo, TrackSnapshot

logger = logging.getLogger(__name__)

NOTHING_PLAYING_STATUSES = (202, 204)
DEFAULT_PLAYBACK_ERROR = "Failed to fetch currently playing"


def _decode_json(r: requests.Response) -> Optional[Any]:
    # Spotify sometimes answers with HTML (proxies, rate limiting) or an empty body
    if not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        return None


def _error_message(body: Any, default: str) -> str:
    """
    Best-effort message from a Spotify error body.

    Web API errors look like {"error": {"status": 401, "message": "..."}};
    accounts errors look like {"error": "invalid_grant", "error_description": "..."}.
    """
    if not isinstance(body, dict):
        return default

    error = body.get("error")
    if isinstance(error, dict):
        return error.get("message") or default
    return body.get("error_description") or error or default


def to_track_snapshot(data: Dict[str, Any]) -> TrackSnapshot:
    item = data.get("item")
    if not item:
        return TrackSnapshot(isPlaying=bool(data.get("is_playing")), track=None)

    album = item.get("album") or {}
    images = album.get("images") or []

    track = TrackInfo(
        name=item.get("name"),
        artist=", ".join(a.get("name") or "" for a in item.get("artists") or [] if isinstance(a, dict)),
        album=album.get("name"),
        image=images[0].get("url") if images and isinstance(images[0], dict) else None,
        external_url=(item.get("external_urls") or {}).get("spotify"),
        duration_ms=item.get("duration_ms"),
        progress_ms=data.get("progress_ms"),
    )
    return TrackSnapshot(isPlaying=bool(data.get("is_playing")), track=track)


class SpotifyClient:
    """
    Thin wrapper over the four Spotify calls the widget needs.

    No call is retried here. Every outcome comes back as Ok / Err; only a timeout
    is turned into Err(TRANSPORT), other network failures propagate.
    """

    def __init__(self, config: SpotifyConfig, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        # requests.Session is not thread-safe; routes run in the threadpool
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    # --------------------------
    # Accounts service (token endpoint)
    # --------------------------
    def exchange_code_for_token(self, code: str, code_verifier: str) -> Result[Dict[str, Any]]:
        payload = {
            "client_id": self.config.client_id,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "code_verifier": code_verifier,
        }
        return self._post_token(payload)

    def refresh_access_token(self, refresh_token: str) -> Result[Dict[str, Any]]:
        payload = {
            "client_id": self.config.client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        return self._post_token(payload)

    def _post_token(self, payload: Dict[str, str]) -> Result[Dict[str, Any]]:
        grant_type = payload["grant_type"]
        try:
            r = self.session.post(
                self.config.token_url,
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.config.timeout_seconds,
            )
        except requests.Timeout:
            logger.warning("Spotify token endpoint timed out (grant_type=%s)", grant_type)
            return Err(ProviderErrorKind.TRANSPORT, message="Token endpoint timed out")

        body = _decode_json(r)
        if r.ok and not isinstance(body, dict):
            logger.warning("Spotify token endpoint returned non-JSON body (status=%s)", r.status_code)
            return Err(ProviderErrorKind.PROTOCOL, r.status_code, "Token endpoint returned an unexpected body")

        if not r.ok or body.get("error"):
            message = _error_message(body, "Token request failed")
            logger.info("Spotify token endpoint rejected %s grant: %s (status=%s)", grant_type, message, r.status_code)
            return Err(ProviderErrorKind.PROVIDER_HTTP, r.status_code, message)

        return Ok(body)

    # --------------------------
    # Web API
    # --------------------------
    def _get(self, path: str, access_token: str) -> requests.Response:
        return self.session.get(
            f"{self.config.api_base_url}/{path}",
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=self.config.timeout_seconds,
        )

    def get_user_profile(self, access_token: str) -> Result[Dict[str, Any]]:
        try:
            r = self._get("me", access_token)
        except requests.Timeout:
            logger.warning("Spotify profile endpoint timed out")
            return Err(ProviderErrorKind.TRANSPORT, message="Profile endpoint timed out")

        body = _decode_json(r)
        if not r.ok:
            return Err(ProviderErrorKind.PROVIDER_HTTP, r.status_code, _error_message(body, "Failed to get user profile"))

        if not isinstance(body, dict):
            return Err(ProviderErrorKind.PROTOCOL, r.status_code, "Profile endpoint returned an unexpected body")

        return Ok(body)

    def get_currently_playing(self, access_token: str) -> Result[TrackSnapshot]:
        try:
            r = self._get("me/player/currently-playing", access_token)
        except requests.Timeout:
            logger.warning("Spotify currently-playing endpoint timed out")
            return Err(ProviderErrorKind.TRANSPORT, message="Currently-playing endpoint timed out")

        logger.debug("Spotify currently-playing status: %s", r.status_code)

        # 204 / 202 -> nothing is playing
        if r.status_code in NOTHING_PLAYING_STATUSES:
            return Ok(TrackSnapshot(isPlaying=False, track=None))

        if not r.ok:
            return Err(
                ProviderErrorKind.PROVIDER_HTTP,
                r.status_code,
                _error_message(_decode_json(r), DEFAULT_PLAYBACK_ERROR),
            )

        if not r.content:
            return Ok(TrackSnapshot(isPlaying=False, track=None))

        body = _decode_json(r)
        if not isinstance(body, dict):
            return Err(ProviderErrorKind.PROTOCOL, r.status_code, "Currently-playing endpoint returned an unexpected body")

        try:
            snapshot = to_track_snapshot(body)
        except (AttributeError, TypeError, pydantic.ValidationError) as e:
            logger.warning("Spotify currently-playing body has an unexpected shape: %s", e)
            return Err(ProviderErrorKind.PROTOCOL, r.status_code, "Currently-playing endpoint returned an unexpected body")

        return Ok(snapshot)
