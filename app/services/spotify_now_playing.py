# app/services/spotify_now_playing.py
import logging
from typing import Any, Dict, Mapping, Union

from app.models.error_models import ErrorKind, FlowError
from app.models.result_models import Err, Ok
from app.models.token_model import TokenGrant
from app.services.spotify_client import SpotifyClient
from app.services.spotify_token_service import refresh_with_stored_token
from app.services.token_store import TokenStore
from app.services.validation import (
    ValidationError,
    validate_currently_playing_request,
    validate_request,
)

logger = logging.getLogger(__name__)

PLAYBACK_FETCH_ERROR = FlowError(
    ErrorKind.PROVIDER_API, "SPOTIFY_API_ERROR", "Error fetching currently playing track"
)


def currently_playing(
    headers: Mapping[str, str],
    raw_body: bytes,
    client: SpotifyClient,
    store: TokenStore,
) -> Union[Ok[Dict[str, Any]], FlowError]:
    """
    Currently-playing track for the widget.

    If Spotify rejects the access token (401), the stored refresh token is used
    to get a new one and the fetch is retried once. The new access token is then
    returned alongside the track so the widget can replace its copy:

    - 204 / 202 → {"isPlaying": false, "track": null}, no refresh
    - 401 → refresh → retry once → snapshot + new_access_token + expires_in
    - any other error → SPOTIFY_API_ERROR
    """
    # 1. Validate body
    request = validate_request(headers, raw_body, validate_currently_playing_request)
    if isinstance(request, ValidationError):
        return request.as_flow_error()

    user_id = request.value.user_id

    # 2. Fetch with the widget's access token
    result = client.get_currently_playing(request.value.access_token)

    # 3. Token expired → refresh → retry exactly once
    refreshed: TokenGrant | None = None
    if isinstance(result, Err) and result.status == 401:
        logger.info("Access token rejected for user %s, refreshing", user_id)

        outcome = refresh_with_stored_token(user_id, client, store)
        if isinstance(outcome, FlowError):
            return outcome

        refreshed = outcome.value
        result = client.get_currently_playing(refreshed.access_token)

    # 4. Any remaining error collapses to one kind
    if isinstance(result, Err):
        logger.info(
            "Currently-playing fetch failed for user %s: %s (status=%s)",
            user_id, result.message, result.status,
        )
        return PLAYBACK_FETCH_ERROR

    # 5. Snapshot (+ the new token if we refreshed)
    payload = result.value.model_dump()
    if refreshed is not None:
        payload["new_access_token"] = refreshed.access_token
        payload["expires_in"] = refreshed.expires_in

    return Ok(payload)
