# app/services/spotify_pkce_service.py
"""
Authorization-code (PKCE) exchange for the widget.

The widget generates the code_verifier / code_challenge pair and sends us the
authorization code with its verifier. We trade them for tokens, resolve the
Spotify user id, and keep the refresh token server-side. The caller only ever
receives the short-lived access token.
"""
import logging
from typing import Any, Dict, Mapping, Union

from app.models.error_models import SPOTIFY_UNREACHABLE, ErrorKind, FlowError
from app.models.result_models import Err, Ok, ProviderErrorKind
from app.models.spotify_auth_models import AuthResponse
from app.services.spotify_client import SpotifyClient
from app.services.spotify_token_service import parse_token_grant
from app.services.token_store import TokenStore
from app.services.validation import ValidationError, validate_auth_request, validate_request

logger = logging.getLogger(__name__)

TOKEN_EXCHANGE_ERROR = FlowError(ErrorKind.AUTHENTICATION, "TOKEN_EXCHANGE_ERROR", "Authentication failed")
USER_PROFILE_ERROR = FlowError(ErrorKind.AUTHENTICATION, "USER_PROFILE_ERROR", "Failed to get user profile")
USER_ID_NOT_FOUND = FlowError(ErrorKind.UPSTREAM_PROTOCOL, "USER_ID_NOT_FOUND", "User ID not found in profile")


def authorize_with_code(
    headers: Mapping[str, str],
    raw_body: bytes,
    client: SpotifyClient,
    store: TokenStore,
) -> Union[Ok[Dict[str, Any]], FlowError]:
    # 1. Validate body
    request = validate_request(headers, raw_body, validate_auth_request)
    if isinstance(request, ValidationError):
        return request.as_flow_error()

    code = request.value.code
    logger.info("Auth request received with code: %s...", code[:6])

    # 2. Exchange code + code_verifier for tokens
    exchanged = client.exchange_code_for_token(code, request.value.code_verifier)
    if isinstance(exchanged, Err):
        if exchanged.kind == ProviderErrorKind.TRANSPORT:
            return SPOTIFY_UNREACHABLE
        logger.info("Token exchange rejected: %s (status=%s)", exchanged.message, exchanged.status)
        return TOKEN_EXCHANGE_ERROR

    grant = parse_token_grant(exchanged.value)
    if grant is None or not grant.refresh_token:
        logger.warning("Token exchange response is missing access or refresh token")
        return TOKEN_EXCHANGE_ERROR

    # 3. Who is this? Spotify user id is our storage key
    profile = client.get_user_profile(grant.access_token)
    if isinstance(profile, Err):
        if profile.kind == ProviderErrorKind.TRANSPORT:
            return SPOTIFY_UNREACHABLE
        if profile.kind == ProviderErrorKind.PROTOCOL:
            logger.error("Spotify profile endpoint returned an unexpected body (status=%s)", profile.status)
            return USER_ID_NOT_FOUND
        logger.info("Profile fetch rejected: %s (status=%s)", profile.message, profile.status)
        return USER_PROFILE_ERROR

    if "id" not in profile.value:
        return USER_PROFILE_ERROR

    user_id = profile.value["id"]
    if not isinstance(user_id, str) or not user_id.strip():
        logger.error("Spotify profile returned an unusable id: %r", user_id)
        return USER_ID_NOT_FOUND

    # 4. Persist the refresh token only
    store.put(user_id, grant.refresh_token)
    logger.info("Stored refresh token for user: %s", user_id)

    # 5. Access token goes back to the widget
    return Ok(
        AuthResponse(
            access_token=grant.access_token,
            user_id=user_id,
            expires_in=grant.expires_in,
        ).model_dump()
    )
