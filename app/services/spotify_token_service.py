# app/services/spotify_token_service.py
import logging
from typing import Any, Dict, Mapping, Optional, Union

import pydantic

from app.models.error_models import (
    SPOTIFY_UNREACHABLE,
    TOKEN_NOT_FOUND,
    TOKEN_REFRESH_FAILED,
    FlowError,
)
from app.models.result_models import Err, Ok, ProviderErrorKind
from app.models.spotify_auth_models import RefreshResponse
from app.models.token_model import TokenGrant
from app.services.spotify_client import SpotifyClient
from app.services.token_store import TokenStore
from app.services.validation import ValidationError, validate_refresh_request, validate_request

logger = logging.getLogger(__name__)


def parse_token_grant(data: Any) -> Optional[TokenGrant]:
    """Token endpoint JSON -> TokenGrant, or None when it has no usable access token."""
    try:
        return TokenGrant.model_validate(data)
    except pydantic.ValidationError:
        return None


def rotate_refresh_token(store: TokenStore, user_id: str, current: str, grant: TokenGrant) -> bool:
    """
    Persist a refresh token Spotify rotated. Returns True if the store was written.

    Spotify may omit refresh_token on refresh; the stored one then stays valid.
    """
    if not grant.refresh_token or grant.refresh_token == current:
        return False

    # Last write wins if two refreshes for the same user race each other
    store.put(user_id, grant.refresh_token)
    logger.info("Updated refresh token for user: %s", user_id)
    return True


def refresh_with_stored_token(
    user_id: str,
    client: SpotifyClient,
    store: TokenStore,
) -> Union[Ok[TokenGrant], FlowError]:
    """
    Shared by /refresh and the currently-playing retry:
    look up -> refresh -> rotate if needed.
    """
    # 1. Stored refresh token
    refresh_token = store.get(user_id)
    if not refresh_token:
        logger.info("Refresh token not found for user: %s", user_id)
        return TOKEN_NOT_FOUND

    # 2. Ask Spotify for a new access token
    result = client.refresh_access_token(refresh_token)
    if isinstance(result, Err):
        if result.kind == ProviderErrorKind.TRANSPORT:
            return SPOTIFY_UNREACHABLE
        logger.info("Spotify API error refreshing user %s: %s (status=%s)", user_id, result.message, result.status)
        return TOKEN_REFRESH_FAILED

    grant = parse_token_grant(result.value)
    if grant is None:
        logger.warning("Spotify refresh response for user %s has no access_token", user_id)
        return TOKEN_REFRESH_FAILED

    # 3. Rotation
    rotate_refresh_token(store, user_id, refresh_token, grant)
    return Ok(grant)


def refresh_for_user(
    headers: Mapping[str, str],
    raw_body: bytes,
    client: SpotifyClient,
    store: TokenStore,
) -> Union[Ok[Dict[str, Any]], FlowError]:
    """POST /refresh: new access token for a user whose refresh token we hold."""
    request = validate_request(headers, raw_body, validate_refresh_request)
    if isinstance(request, ValidationError):
        return request.as_flow_error()

    outcome = refresh_with_stored_token(request.value.user_id, client, store)
    if isinstance(outcome, FlowError):
        return outcome

    grant = outcome.value
    return Ok(
        RefreshResponse(
            access_token=grant.access_token,
            expires_in=grant.expires_in,
            token_type=grant.token_type,
            scope=grant.scope,
        ).model_dump()
    )
