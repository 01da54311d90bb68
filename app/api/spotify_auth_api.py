# app/api/spotify_auth_api.py
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_spotify_client, get_token_store, raw_body
from app.api.responses import flow_response
from app.models.error_models import INTERNAL_ERROR
from app.models.spotify_auth_models import ErrorResponse
from app.services.spotify_client import SpotifyClient
from app.services.spotify_now_playing import currently_playing
from app.services.spotify_pkce_service import authorize_with_code
from app.services.spotify_token_service import refresh_for_user
from app.services.token_store import TokenStore

router = APIRouter()

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 401, 404, 500, 502)
}


def _run(name: str, flow, request: Request, body: bytes, client, store) -> JSONResponse:
    try:
        return flow_response(flow(request.headers, body, client, store))
    except Exception:
        # Store outages, connection errors, bugs: logged here, never shown to the caller
        logger.exception("%s endpoint error", name)
        return flow_response(INTERNAL_ERROR)


# Routes are plain `def`: FastAPI runs them on its threadpool, so the blocking
# requests / redis calls inside never stall the event loop.

@router.post(
    "/auth",
    summary="Exchange a PKCE authorization code",
    description=(
        "Body: {code, code_verifier}. Stores the refresh token server-side and "
        "returns {access_token, user_id, expires_in}."
    ),
    responses=ERROR_RESPONSES,
)
def auth(
    request: Request,
    body: bytes = Depends(raw_body),
    client: SpotifyClient = Depends(get_spotify_client),
    store: TokenStore = Depends(get_token_store),
):
    return _run("Auth", authorize_with_code, request, body, client, store)


@router.post(
    "/refresh",
    summary="New access token for a user",
    description="Body: {user_id}. Returns {access_token, expires_in, token_type, scope}.",
    responses=ERROR_RESPONSES,
)
def refresh(
    request: Request,
    body: bytes = Depends(raw_body),
    client: SpotifyClient = Depends(get_spotify_client),
    store: TokenStore = Depends(get_token_store),
):
    return _run("Refresh", refresh_for_user, request, body, client, store)


@router.post(
    "/currently-playing",
    summary="Currently playing track",
    description=(
        "Body: {access_token, user_id}. If the access token is expired it is "
        "refreshed and the fetch retried once; new_access_token is then included."
    ),
    responses=ERROR_RESPONSES,
)
def now_playing(
    request: Request,
    body: bytes = Depends(raw_body),
    client: SpotifyClient = Depends(get_spotify_client),
    store: TokenStore = Depends(get_token_store),
):
    return _run("Currently playing", currently_playing, request, body, client, store)
