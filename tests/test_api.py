from app.models.result_models import Ok

from conftest import VERIFIER, expired, playing_snapshot


def test_root(api_client):
    resp = api_client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Spotify Widget API",
        "version": "1.0.0",
        "endpoints": ["/auth", "/refresh", "/currently-playing"],
    }


def test_health(api_client):
    assert api_client.get("/health").json() == {"status": "ok"}


def test_unknown_path(api_client):
    resp = api_client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Endpoint Not Found", "path": "/nope"}


def test_cors_preflight(api_client):
    resp = api_client.options(
        "/auth",
        headers={
            "Origin": "https://widget.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-max-age"] == "86400"
    assert "POST" in resp.headers["access-control-allow-methods"]


def test_auth_scenario(api_client, store):
    resp = api_client.post("/auth", json={"code": "abcdefghij", "code_verifier": VERIFIER})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "access_token": "AT1", "user_id": "user42", "expires_in": 3600}
    assert store.data == {"user42": "RT1"}


def test_auth_validation_envelope(api_client, spotify):
    resp = api_client.post("/auth", json={"code": "abcdefghij", "code_verifier": "short"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid code verifier", "code": "INVALID_CODE_VERIFIER"}
    assert spotify.calls == []


def test_content_type_required(api_client):
    resp = api_client.post(
        "/refresh", content=b'{"user_id": "user42"}', headers={"content-type": "text/plain"}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_CONTENT_TYPE"


def test_malformed_json(api_client):
    resp = api_client.post("/refresh", content=b"{user_id", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_JSON"


def test_refresh_token_not_found(api_client):
    resp = api_client.post("/refresh", json={"user_id": "user42"})

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Refresh token not found", "code": "TOKEN_NOT_FOUND"}


def test_currently_playing_scenario(api_client, store, spotify):
    store.data["user42"] = "RT1"
    spotify.playback_results = [expired(), Ok(playing_snapshot())]

    resp = api_client.post("/currently-playing", json={"access_token": "expired", "user_id": "user42"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["isPlaying"] is True
    assert data["track"]["artist"] == "Artist A, Artist B"
    assert data["new_access_token"] == "AT2"
    assert data["expires_in"] == 3600
    assert store.puts == []


def test_store_failure_is_internal_error(api_client, store):
    def broken_get(user_id):
        raise ConnectionError("redis down")

    store.get = broken_get

    resp = api_client.post("/refresh", json={"user_id": "user42"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"}
