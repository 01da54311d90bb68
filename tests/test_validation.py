import pytest

from app.models.result_models import Ok
from app.services.validation import (
    INVALID_ACCESS_TOKEN,
    INVALID_CODE,
    INVALID_CODE_VERIFIER,
    INVALID_CONTENT_TYPE,
    INVALID_JSON,
    INVALID_USER_ID,
    validate_auth_request,
    validate_content_type,
    validate_currently_playing_request,
    validate_refresh_request,
    validate_request,
)

from conftest import VERIFIER, body


@pytest.mark.parametrize(
    "headers",
    [{}, {"content-type": "text/plain"}, {"Content-Type": "application/x-www-form-urlencoded"}],
)
def test_content_type_rejected(headers):
    assert validate_content_type(headers) == INVALID_CONTENT_TYPE


def test_content_type_accepts_charset_and_any_case():
    assert validate_content_type({"Content-Type": "application/json; charset=utf-8"}) is None


@pytest.mark.parametrize("code", [None, "", "short", 1234567890, ["abcdefghij"]])
def test_auth_rejects_bad_code(code):
    assert validate_auth_request({"code": code, "code_verifier": VERIFIER}) == INVALID_CODE


@pytest.mark.parametrize("verifier", [None, "", "x" * 42, 43])
def test_auth_rejects_short_verifier(verifier):
    assert validate_auth_request({"code": "abcdefghij", "code_verifier": verifier}) == INVALID_CODE_VERIFIER


def test_auth_code_checked_before_verifier():
    assert validate_auth_request({}) == INVALID_CODE


def test_auth_accepts_minimum_lengths():
    result = validate_auth_request({"code": "abcdefghij", "code_verifier": VERIFIER})
    assert isinstance(result, Ok)
    assert result.value.code == "abcdefghij"
    assert result.value.code_verifier == VERIFIER


@pytest.mark.parametrize("user_id", [None, "", "   ", 42])
def test_refresh_rejects_bad_user_id(user_id):
    assert validate_refresh_request({"user_id": user_id}) == INVALID_USER_ID


def test_refresh_trims_user_id():
    result = validate_refresh_request({"user_id": "  user42 \n"})
    assert result.value.user_id == "user42"


def test_refresh_non_mapping_body():
    assert validate_refresh_request(["user42"]) == INVALID_USER_ID


def test_currently_playing_checks_access_token_then_user_id():
    assert validate_currently_playing_request({"user_id": "user42"}) == INVALID_ACCESS_TOKEN
    assert validate_currently_playing_request({"access_token": "  ", "user_id": ""}) == INVALID_ACCESS_TOKEN
    assert validate_currently_playing_request({"access_token": "AT"}) == INVALID_USER_ID


def test_currently_playing_trims():
    result = validate_currently_playing_request({"access_token": " AT ", "user_id": " user42 "})
    assert result.value.access_token == "AT"
    assert result.value.user_id == "user42"


def test_validate_request_order():
    # content type wins over a broken body
    assert validate_request({}, b"{not json", validate_refresh_request) == INVALID_CONTENT_TYPE
    assert validate_request({"content-type": "application/json"}, b"{not json", validate_refresh_request) == INVALID_JSON
    assert validate_request({"content-type": "application/json"}, b"", validate_refresh_request) == INVALID_JSON

    ok = validate_request({"content-type": "application/json"}, body({"user_id": "u"}), validate_refresh_request)
    assert ok.value.user_id == "u"


def test_validation_error_maps_to_400():
    err = INVALID_CODE_VERIFIER.as_flow_error()
    assert err.status == 400
    assert err.code == "INVALID_CODE_VERIFIER"
