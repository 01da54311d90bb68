# app/services/validation.py
"""
Input checks for the three widget endpoints.

Every validator is pure: it returns Ok(<request model>) with trimmed values, or a
ValidationError value carrying a machine-readable code. Nothing here raises.
"""
import json
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from app.models.error_models import ErrorKind, FlowError
from app.models.result_models import Ok
from app.models.spotify_auth_models import (
    AuthRequest,
    CurrentlyPlayingRequest,
    RefreshRequest,
)

T = TypeVar("T")

MIN_CODE_LENGTH = 10
MIN_CODE_VERIFIER_LENGTH = 43   # RFC 7636 lower bound


@dataclass(frozen=True)
class ValidationError:
    code: str
    message: str

    def as_flow_error(self) -> FlowError:
        return FlowError(ErrorKind.VALIDATION, self.code, self.message)


INVALID_CONTENT_TYPE = ValidationError("INVALID_CONTENT_TYPE", "Content-Type must be application/json")
INVALID_JSON = ValidationError("INVALID_JSON", "Request body must be valid JSON")
INVALID_CODE = ValidationError("INVALID_CODE", "Invalid authorization code")
INVALID_CODE_VERIFIER = ValidationError("INVALID_CODE_VERIFIER", "Invalid code verifier")
INVALID_USER_ID = ValidationError("INVALID_USER_ID", "Invalid user_id provided")
INVALID_ACCESS_TOKEN = ValidationError("INVALID_ACCESS_TOKEN", "Invalid access_token provided")


def _as_mapping(body: Any) -> Mapping[str, Any]:
    return body if isinstance(body, Mapping) else {}


def _trimmed(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def validate_content_type(headers: Mapping[str, str]) -> Optional[ValidationError]:
    content_type = None
    for key, value in headers.items():
        if key.lower() == "content-type":
            content_type = value
            break

    if not content_type or "application/json" not in content_type.lower():
        return INVALID_CONTENT_TYPE
    return None


def parse_json_body(raw: bytes) -> Union[Ok[Any], ValidationError]:
    try:
        return Ok(json.loads(raw))
    except (TypeError, ValueError):
        return INVALID_JSON


def validate_request(
    headers: Mapping[str, str],
    raw_body: bytes,
    validate_body: Callable[[Any], Union[Ok[T], ValidationError]],
) -> Union[Ok[T], ValidationError]:
    """Content type first, then JSON decoding, then the endpoint's field rules."""
    bad_content_type = validate_content_type(headers)
    if bad_content_type is not None:
        return bad_content_type

    parsed = parse_json_body(raw_body)
    if isinstance(parsed, ValidationError):
        return parsed

    return validate_body(parsed.value)


def validate_auth_request(body: Any) -> Union[Ok[AuthRequest], ValidationError]:
    data = _as_mapping(body)
    code = data.get("code")
    code_verifier = data.get("code_verifier")

    if not isinstance(code, str) or len(code) < MIN_CODE_LENGTH:
        return INVALID_CODE

    if not isinstance(code_verifier, str) or len(code_verifier) < MIN_CODE_VERIFIER_LENGTH:
        return INVALID_CODE_VERIFIER

    return Ok(AuthRequest(code=code, code_verifier=code_verifier))


def validate_refresh_request(body: Any) -> Union[Ok[RefreshRequest], ValidationError]:
    user_id = _trimmed(_as_mapping(body).get("user_id"))
    if user_id is None:
        return INVALID_USER_ID

    return Ok(RefreshRequest(user_id=user_id))


def validate_currently_playing_request(body: Any) -> Union[Ok[CurrentlyPlayingRequest], ValidationError]:
    data = _as_mapping(body)

    access_token = _trimmed(data.get("access_token"))
    if access_token is None:
        return INVALID_ACCESS_TOKEN

    user_id = _trimmed(data.get("user_id"))
    if user_id is None:
        return INVALID_USER_ID

    return Ok(CurrentlyPlayingRequest(access_token=access_token, user_id=user_id))
