# app/models/error_models.py
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    AUTHENTICATION = "AuthenticationError"
    UPSTREAM_PROTOCOL = "UpstreamProtocolError"
    TOKEN_NOT_FOUND = "TokenNotFound"
    PROVIDER_API = "ProviderAPIError"
    INTERNAL = "InternalError"


HTTP_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.UPSTREAM_PROTOCOL: 502,
    ErrorKind.TOKEN_NOT_FOUND: 404,
    ErrorKind.PROVIDER_API: 400,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class FlowError:
    """A failed flow, carrying what the caller sees: message, code and HTTP status."""

    kind: ErrorKind
    code: str
    message: str

    @property
    def status(self) -> int:
        return HTTP_STATUS[self.kind]


# === Shared failures ===
TOKEN_NOT_FOUND = FlowError(ErrorKind.TOKEN_NOT_FOUND, "TOKEN_NOT_FOUND", "Refresh token not found")
TOKEN_REFRESH_FAILED = FlowError(ErrorKind.PROVIDER_API, "SPOTIFY_API_ERROR", "Token refresh failed")
SPOTIFY_UNREACHABLE = FlowError(ErrorKind.PROVIDER_API, "SPOTIFY_API_ERROR", "Spotify API did not respond")
INTERNAL_ERROR = FlowError(ErrorKind.INTERNAL, "INTERNAL_ERROR", "Internal server error")
