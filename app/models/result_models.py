# app/models/result_models.py
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ProviderErrorKind(str, Enum):
    PROVIDER_HTTP = "provider_http"   # Spotify answered with an error status or error body
    TRANSPORT = "transport"           # request timed out
    PROTOCOL = "protocol"             # 2xx but the body is not what Spotify documents


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ProviderErrorKind
    status: Optional[int] = None
    message: str = ""


Result = Union[Ok[T], Err]
