# app/models/token_model.py
from pydantic import BaseModel, Field


class TokenGrant(BaseModel):
    """Successful answer of Spotify's token endpoint (either grant type)."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None
    expires_in: int | None = None
    token_type: str | None = None
    scope: str | None = None
