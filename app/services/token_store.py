# app/services/token_store.py
import base64
import json
import logging
import time
from typing import Optional, Protocol

import redis
from google.cloud import firestore
from google.oauth2 import service_account

from app.config.settings import ConfigError, TokenStoreSettings

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Durable user_id -> refresh_token mapping. Only the refresh token is ever stored."""

    def get(self, user_id: str) -> Optional[str]:
        ...

    def put(self, user_id: str, refresh_token: str) -> None:
        ...


class RedisTokenStore:
    def __init__(self, client: redis.Redis, key_prefix: str = "spotify:refresh_token:"):
        self.redis = client
        self.key_prefix = key_prefix

    @classmethod
    def from_settings(cls, settings: TokenStoreSettings) -> "RedisTokenStore":
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            decode_responses=True,
            socket_timeout=settings.timeout_seconds,
            socket_connect_timeout=settings.timeout_seconds,
        )
        return cls(client, key_prefix=settings.redis_key_prefix)

    def _key(self, user_id: str) -> str:
        return f"{self.key_prefix}{user_id}"

    def get(self, user_id: str) -> Optional[str]:
        return self.redis.get(self._key(user_id)) or None

    def put(self, user_id: str, refresh_token: str) -> None:
        # No expiry: the token lives until Spotify rotates it
        self.redis.set(self._key(user_id), refresh_token)


def _firestore_client(credentials_b64: Optional[str]) -> firestore.Client:
    """
    Build a Firestore client from a base64 service-account JSON when one is
    configured (Render and other non-GCP hosts), else from default credentials.
    """
    if not credentials_b64:
        return firestore.Client()

    try:
        creds_json = json.loads(base64.b64decode(credentials_b64))
    except ValueError as e:
        raise ConfigError(f"Failed to decode GOOGLE_CLOUD_CREDENTIALS: {e}")

    creds = service_account.Credentials.from_service_account_info(creds_json)
    return firestore.Client(credentials=creds, project=creds.project_id)


class FirestoreTokenStore:
    def __init__(self, db: firestore.Client, collection: str = "spotify_refresh_tokens", timeout: float = 5.0):
        self.db = db
        self.collection = collection
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: TokenStoreSettings) -> "FirestoreTokenStore":
        db = _firestore_client(settings.google_cloud_credentials)
        return cls(db, collection=settings.firestore_collection, timeout=settings.timeout_seconds)

    def get(self, user_id: str) -> Optional[str]:
        doc = self.db.collection(self.collection).document(user_id).get(timeout=self.timeout)
        if not doc.exists:
            return None
        return (doc.to_dict() or {}).get("refresh_token") or None

    def put(self, user_id: str, refresh_token: str) -> None:
        # Overwrite: only the latest refresh token per user is kept
        self.db.collection(self.collection).document(user_id).set(
            {
                "refresh_token": refresh_token,
                "updated_at": int(time.time()),
            },
            timeout=self.timeout,
        )


def build_token_store(settings: TokenStoreSettings) -> TokenStore:
    if settings.backend == "firestore":
        logger.info("Using Firestore token store (collection=%s)", settings.firestore_collection)
        return FirestoreTokenStore.from_settings(settings)

    logger.info("Using Redis token store (%s:%s)", settings.redis_host, settings.redis_port)
    return RedisTokenStore.from_settings(settings)
