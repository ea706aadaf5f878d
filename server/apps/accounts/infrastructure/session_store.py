"""Redis-backed session token store.

A session is a single ``auth_<token>`` key holding the user id. The key
expires on its own after the configured TTL, so no sweep is needed and
the existence of the key is the only proof of authentication.
"""

import logging
import secrets
from functools import lru_cache
from typing import Final, final

import redis
from django.conf import settings

from server.apps.core.exceptions import StoreError
from server.apps.core.infrastructure.redis_client import create_redis_client

logger = logging.getLogger(__name__)

_KEY_PREFIX: Final = 'auth_'

# Token length in bytes (generates 32 hex chars)
_TOKEN_BYTES: Final = 16


@final
class SessionStore:
    """Issues, resolves and revokes opaque session tokens.

    Callers only see tokens and user ids, so the token scheme can change
    without touching them.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int) -> None:
        """Initialize the store.

        Args:
            client: Redis client (``decode_responses=True``).
            ttl_seconds: Lifetime of every issued token.
        """
        self._client = client
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        """Lifetime of issued tokens in seconds."""
        return self._ttl_seconds

    def connect(self) -> None:
        """Verify the connection to Redis.

        Raises:
            StoreError: If Redis can't be reached.
        """
        try:
            self._client.ping()
        except redis.RedisError as exc:
            logger.exception('Session store is unreachable')
            raise StoreError('Session store is unavailable') from exc

    def is_alive(self) -> bool:
        """Check whether Redis answers.

        Returns:
            True if ``connect()`` succeeds, False otherwise.
        """
        try:
            self.connect()
        except StoreError:
            return False
        return True

    def issue(self, user_id: int | str) -> str:
        """Create a new token for the user.

        Args:
            user_id: Id of the authenticated user.

        Returns:
            The new token.

        Raises:
            StoreError: If the token can't be stored.
        """
        token = secrets.token_hex(_TOKEN_BYTES)
        try:
            self._client.set(
                self._key(token),
                str(user_id),
                ex=self._ttl_seconds,
            )
        except redis.RedisError as exc:
            raise StoreError('Failed to store session') from exc
        logger.info('Session issued for user %s: %s', user_id, token[:8])
        return token

    def resolve(self, token: str) -> str | None:
        """Look up the user id behind a token.

        Does not extend the token's lifetime.

        Args:
            token: Session token.

        Returns:
            User id, or None if the token is unknown or expired.

        Raises:
            StoreError: If Redis fails.
        """
        try:
            return self._client.get(self._key(token))
        except redis.RedisError as exc:
            raise StoreError('Failed to read session') from exc

    def revoke(self, token: str) -> bool:
        """Delete a token.

        Args:
            token: Session token.

        Returns:
            True if the token existed, False otherwise.

        Raises:
            StoreError: If Redis fails.
        """
        try:
            deleted = self._client.delete(self._key(token))
        except redis.RedisError as exc:
            raise StoreError('Failed to delete session') from exc

        if deleted:
            logger.info('Session revoked: %s', token[:8])
        return deleted > 0

    def _key(self, token: str) -> str:
        return f'{_KEY_PREFIX}{token}'


@lru_cache
def get_session_store() -> SessionStore:
    """Get the process-wide session store.

    Returns:
        SessionStore built from ``SESSION_STORE_URL`` and ``AUTH_TOKEN_TTL``.
    """
    return SessionStore(
        create_redis_client(settings.SESSION_STORE_URL),
        ttl_seconds=settings.AUTH_TOKEN_TTL,
    )
