"""
Redis-backed session store.
Lets the queue outlive a process when the session directory is not shared.
"""

import redis
from typing import Optional

from ..config import config
from ..errors import StorageError


class RedisSessionStore:
    """
    Synchronous key/value store namespaced by session id.

    Every write refreshes the key's TTL so abandoned sessions expire on their own.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        session_id: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
    ):
        """Initialize Redis connection."""
        if redis_client:
            self.redis = redis_client
        else:
            self.redis = redis.Redis(
                host=config.redis_host,
                port=config.redis_port,
                db=config.redis_db,
                decode_responses=True,
            )

        self.session_id = session_id or config.session_id
        self.ttl_seconds = ttl_seconds or config.session_ttl_seconds

    def _key(self, key: str) -> str:
        return f"errplay:{self.session_id}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        try:
            value = self.redis.get(self._key(key))
        except redis.RedisError as e:
            raise StorageError(f"Redis GET failed: {e}") from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        """Write a value with the session TTL."""
        try:
            self.redis.set(self._key(key), value, ex=self.ttl_seconds)
        except redis.RedisError as e:
            raise StorageError(f"Redis SET failed: {e}") from e

    def remove_item(self, key: str) -> None:
        """Delete a key; absent keys are ignored."""
        try:
            self.redis.delete(self._key(key))
        except redis.RedisError as e:
            raise StorageError(f"Redis DEL failed: {e}") from e

    def test_connection(self) -> bool:
        """Test Redis connection."""
        try:
            return self.redis.ping()
        except Exception:
            return False

    def close(self) -> None:
        """Close Redis connection."""
        self.redis.close()
