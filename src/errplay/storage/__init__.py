"""
Session-scoped storage backends for errplay.
"""

import redis
from typing import Optional, Protocol

from ..config import Config, config
from ..errors import ConfigurationError
from .session_file import FileSessionStore
from .session_redis import RedisSessionStore


class SessionStore(Protocol):
    """Synchronous key/value store scoped to one development session."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


def create_session_store(cfg: Optional[Config] = None, session_id: Optional[str] = None) -> SessionStore:
    """Build the store selected by ``store_backend``."""
    cfg = cfg or config
    if cfg.store_backend == "redis":
        client = redis.Redis(
            host=cfg.redis_host,
            port=cfg.redis_port,
            db=cfg.redis_db,
            decode_responses=True,
        )
        return RedisSessionStore(
            redis_client=client,
            session_id=session_id or cfg.session_id,
            ttl_seconds=cfg.session_ttl_seconds,
        )
    if cfg.store_backend == "file":
        return FileSessionStore(session_dir=cfg.session_path(session_id))
    raise ConfigurationError(f"Unknown store backend: {cfg.store_backend!r}")


__all__ = [
    "SessionStore",
    "FileSessionStore",
    "RedisSessionStore",
    "create_session_store",
]
