"""
Configuration management for errplay.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field


def _default_session_id() -> str:
    # The reloader process outlives its children, so its pid scopes the session.
    return f"ppid-{os.getppid()}"


@dataclass
class Config:
    """Main configuration class."""

    # Build mode; capture is active only in development
    environment: str = "production"

    # Collector
    collector_url: str = "http://localhost:7532"
    endpoint: str = "/__dev__/errors"
    transport_timeout: float = 2.0

    # Session-scoped storage
    session_id: str = field(default_factory=_default_session_id)
    session_dir: Path = Path(tempfile.gettempdir()) / "errplay"
    store_backend: str = "file"
    session_ttl_seconds: int = 3600

    # Redis configuration
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # Server configuration
    server_host: str = "localhost"
    server_port: int = 7532

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def session_path(self, session_id: Optional[str] = None) -> Path:
        """Directory holding one session's persisted keys."""
        return self.session_dir / (session_id or self.session_id)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        return cls(
            environment=os.getenv("ERRPLAY_ENV") or os.getenv("PYTHON_ENV", "production"),
            collector_url=os.getenv("ERRPLAY_COLLECTOR_URL", "http://localhost:7532"),
            endpoint=os.getenv("ERRPLAY_ENDPOINT", "/__dev__/errors"),
            transport_timeout=float(os.getenv("ERRPLAY_TRANSPORT_TIMEOUT", "2.0")),
            session_id=os.getenv("ERRPLAY_SESSION_ID") or _default_session_id(),
            session_dir=Path(os.getenv("ERRPLAY_SESSION_DIR", str(Path(tempfile.gettempdir()) / "errplay"))),
            store_backend=os.getenv("ERRPLAY_STORE", "file"),
            session_ttl_seconds=int(os.getenv("ERRPLAY_SESSION_TTL", "3600")),
            redis_host=os.getenv("ERRPLAY_REDIS_HOST", "localhost"),
            redis_port=int(os.getenv("ERRPLAY_REDIS_PORT", "6379")),
            redis_db=int(os.getenv("ERRPLAY_REDIS_DB", "0")),
            server_host=os.getenv("ERRPLAY_HOST", "localhost"),
            server_port=int(os.getenv("ERRPLAY_PORT", "7532")),
        )


# Global config instance
config = Config.from_env()
