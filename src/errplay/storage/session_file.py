"""
File-backed session store.
Keys live as individual files under one directory per session.
"""

import os
from pathlib import Path
from typing import Optional

from ..config import config
from ..errors import StorageError


class FileSessionStore:
    """
    Synchronous key/value store scoped to one session directory.

    Directory is created lazily on first write; writes go through a temp file
    and an atomic replace so a crash mid-write never leaves a torn value.
    """

    def __init__(self, session_dir: Optional[Path] = None):
        """Initialize store for a session directory (defaults to the configured session)."""
        self.session_dir = Path(session_dir) if session_dir else config.session_path()

    def _path(self, key: str) -> Path:
        return self.session_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Cannot read {self._path(key)}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        """Write a value atomically."""
        path = self._path(key)
        temp_file = path.with_suffix(".json.tmp")
        try:
            self.session_dir.mkdir(parents=True, exist_ok=True)
            temp_file.write_text(value, encoding="utf-8")
            os.replace(temp_file, path)
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        """Delete a key; absent keys are ignored."""
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Cannot remove {self._path(key)}: {e}") from e
